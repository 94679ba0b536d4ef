"""
Carga del dashboard de usuario.

Tres secciones independientes: propiedades propias, favoritas y mensajes
recibidos. Se cargan en paralelo y cada una falla por separado: un error
en mensajes no impide mostrar las propiedades.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Optional

import structlog

from workspot.database import PropertyRepository
from workspot.errors import Notice
from workspot.favorites import FavoritesService
from workspot.messaging import MessageService
from workspot.models import Message, Property, PropertyFilter, User
from workspot.search import QueryPlanner, parse_properties, sort_properties

logger = structlog.get_logger()

SECTION_ERRORS = {
    "properties": "Failed to load your properties",
    "favorites": "Failed to load your favorite properties",
    "messages": "Failed to load your messages",
}


@dataclass
class DashboardView:
    properties: list[Property] = field(default_factory=list)
    favorites: list[Property] = field(default_factory=list)
    messages: list[Message] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def unread_count(self) -> int:
        return sum(1 for m in self.messages if not m.read)


class DashboardLoader:
    """Arma el DashboardView de un usuario."""

    def __init__(
        self,
        planner: Optional[QueryPlanner] = None,
        repository: Optional[PropertyRepository] = None,
        messages: Optional[MessageService] = None,
        favorites: Optional[FavoritesService] = None,
    ):
        self.repository = repository or PropertyRepository()
        self.planner = planner or QueryPlanner(self.repository)
        self.messages = messages or MessageService()
        self.favorites = favorites or FavoritesService()

    async def load(self, user: User) -> DashboardView:
        """
        Carga las tres secciones en paralelo.

        Nunca falla en conjunto: las secciones con error quedan vacías y
        su mensaje queda en view.errors.
        """
        results = await asyncio.gather(
            asyncio.to_thread(self._own_properties, user),
            asyncio.to_thread(self._favorite_properties, user),
            asyncio.to_thread(self.messages.inbox, user.id),
            return_exceptions=True,
        )

        view = DashboardView()
        for section, result in zip(("properties", "favorites", "messages"), results):
            if isinstance(result, Exception):
                logger.error(
                    "Error cargando sección del dashboard",
                    section=section,
                    user_id=user.id,
                    error=str(result),
                )
                view.errors[section] = SECTION_ERRORS[section]
            elif isinstance(result, BaseException):
                raise result
            else:
                setattr(view, section, result)

        logger.info(
            "Dashboard cargado",
            user_id=user.id,
            properties=len(view.properties),
            favorites=len(view.favorites),
            messages=len(view.messages),
            failed=sorted(view.errors),
        )
        return view

    def remove_favorite(self, view: DashboardView, user: User, property_id: str) -> Optional[Notice]:
        """Quita un favorito y lo saca de la vista si salió bien."""
        notice = self.favorites.remove(user, property_id)
        if notice is None:
            view.favorites = [p for p in view.favorites if p.id != property_id]
        return notice

    def mark_as_read(self, view: DashboardView, message_id: str) -> Optional[Notice]:
        notice = self.messages.mark_as_read(message_id)
        if notice is None:
            view.messages = [
                m.model_copy(update={"read": True}) if m.id == message_id else m
                for m in view.messages
            ]
        return notice

    def _own_properties(self, user: User) -> list[Property]:
        return self.planner.search(PropertyFilter(user_id=user.id))

    def _favorite_properties(self, user: User) -> list[Property]:
        if not user.favorites:
            return []
        rows = self.repository.get_many(list(user.favorites))
        return sort_properties(parse_properties(rows))
