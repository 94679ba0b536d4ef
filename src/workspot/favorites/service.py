"""
Favoritos del usuario: un set de IDs de propiedad guardado en su perfil.
"""

from typing import Optional

import structlog

from workspot.database import UserRepository
from workspot.errors import Notice, QueryFailed
from workspot.models import User

logger = structlog.get_logger()


class FavoritesService:
    def __init__(self, repository: Optional[UserRepository] = None):
        self.repository = repository or UserRepository()

    def add(self, user: User, property_id: str) -> list[str]:
        favorites = self.repository.add_favorite(user.id, property_id)
        user.favorites = favorites
        return favorites

    def remove(self, user: User, property_id: str) -> Optional[Notice]:
        """
        Quita un favorito.

        Returns:
            None si salió bien, un Notice de error si el store falló
        """
        try:
            user.favorites = self.repository.remove_favorite(user.id, property_id)
        except QueryFailed as e:
            logger.error(
                "No se pudo quitar favorito",
                user_id=user.id,
                property_id=property_id,
                error=e.message,
            )
            return Notice.from_exception("Could not remove favorite", e)
        return None

    def toggle(self, user: User, property_id: str) -> bool:
        """
        Agrega o quita según el estado actual.

        Returns:
            True si quedó como favorito

        Raises:
            QueryFailed: falló el store
        """
        if property_id in user.favorites:
            user.favorites = self.repository.remove_favorite(user.id, property_id)
            return False
        self.add(user, property_id)
        return True
