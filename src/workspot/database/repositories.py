"""
Repositorios para operaciones CRUD en Supabase.

Cada repositorio maneja una tabla/entidad específica. Toda falla del
store sale como QueryFailed (ver SupabaseClient.execute).
"""

from datetime import datetime, timezone
from typing import Any, Optional

import structlog

from workspot.database.supabase_client import get_supabase_client, SupabaseClient
from workspot.models import Message, Property, User
from workspot.models.property import normalize_location

logger = structlog.get_logger()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class BaseRepository:
    """Clase base para repositorios."""

    TABLE = ""

    def __init__(self, client: Optional[SupabaseClient] = None):
        self._client = client or get_supabase_client()

    @property
    def client(self) -> SupabaseClient:
        return self._client

    def _select(self, columns: str = "*"):
        return self.client.table(self.TABLE).select(columns)

    def _first(self, rows: list[dict]) -> Optional[dict]:
        return rows[0] if rows else None


class PropertyRepository(BaseRepository):
    """
    Repositorio de propiedades.

    Expone las tres primitivas de lectura que usa el planner:
    fetch_all, fetch_where_equal y fetch_in_range. Una igualdad y un rango
    sobre campos distintos nunca se combinan en la misma query.
    """

    TABLE = "properties"

    def fetch_all(self) -> list[dict]:
        """Trae la colección completa."""
        return self.client.execute(self._select(), "properties.fetch_all")

    def fetch_where_equal(self, constraints: dict[str, Any]) -> list[dict]:
        """Trae las propiedades que cumplen todas las igualdades."""
        query = self._select()
        for field, value in constraints.items():
            query = query.eq(field, value)
        return self.client.execute(
            query, "properties.fetch_where_equal", constraints=constraints
        )

    def fetch_in_range(
        self,
        field: str,
        minimum: Optional[float] = None,
        maximum: Optional[float] = None,
    ) -> list[dict]:
        """Trae las propiedades con minimum <= field <= maximum (un solo campo)."""
        query = self._select()
        if minimum is not None:
            query = query.gte(field, minimum)
        if maximum is not None:
            query = query.lte(field, maximum)
        return self.client.execute(
            query,
            "properties.fetch_in_range",
            field=field,
            minimum=minimum,
            maximum=maximum,
        )

    def get_by_id(self, property_id: str) -> Optional[dict]:
        """Obtiene una propiedad por su UUID."""
        rows = self.client.execute(
            self._select().eq("id", property_id).limit(1),
            "properties.get_by_id",
            property_id=property_id,
        )
        return self._first(rows)

    def get_many(self, property_ids: list[str]) -> list[dict]:
        """Obtiene varias propiedades por ID. IDs inexistentes se ignoran."""
        if not property_ids:
            return []
        return self.client.execute(
            self._select().in_("id", property_ids), "properties.get_many"
        )

    def create(self, prop: Property) -> dict:
        """
        Inserta una nueva propiedad.

        Returns:
            El registro insertado con su ID
        """
        rows = self.client.execute(
            self.client.table(self.TABLE).insert(prop.to_db_dict()),
            "properties.create",
        )
        created = self._first(rows) or {}
        logger.info(
            "Propiedad creada",
            property_id=created.get("id"),
            type=prop.type,
            user_id=prop.user_id,
        )
        return created

    def update(self, property_id: str, changes: dict[str, Any]) -> dict:
        """Actualiza campos de una propiedad."""
        data = {**changes, "updated_at": _now()}
        if "location" in data:
            data["location"] = normalize_location(data["location"])
        rows = self.client.execute(
            self.client.table(self.TABLE).update(data).eq("id", property_id),
            "properties.update",
            property_id=property_id,
        )
        return self._first(rows) or {}

    def delete(self, property_id: str) -> bool:
        """Elimina una propiedad. Devuelve False si no existía."""
        rows = self.client.execute(
            self.client.table(self.TABLE).delete().eq("id", property_id),
            "properties.delete",
            property_id=property_id,
        )
        logger.info("Propiedad eliminada", property_id=property_id, found=bool(rows))
        return len(rows) > 0


class UserRepository(BaseRepository):
    """Repositorio para perfiles de usuario."""

    TABLE = "users"

    def create(self, user: User) -> dict:
        """Crea el perfil (el id viene del proveedor de auth)."""
        rows = self.client.execute(
            self.client.table(self.TABLE).upsert(user.to_db_dict(), on_conflict="id"),
            "users.create",
        )
        logger.info("Usuario creado", user_id=user.id, role=user.role)
        return self._first(rows) or {}

    def get_by_id(self, user_id: str) -> Optional[dict]:
        """Obtiene un usuario por su UID."""
        rows = self.client.execute(
            self._select().eq("id", user_id).limit(1),
            "users.get_by_id",
            user_id=user_id,
        )
        return self._first(rows)

    def update(self, user_id: str, changes: dict[str, Any]) -> dict:
        """Actualiza campos del perfil."""
        rows = self.client.execute(
            self.client.table(self.TABLE)
            .update({**changes, "updated_at": _now()})
            .eq("id", user_id),
            "users.update",
            user_id=user_id,
        )
        return self._first(rows) or {}

    def add_favorite(self, user_id: str, property_id: str) -> list[str]:
        """Agrega una propiedad a favoritos. Devuelve la lista resultante."""
        user = self.get_by_id(user_id)
        if not user:
            return []
        favorites = list(user.get("favorites") or [])
        if property_id not in favorites:
            favorites.append(property_id)
            self.update(user_id, {"favorites": favorites})
        return favorites

    def remove_favorite(self, user_id: str, property_id: str) -> list[str]:
        """Quita una propiedad de favoritos. Devuelve la lista resultante."""
        user = self.get_by_id(user_id)
        if not user:
            return []
        favorites = [f for f in (user.get("favorites") or []) if f != property_id]
        self.update(user_id, {"favorites": favorites})
        return favorites


class MessageRepository(BaseRepository):
    """Repositorio para mensajes entre usuarios."""

    TABLE = "messages"

    def create(self, message: Message) -> dict:
        """Registra un mensaje."""
        rows = self.client.execute(
            self.client.table(self.TABLE).insert(message.to_db_dict()),
            "messages.create",
        )
        logger.info(
            "Mensaje enviado",
            sender_id=message.sender_id,
            receiver_id=message.receiver_id,
            property_id=message.property_id,
        )
        return self._first(rows) or {}

    def get_received(self, user_id: str) -> list[dict]:
        """Mensajes recibidos por un usuario (sin orden garantizado)."""
        return self.client.execute(
            self._select().eq("receiver_id", user_id),
            "messages.get_received",
            user_id=user_id,
        )

    def get_between(self, sender_id: str, receiver_id: str) -> list[dict]:
        """Mensajes en una sola dirección: sender -> receiver."""
        return self.client.execute(
            self._select().eq("sender_id", sender_id).eq("receiver_id", receiver_id),
            "messages.get_between",
        )

    def mark_as_read(self, message_id: str) -> bool:
        """Marca un mensaje como leído."""
        rows = self.client.execute(
            self.client.table(self.TABLE).update({"read": True}).eq("id", message_id),
            "messages.mark_as_read",
            message_id=message_id,
        )
        return len(rows) > 0
