"""
Modelo de Mensaje

Mensajes direccionales sin hilo. La "conversación" se arma en memoria
uniendo los mensajes en ambas direcciones.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Message(BaseModel):
    """Mensaje de un usuario a otro, opcionalmente sobre una propiedad."""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = Field(None, description="UUID generado por Supabase")
    sender_id: str
    sender_email: Optional[str] = None
    receiver_id: str
    property_id: Optional[str] = None
    content: str
    read: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("created_at", mode="after")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_db_dict(self) -> dict:
        """Convierte a diccionario para inserción en Supabase."""
        return self.model_dump(mode="json", exclude={"id"})
