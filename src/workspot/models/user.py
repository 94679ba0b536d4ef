"""
Modelo de Usuario

El rol habilita el flujo de publicación: solo 'seller' y 'both'
pueden crear listados.
"""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["buyer", "seller", "both"]

SELLER_ROLES = ("seller", "both")


class User(BaseModel):
    """Perfil de usuario en la tabla 'users'. El id es el del proveedor de auth."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="UID del proveedor de autenticación")
    email: str = Field(..., description="Email de login")
    name: Optional[str] = Field(None, description="Nombre visible")
    photo_url: Optional[str] = None
    role: Role = Field(default="buyer", description="buyer, seller o both")
    favorites: list[str] = Field(
        default_factory=list, description="IDs de propiedades favoritas"
    )
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def can_sell(self) -> bool:
        return self.role in SELLER_ROLES

    def to_db_dict(self) -> dict:
        """Convierte a diccionario para inserción en Supabase."""
        return self.model_dump(mode="json")
