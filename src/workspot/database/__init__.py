"""
Módulo de base de datos.

Provee acceso a Supabase (tablas y storage) y operaciones CRUD.
"""

from workspot.database.supabase_client import get_supabase_client, SupabaseClient
from workspot.database.repositories import (
    PropertyRepository,
    UserRepository,
    MessageRepository,
)
from workspot.database.storage import ImageStorage, ImageUpload

__all__ = [
    "get_supabase_client",
    "SupabaseClient",
    "PropertyRepository",
    "UserRepository",
    "MessageRepository",
    "ImageStorage",
    "ImageUpload",
]
