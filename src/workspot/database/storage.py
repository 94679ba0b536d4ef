"""
Storage de imágenes de propiedades (Supabase Storage).
"""

import mimetypes
import uuid
from dataclasses import dataclass
from typing import Optional

import structlog

from workspot.config import get_settings
from workspot.database.supabase_client import get_supabase_client, SupabaseClient
from workspot.errors import QueryFailed

logger = structlog.get_logger()


@dataclass
class ImageUpload:
    """Archivo de imagen elegido en el formulario."""

    filename: str
    data: bytes
    content_type: Optional[str] = None

    @property
    def resolved_content_type(self) -> str:
        if self.content_type:
            return self.content_type
        guessed, _ = mimetypes.guess_type(self.filename)
        return guessed or "application/octet-stream"


class ImageStorage:
    """Sube imágenes al bucket y resuelve su URL de descarga."""

    def __init__(
        self,
        client: Optional[SupabaseClient] = None,
        bucket: Optional[str] = None,
    ):
        self._client = client or get_supabase_client()
        self.bucket = bucket or get_settings().storage_bucket

    def put(self, image: ImageUpload, prefix: str = "properties") -> str:
        """
        Sube una imagen.

        Returns:
            Path del objeto dentro del bucket

        Raises:
            QueryFailed: Si el storage rechaza la subida
        """
        path = f"{prefix}/{uuid.uuid4().hex}_{image.filename}"
        try:
            self._client.bucket(self.bucket).upload(
                path,
                image.data,
                {"content-type": image.resolved_content_type},
            )
        except Exception as e:
            logger.error("Error subiendo imagen", path=path, error=str(e))
            raise QueryFailed(
                f"Failed to upload image {image.filename}.",
                details={"operation": "storage.put", "path": path},
            ) from e
        logger.info("Imagen subida", path=path, bytes=len(image.data))
        return path

    def download_url(self, path: str) -> str:
        """URL pública de un objeto del bucket."""
        return self._client.bucket(self.bucket).get_public_url(path)
