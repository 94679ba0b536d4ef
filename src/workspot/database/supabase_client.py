"""
Cliente de Supabase.

Singleton para conexión a la base de datos, al storage y a auth.
"""

from functools import lru_cache
from typing import Any, Optional

import structlog
from supabase import create_client, Client

from workspot.config import get_settings
from workspot.errors import QueryFailed

logger = structlog.get_logger()


class SupabaseClient:
    """Wrapper del cliente de Supabase con métodos de utilidad."""

    def __init__(self, client: Client):
        self._client = client

    @property
    def client(self) -> Client:
        """Acceso directo al cliente de Supabase."""
        return self._client

    @property
    def auth(self):
        """Cliente de autenticación (GoTrue)."""
        return self._client.auth

    def table(self, name: str):
        """Acceso a una tabla específica."""
        return self._client.table(name)

    def bucket(self, name: str):
        """Acceso a un bucket de Storage."""
        return self._client.storage.from_(name)

    def execute(self, query: Any, operation: str, **context) -> list[dict]:
        """
        Ejecuta una query y devuelve las filas.

        Args:
            query: Query builder de postgrest ya armado
            operation: Nombre de la operación (para logs)

        Returns:
            Lista de filas (vacía si no hubo resultados)

        Raises:
            QueryFailed: Si el store devuelve error o no responde
        """
        try:
            response = query.execute()
        except Exception as e:
            logger.error(
                "Error ejecutando query",
                operation=operation,
                error=str(e),
                **context,
            )
            raise QueryFailed(
                "Failed to reach the property store. Please try again later.",
                details={"operation": operation},
            ) from e
        return response.data or []


@lru_cache
def get_supabase_client() -> SupabaseClient:
    """
    Obtiene el cliente de Supabase (singleton cacheado).

    Returns:
        SupabaseClient configurado

    Raises:
        ValueError: Si las credenciales no están configuradas
    """
    settings = get_settings()

    if not settings.supabase_url or not settings.supabase_key:
        raise ValueError(
            "SUPABASE_URL y SUPABASE_KEY son requeridos. "
            "Configura las variables de entorno."
        )

    # Usar service key si está disponible para operaciones admin
    key: Optional[str] = settings.supabase_service_key or settings.supabase_key

    client = create_client(settings.supabase_url, key)
    logger.info("Cliente de Supabase inicializado", url=settings.supabase_url)

    return SupabaseClient(client)
