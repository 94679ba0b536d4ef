"""
Excepciones del sistema.

Toda falla que llega al usuario es una subclase de WorkspotError y lleva
un mensaje presentable, un código estable y detalles opcionales.
"""

from dataclasses import dataclass
from typing import Any, Optional


class WorkspotError(Exception):
    """Base de las excepciones de la aplicación."""

    error_code = "WORKSPOT_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(WorkspotError):
    """Precondición de formulario o filtro no cumplida. No hubo llamada de red."""

    error_code = "VALIDATION_ERROR"


class QueryFailed(WorkspotError):
    """Falló una lectura o escritura contra el store."""

    error_code = "QUERY_FAILED"


class PredictionUnavailable(WorkspotError):
    """El servicio de predicción falló o devolvió una respuesta inutilizable."""

    error_code = "PREDICTION_UNAVAILABLE"


class AuthError(WorkspotError):
    """Error del proveedor de autenticación, ya traducido al usuario."""

    error_code = "AUTH_ERROR"

    @property
    def provider_code(self) -> Optional[str]:
        return self.details.get("code")


class AccessDenied(WorkspotError):
    """El usuario no tiene el rol requerido para la operación."""

    error_code = "ACCESS_DENIED"


class NotFound(WorkspotError):
    """El registro pedido no existe."""

    error_code = "NOT_FOUND"


@dataclass(frozen=True)
class Notice:
    """Feedback visible para el usuario (toast / banner)."""

    level: str  # "info" | "error"
    title: str
    message: str

    @classmethod
    def error(cls, title: str, message: str) -> "Notice":
        return cls(level="error", title=title, message=message)

    @classmethod
    def info(cls, title: str, message: str) -> "Notice":
        return cls(level="info", title=title, message=message)

    @classmethod
    def from_exception(cls, title: str, exc: Exception) -> "Notice":
        message = exc.message if isinstance(exc, WorkspotError) else str(exc)
        return cls.error(title, message or title)
