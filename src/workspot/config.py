"""
Configuración centralizada del sistema.
Carga variables de entorno y define settings globales.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Encontrar la raíz del proyecto (donde está el .env)
# config.py -> workspot/ -> src/ -> project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Configuración principal de la aplicación."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Supabase
    supabase_url: str = Field(..., description="URL del proyecto Supabase")
    supabase_key: str = Field(..., description="Anon key de Supabase")
    supabase_service_key: Optional[str] = Field(
        None, description="Service role key para operaciones admin"
    )
    storage_bucket: str = Field(
        "property-images", description="Bucket de Supabase Storage para imágenes"
    )

    # Auth
    oauth_redirect_url: Optional[str] = Field(
        None, description="URL de retorno del login federado (Google)"
    )

    # Servicio de predicción
    prediction_base_url: str = Field(
        "http://localhost:5000", description="URL base del servicio de predicción"
    )
    coworking_endpoint: Literal["/predict/coworking", "/api/predict/coworking"] = Field(
        "/predict/coworking", description="Path del modelo de coworking"
    )
    office_rent_endpoint: Literal["/predict/office_rent", "/api/predict/office-rent"] = Field(
        "/predict/office_rent", description="Path del modelo de oficinas"
    )
    generic_endpoint: Literal["/api/predict"] = Field(
        "/api/predict", description="Path del modelo genérico (bedrooms/bathrooms/area)"
    )
    coworking_payload_keys: Literal["snake", "display"] = Field(
        "snake",
        description="Formato de keys del payload de coworking: 'wifi' (snake) o 'Wifi' (display)",
    )
    office_rent_payload_keys: Literal["snake", "display"] = Field(
        "snake", description="Formato de keys del payload de office_rent"
    )

    # Búsqueda
    pushdown_policy: Literal["conditional", "memory", "always"] = Field(
        "conditional",
        description=(
            "conditional: igualdades al store solo sin rango de precio; "
            "memory: todo en memoria; always: siempre empujar igualdades"
        ),
    )

    # Logging
    log_level: str = Field("INFO", description="Nivel de logging")


@lru_cache
def get_settings() -> Settings:
    """Obtiene la configuración cacheada."""
    return Settings()


# Constantes del sistema
CITIES = [
    "noida",
    "new_delhi",
    "gurgaon",
    "bangalore",
    "ahmedabad",
    "chennai",
    "hyderabad",
    "mumbai",
    "pune",
    "kolkata",
]

COWORKING_TYPES = [
    "coworking_dedicated_desk",
    "coworking_private_cabin",
    "coworking_managed_office",
]

OFFICE_RENT_TYPE = "office_rent"

LEGACY_PROPERTY_TYPES = [
    "house",
    "apartment",
    "condo",
    "townhouse",
    "loft",
    "land",
    "commercial",
    "other",
]

USER_ROLES = ["buyer", "seller", "both"]
