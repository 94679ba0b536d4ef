"""
Modelo de Property

Una propiedad publicada en el marketplace. Los listados de coworking y
oficinas guardan sus atributos en property_details; los listados legacy
usan bedrooms / bathrooms / area en el nivel superior.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from workspot.config import CITIES
from workspot.models.attributes import (
    CoworkingAttributes,
    Family,
    OfficeRentAttributes,
    PropertyDetails,
    family_of,
)


def normalize_location(value: Any) -> str:
    """
    Ubicación tal como se guarda y se compara: trim + lower.

    Las ciudades soportadas usan su slug ('New Delhi' -> 'new_delhi'),
    igual que property_details.city.
    """
    if value is None:
        return ""
    location = " ".join(str(value).split()).lower()
    slug = location.replace(" ", "_")
    return slug if slug in CITIES else location


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Property(BaseModel):
    """Propiedad tal como vive en la tabla 'properties'."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    # Identificadores
    id: Optional[str] = Field(None, description="UUID generado por Supabase")
    user_id: str = Field("", description="Dueño del listado")

    # Contenido
    title: str = Field(..., description="Título del listado")
    description: str = Field(default="", description="Descripción libre")
    type: str = Field(..., description="Tipo: coworking_*, office_rent o legacy")
    featured: bool = False

    # Ubicación
    location: str = Field(default="", description="Ubicación normalizada (ciudad)")
    address: str = Field(default="", description="Dirección")

    # Precio
    price: float = Field(default=0, description="Precio declarado por el vendedor")
    predicted_price: Optional[float] = Field(
        None, description="Precio estimado por el modelo"
    )

    # Listados legacy
    bedrooms: Optional[float] = None
    bathrooms: Optional[float] = None
    area: Optional[float] = None

    # Coworking / office_rent
    property_details: Optional[PropertyDetails] = None

    # Media
    image: str = Field(default="", description="Imagen principal")
    images: list[str] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="before")
    @classmethod
    def _attach_details_type(cls, data: Any) -> Any:
        # Los detalles guardados no repiten el tipo: se toma de la propiedad.
        # Detalles bajo un tipo legacy no significan nada y se descartan.
        if not isinstance(data, dict):
            return data
        details = data.get("property_details")
        if isinstance(details, dict):
            data = dict(data)
            if family_of(data.get("type")) == "generic":
                data["property_details"] = None
            else:
                data["property_details"] = {**details, "property_type": data.get("type")}
        return data

    @field_validator("location", mode="before")
    @classmethod
    def _normalize_location(cls, value: Any) -> str:
        return normalize_location(value)

    @field_validator("created_at", mode="after")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def family(self) -> Family:
        return family_of(self.type)

    @property
    def coworking(self) -> Optional[CoworkingAttributes]:
        if isinstance(self.property_details, CoworkingAttributes):
            return self.property_details
        return None

    @property
    def office(self) -> Optional[OfficeRentAttributes]:
        if isinstance(self.property_details, OfficeRentAttributes):
            return self.property_details
        return None

    @property
    def effective_area(self) -> Optional[float]:
        """Superficie comparable entre familias (para ordenar por tamaño)."""
        if self.area:
            return self.area
        if self.coworking and self.coworking.total_center_area:
            return self.coworking.total_center_area
        if self.office and self.office.floor_size:
            return self.office.floor_size
        return None

    def to_db_dict(self) -> dict:
        """Convierte a diccionario para inserción en Supabase."""
        data = self.model_dump(mode="json", exclude={"id"}, by_alias=True)
        if data.get("property_details"):
            # El tipo ya está en la columna 'type'
            data["property_details"].pop("property_type", None)
        return data
