"""
Criterios de búsqueda de propiedades.

Los valores centinela ("all", "any", "", None) significan "sin restricción"
y se normalizan a None al construir el filtro.
"""

from enum import Enum
from typing import Any, Literal, Mapping, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError as PydanticValidationError,
    field_validator,
)

from workspot.errors import ValidationError
from workspot.models.property import normalize_location

SENTINELS = frozenset({"", "all", "any"})


def is_sentinel(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and value.strip().lower() in SENTINELS


class SortOrder(str, Enum):
    NEWEST = "newest"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    SIZE_ASC = "size-asc"
    SIZE_DESC = "size-desc"


class PropertyFilter(BaseModel):
    """Filtro elegido por el usuario. Todos los campos son opcionales."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    type: Optional[str] = None
    min_price: Optional[float] = Field(None, alias="minPrice")
    max_price: Optional[float] = Field(None, alias="maxPrice")
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    location: Optional[str] = None
    search_term: Optional[str] = Field(None, alias="searchTerm")
    user_id: Optional[str] = Field(None, alias="userId")

    # Coworking
    seating_capacity: Optional[int] = None
    center_area: Optional[int] = None
    weekly_hours: Optional[int] = None

    # Office rent
    floor_size: Optional[int] = None
    building_grade: Optional[int] = None
    furnishing: Optional[Literal["furnished", "unfurnished"]] = None

    @field_validator("*", mode="before")
    @classmethod
    def _drop_sentinels(cls, value: Any) -> Any:
        if is_sentinel(value):
            return None
        return value.strip() if isinstance(value, str) else value

    @field_validator(
        "bedrooms",
        "bathrooms",
        "seating_capacity",
        "center_area",
        "weekly_hours",
        "floor_size",
        "building_grade",
        mode="before",
    )
    @classmethod
    def _parse_int(cls, value: Any) -> Any:
        # "2.5" -> 2, igual que un select de "2+"
        if is_sentinel(value):
            return None
        if isinstance(value, str):
            try:
                return int(float(value))
            except ValueError:
                raise ValueError(f"número inválido: {value!r}")
        if isinstance(value, float):
            return int(value)
        return value

    @field_validator("location", mode="after")
    @classmethod
    def _normalize_location(cls, value: Optional[str]) -> Optional[str]:
        return normalize_location(value) if value is not None else None

    @field_validator("furnishing", mode="before")
    @classmethod
    def _lower_furnishing(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @property
    def has_price_range(self) -> bool:
        return self.min_price is not None or self.max_price is not None

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "PropertyFilter":
        """
        Construye el filtro desde parámetros crudos (query string, formulario).

        Raises:
            ValidationError: algún valor no es interpretable
        """
        try:
            return cls.model_validate(dict(params))
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid filter value",
                details={"errors": e.errors(include_url=False, include_context=False)},
            ) from e
