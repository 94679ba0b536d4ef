"""
Construcción de payloads para el servicio de predicción.

Funciones puras: mismo input, mismo payload, sin efectos. Reglas:
- todo flag booleano sale como 0/1
- todo numérico sale como número (0 si no se cargó), nunca NaN ni None
- la ciudad sale one-hot sobre CITIES
- solo se incluyen los campos de la familia activa
"""

from dataclasses import dataclass
from typing import Any, Literal, Optional, Union

from workspot.config import CITIES, Settings, get_settings
from workspot.errors import ValidationError
from workspot.models.attributes import (
    AMENITY_CATALOG,
    SELECT_TYPE_AND_CITY,
    CoworkingAttributes,
    CoworkingBuildingType,
    Family,
    Furnishing,
    GenericAttributes,
    OfficeBuildingType,
    OfficeRentAttributes,
    SiteAttributes,
)

KeyStyle = Literal["snake", "display"]

Attributes = Union[CoworkingAttributes, OfficeRentAttributes, GenericAttributes]


@dataclass(frozen=True)
class PredictionRequest:
    """Request listo para enviar: endpoint + payload plano."""

    family: Family
    endpoint: str
    payload: dict[str, Any]


def flag(value: Any) -> int:
    return 1 if value else 0


def number(value: Optional[float]) -> Union[int, float]:
    """5000.0 -> 5000; None -> 0."""
    if value is None:
        return 0
    value = float(value)
    return int(value) if value.is_integer() else value


def city_one_hot(city: str) -> dict[str, int]:
    return {f"city_{name}": flag(city == name) for name in CITIES}


def amenity_flags(attributes: SiteAttributes, key_style: KeyStyle = "snake") -> dict[str, int]:
    """Todas las amenities del catálogo, ninguna omitida."""
    amenities = attributes.amenities
    return {
        (display if key_style == "display" else snake): flag(getattr(amenities, field))
        for field, snake, display in AMENITY_CATALOG
    }


def _site_payload(attributes: SiteAttributes, key_style: KeyStyle) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "total_weekly_hours": number(attributes.total_weekly_hours),
        "days_open_per_week": number(attributes.days_open_per_week),
        "has_different_timings": flag(attributes.has_different_timings),
        "weekday_opening_time": attributes.weekday_opening_time,
        "weekday_closing_time": attributes.weekday_closing_time,
        "nearest_metro_distance": number(attributes.nearest_metro_distance),
        "nearest_bus_distance": number(attributes.nearest_bus_distance),
        "nearest_train_distance": number(attributes.nearest_train_distance),
        "nearest_airport_distance": number(attributes.nearest_airport_distance),
        "nearest_hospital_distance": number(attributes.nearest_hospital_distance),
    }
    payload.update(amenity_flags(attributes, key_style))
    payload.update(city_one_hot(attributes.city))
    return payload


def build_coworking_payload(
    attributes: CoworkingAttributes, key_style: KeyStyle = "snake"
) -> dict[str, Any]:
    """Payload del modelo de coworking (desk, cabin, managed office)."""
    payload = _site_payload(attributes, key_style)
    payload.update(
        {
            "total_center_area": number(attributes.total_center_area),
            "total_seating_capacity": number(attributes.total_seating_capacity),
            "typical_floorplate_area": number(attributes.typical_floorplate_area),
            "building_type_business_park": flag(
                attributes.building_type == CoworkingBuildingType.BUSINESS_PARK
            ),
            "building_type_independent_commercial_tower": flag(
                attributes.building_type
                == CoworkingBuildingType.INDEPENDENT_COMMERCIAL_TOWER
            ),
        }
    )
    return payload


def build_office_rent_payload(
    attributes: OfficeRentAttributes, key_style: KeyStyle = "snake"
) -> dict[str, Any]:
    """
    Payload del modelo de oficinas.

    Las columnas one-hot de furnishing / building_type llevan el casing
    con el que se entrenó el modelo (furnishing_Fully_Furnished, ...).
    """
    payload = _site_payload(attributes, key_style)
    payload.update(
        {
            "floor_size": number(attributes.floor_size),
            "lock_in": number(attributes.lock_in),
            "floors": number(attributes.floors),
            "building_grade": number(attributes.building_grade),
            "year_built": number(attributes.year_built),
            "air_conditioning": flag(attributes.amenities.air_conditioners),
            "furnishing_Fully_Furnished": flag(
                attributes.furnishing == Furnishing.FULLY_FURNISHED
            ),
            "furnishing_Unfurnished": flag(
                attributes.furnishing == Furnishing.UNFURNISHED
            ),
            "building_type_Business_Tower": flag(
                attributes.building_type == OfficeBuildingType.BUSINESS_TOWER
            ),
            "building_type_IT/ITeS": flag(
                attributes.building_type == OfficeBuildingType.IT_ITES
            ),
            "building_type_Independent_Commercial_Tower": flag(
                attributes.building_type
                == OfficeBuildingType.INDEPENDENT_COMMERCIAL_TOWER
            ),
        }
    )
    return payload


def build_generic_payload(attributes: GenericAttributes) -> dict[str, Any]:
    """Payload del modelo genérico (listados legacy)."""
    return {
        "bedrooms": number(attributes.bedrooms),
        "bathrooms": number(attributes.bathrooms),
        "area": number(attributes.area),
        "location": attributes.location,
        "property_type": attributes.property_type,
        "address": attributes.address,
    }


def validate_for_prediction(attributes: Optional[Attributes]) -> Attributes:
    """
    Precondiciones antes de pedir una predicción.

    Raises:
        ValidationError: falta el tipo de propiedad o la ciudad/ubicación
    """
    if attributes is None:
        raise ValidationError(SELECT_TYPE_AND_CITY, details={"field": "property_type"})
    if isinstance(attributes, GenericAttributes):
        if not attributes.location:
            raise ValidationError(
                "Please enter the property location", details={"field": "location"}
            )
    elif not attributes.city:
        raise ValidationError(SELECT_TYPE_AND_CITY, details={"field": "city"})
    return attributes


def prepare_request(
    attributes: Optional[Attributes], settings: Optional[Settings] = None
) -> PredictionRequest:
    """
    Valida los atributos y arma el request para la familia activa.

    El endpoint y el casing de las keys salen de la configuración.
    """
    attributes = validate_for_prediction(attributes)
    settings = settings or get_settings()

    if isinstance(attributes, CoworkingAttributes):
        return PredictionRequest(
            family="coworking",
            endpoint=settings.coworking_endpoint,
            payload=build_coworking_payload(attributes, settings.coworking_payload_keys),
        )
    if isinstance(attributes, OfficeRentAttributes):
        return PredictionRequest(
            family="office_rent",
            endpoint=settings.office_rent_endpoint,
            payload=build_office_rent_payload(
                attributes, settings.office_rent_payload_keys
            ),
        )
    return PredictionRequest(
        family="generic",
        endpoint=settings.generic_endpoint,
        payload=build_generic_payload(attributes),
    )
