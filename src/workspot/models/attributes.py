"""
Atributos de propiedad por familia.

Una propiedad pertenece a exactamente una familia:
- coworking (dedicated desk, private cabin, managed office)
- office_rent (oficina comercial)
- generic (listados legacy: house, apartment, ...)

PropertyAttributes es una unión discriminada por property_type, así los
campos de una familia solo existen cuando esa familia está activa.
"""

import math
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError as PydanticValidationError,
    field_validator,
    model_validator,
)

from workspot.config import CITIES, COWORKING_TYPES, OFFICE_RENT_TYPE
from workspot.errors import ValidationError

Family = Literal["coworking", "office_rent", "generic"]

CoworkingType = Literal[
    "coworking_dedicated_desk",
    "coworking_private_cabin",
    "coworking_managed_office",
]

LegacyType = Literal[
    "house",
    "apartment",
    "condo",
    "townhouse",
    "loft",
    "land",
    "commercial",
    "other",
]


def family_of(property_type: Optional[str]) -> Family:
    """Familia a la que pertenece un tipo de propiedad."""
    if property_type in COWORKING_TYPES:
        return "coworking"
    if property_type == OFFICE_RENT_TYPE:
        return "office_rent"
    return "generic"


def coerce_number(value: Any) -> float:
    """
    Coerción numérica de un campo de formulario.

    Vacío, None y NaN valen 0. Strings numéricos se parsean.
    Cualquier otra cosa es un error de validación.
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return 0.0 if math.isnan(value) else float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            raise ValueError(f"valor numérico inválido: {value!r}")
        return 0.0 if math.isnan(number) else number
    raise ValueError(f"valor numérico inválido: {value!r}")


def normalize_city(value: Any) -> str:
    """'New Delhi' -> 'new_delhi'. Vacío es válido (ciudad sin elegir)."""
    if value is None:
        return ""
    city = "_".join(str(value).strip().lower().split())
    if city and city not in CITIES:
        raise ValueError(f"ciudad no soportada: {value!r}")
    return city


# (campo python, key snake_case, key de display)
AMENITY_CATALOG: list[tuple[str, str, str]] = [
    ("two_wheeler_parking", "2_wheeler_parking", "2 wheeler parking"),
    ("four_wheeler_parking", "4_wheeler_parking", "4 wheeler parking"),
    ("air_conditioners", "air_conditioners", "Air Conditioners"),
    ("air_filters", "air_filters", "Air Filters"),
    ("breakout_recreational_area", "breakout_recreational_area", "Breakout & Recreational Area"),
    ("bus", "bus", "Bus"),
    ("cafeteria", "cafeteria", "Cafeteria"),
    ("chairs_desks", "chairs_desks", "Chairs & Desks"),
    ("charging", "charging", "Charging"),
    ("coffee", "coffee", "Coffee"),
    ("conference_room", "conference_room", "Conference Room"),
    ("event_space", "event_space", "Event Space"),
    ("fire_extinguisher", "fire_extinguisher", "Fire Extinguisher"),
    ("first_aid_kit", "first_aid_kit", "First Aid Kit"),
    ("fitness_centre", "fitness_centre", "Fitness Centre"),
    ("indoor_plants", "indoor_plants", "Indoor Plants"),
    ("lan", "lan", "LAN"),
    ("library", "library", "Library"),
    ("lift", "lift", "Lift"),
    ("lounge_area", "lounge_area", "Lounge Area"),
    ("lunch", "lunch", "Lunch"),
    ("meeting_rooms", "meeting_rooms", "Meeting Rooms"),
    ("metro_connectivity", "metro_connectivity", "Metro Connectivity"),
    ("nearby_eateries", "nearby_eateries", "Nearby Eateries"),
    ("outdoor_seating", "outdoor_seating", "Outdoor Seating"),
    ("pantry_area", "pantry_area", "Pantry Area"),
    ("pet_friendly", "pet_friendly", "Pet Friendly"),
    ("phone_booth", "phone_booth", "Phone Booth"),
    ("power_backup", "power_backup", "Power Backup"),
    ("printer", "printer", "Printer"),
    ("rental_cycles_evs", "rental_cycles_evs", "Rental Cycles/EVs"),
    ("security_personnel", "security_personnel", "Security Personnel"),
    ("separate_washroom", "separate_washroom", "Separate Washroom"),
    ("shuttle", "shuttle", "Shuttle"),
    ("single_washroom", "single_washroom", "Single Washroom"),
    ("smoke_alarms", "smoke_alarms", "Smoke Alarms"),
    ("snacks_drinks", "snacks_drinks", "Snacks & Drinks"),
    ("stationery", "stationery", "Stationery"),
    ("storage_space", "storage_space", "Storage Space"),
    ("tea", "tea", "Tea"),
    ("training_room", "training_room", "Training Room"),
    ("washroom_near_premise", "washroom_near_premise", "Washroom Near Premise"),
    ("water", "water", "Water"),
    ("wellness_centre", "wellness_centre", "Wellness Centre"),
    ("wifi", "wifi", "Wifi"),
]


class Amenities(BaseModel):
    """Amenities booleanas de un espacio de coworking u oficina."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # Parking y transporte
    two_wheeler_parking: bool = Field(False, alias="2_wheeler_parking")
    four_wheeler_parking: bool = Field(False, alias="4_wheeler_parking")
    shuttle: bool = False
    rental_cycles_evs: bool = False
    bus: bool = False
    metro_connectivity: bool = False

    # Infraestructura
    air_conditioners: bool = False
    air_filters: bool = False
    power_backup: bool = False
    wifi: bool = False
    lan: bool = False
    lift: bool = False
    charging: bool = False

    # Puesto de trabajo
    chairs_desks: bool = False
    printer: bool = False
    stationery: bool = False
    storage_space: bool = False
    phone_booth: bool = False

    # Reuniones
    conference_room: bool = False
    meeting_rooms: bool = False
    training_room: bool = False
    event_space: bool = False

    # Comida
    cafeteria: bool = False
    pantry_area: bool = False
    coffee: bool = False
    tea: bool = False
    lunch: bool = False
    snacks_drinks: bool = False
    nearby_eateries: bool = False

    # Recreación
    breakout_recreational_area: bool = False
    lounge_area: bool = False
    outdoor_seating: bool = False
    fitness_centre: bool = False
    wellness_centre: bool = False
    library: bool = False

    # Seguridad
    fire_extinguisher: bool = False
    first_aid_kit: bool = False
    smoke_alarms: bool = False
    security_personnel: bool = False

    # Instalaciones
    separate_washroom: bool = False
    single_washroom: bool = False
    washroom_near_premise: bool = False
    water: bool = False

    # Extras
    indoor_plants: bool = False
    pet_friendly: bool = False


AMENITY_KEYS = frozenset(
    key for field, snake, _ in AMENITY_CATALOG for key in (field, snake)
)


class Furnishing(str, Enum):
    FULLY_FURNISHED = "fully_furnished"
    UNFURNISHED = "unfurnished"


class CoworkingBuildingType(str, Enum):
    BUSINESS_PARK = "business_park"
    INDEPENDENT_COMMERCIAL_TOWER = "independent_commercial_tower"


class OfficeBuildingType(str, Enum):
    BUSINESS_TOWER = "business_tower"
    IT_ITES = "it_ites"
    INDEPENDENT_COMMERCIAL_TOWER = "independent_commercial_tower"


def _pick_exclusive(data: dict, flags: dict[str, Enum], target: str) -> None:
    """
    Convierte flags booleanos legacy (furnishing_unfurnished=True, ...) en
    un único valor enum. Dos flags activos a la vez es un error.
    """
    active = [value for flag, value in flags.items() if data.pop(flag, False)]
    if len(active) > 1:
        raise ValueError(f"{target}: opciones mutuamente excluyentes {active}")
    if active and data.get(target) is None:
        data[target] = active[0]


class SiteAttributes(BaseModel):
    """Campos comunes a coworking y office_rent."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    city: str = ""
    total_weekly_hours: float = 0
    days_open_per_week: float = 0
    has_different_timings: bool = False
    weekday_opening_time: str = ""
    weekday_closing_time: str = ""

    # Distancias (km)
    nearest_metro_distance: float = 0
    nearest_bus_distance: float = 0
    nearest_train_distance: float = 0
    nearest_airport_distance: float = 0
    nearest_hospital_distance: float = 0

    amenities: Amenities = Field(default_factory=Amenities)

    contact_number: str = ""
    email: str = ""

    @model_validator(mode="before")
    @classmethod
    def _collect_flat_amenities(cls, data: Any) -> Any:
        # Los formularios mandan las amenities como flags sueltos
        if not isinstance(data, dict):
            return data
        flat = {key: data[key] for key in list(data) if key in AMENITY_KEYS}
        if not flat:
            return data
        data = {k: v for k, v in data.items() if k not in flat}
        amenities = data.get("amenities") or {}
        if isinstance(amenities, BaseModel):
            amenities = amenities.model_dump(by_alias=True)
        data["amenities"] = {**amenities, **flat}
        return data

    @field_validator("city", mode="before")
    @classmethod
    def _normalize_city(cls, value: Any) -> str:
        return normalize_city(value)

    @field_validator(
        "total_weekly_hours",
        "days_open_per_week",
        "nearest_metro_distance",
        "nearest_bus_distance",
        "nearest_train_distance",
        "nearest_airport_distance",
        "nearest_hospital_distance",
        mode="before",
    )
    @classmethod
    def _coerce_numbers(cls, value: Any) -> float:
        return coerce_number(value)

    @field_validator("weekday_opening_time", "weekday_closing_time", mode="before")
    @classmethod
    def _blank_times(cls, value: Any) -> str:
        return "" if value is None else str(value)


class CoworkingAttributes(SiteAttributes):
    """Espacio de coworking: desk, cabin o managed office."""

    property_type: CoworkingType

    total_center_area: float = 0
    total_seating_capacity: float = 0
    typical_floorplate_area: float = 0
    building_type: Optional[CoworkingBuildingType] = None

    @model_validator(mode="before")
    @classmethod
    def _legacy_flags(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            _pick_exclusive(
                data,
                {
                    "building_type_business_park": CoworkingBuildingType.BUSINESS_PARK,
                    "building_type_independent_commercial_tower": (
                        CoworkingBuildingType.INDEPENDENT_COMMERCIAL_TOWER
                    ),
                },
                "building_type",
            )
        return data

    @field_validator(
        "total_center_area",
        "total_seating_capacity",
        "typical_floorplate_area",
        mode="before",
    )
    @classmethod
    def _coerce_family_numbers(cls, value: Any) -> float:
        return coerce_number(value)

    @property
    def family(self) -> Family:
        return "coworking"


class OfficeRentAttributes(SiteAttributes):
    """Oficina comercial en alquiler."""

    property_type: Literal["office_rent"]

    floor_size: float = 0
    lock_in: float = Field(0, description="Lock-in en meses")
    floors: float = 0
    building_grade: float = 0
    year_built: float = 0
    furnishing: Optional[Furnishing] = None
    building_type: Optional[OfficeBuildingType] = None

    @model_validator(mode="before")
    @classmethod
    def _legacy_flags(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            _pick_exclusive(
                data,
                {
                    "furnishing_fully_furnished": Furnishing.FULLY_FURNISHED,
                    "furnishing_unfurnished": Furnishing.UNFURNISHED,
                },
                "furnishing",
            )
            _pick_exclusive(
                data,
                {
                    "building_type_business_tower": OfficeBuildingType.BUSINESS_TOWER,
                    "building_type_it_ites": OfficeBuildingType.IT_ITES,
                    "building_type_independent_commercial_tower_office": (
                        OfficeBuildingType.INDEPENDENT_COMMERCIAL_TOWER
                    ),
                },
                "building_type",
            )
        return data

    @field_validator(
        "floor_size", "lock_in", "floors", "building_grade", "year_built", mode="before"
    )
    @classmethod
    def _coerce_family_numbers(cls, value: Any) -> float:
        return coerce_number(value)

    @property
    def family(self) -> Family:
        return "office_rent"


class GenericAttributes(BaseModel):
    """Listado legacy: casa, departamento, etc."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    property_type: LegacyType
    bedrooms: float = 0
    bathrooms: float = 0
    area: float = 0
    location: str = ""
    address: str = ""

    @field_validator("bedrooms", "bathrooms", "area", mode="before")
    @classmethod
    def _coerce_numbers(cls, value: Any) -> float:
        return coerce_number(value)

    @field_validator("location", "address", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @property
    def family(self) -> Family:
        return "generic"


PropertyAttributes = Annotated[
    Union[CoworkingAttributes, OfficeRentAttributes, GenericAttributes],
    Field(discriminator="property_type"),
]

PropertyDetails = Annotated[
    Union[CoworkingAttributes, OfficeRentAttributes],
    Field(discriminator="property_type"),
]

_attributes_adapter = TypeAdapter(PropertyAttributes)

SELECT_TYPE_AND_CITY = "Please select property type and city"


def parse_attributes(data: dict) -> Union[
    CoworkingAttributes, OfficeRentAttributes, GenericAttributes
]:
    """
    Construye los atributos tipados a partir del estado del formulario.

    Raises:
        ValidationError: tipo de propiedad ausente o campos inválidos
    """
    property_type = data.get("property_type") or data.get("propertyType")
    if not property_type:
        raise ValidationError(SELECT_TYPE_AND_CITY, details={"field": "property_type"})

    payload = {k: v for k, v in data.items() if k != "propertyType"}
    payload["property_type"] = property_type
    try:
        return _attributes_adapter.validate_python(payload)
    except PydanticValidationError as e:
        raise ValidationError(
            "Some property details are invalid",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e
