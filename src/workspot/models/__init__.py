"""
Modelos de datos del sistema.

- Property + atributos por familia (coworking / office_rent / generic)
- PropertyFilter: criterios de búsqueda
- User, Message
"""

from workspot.models.attributes import (
    Amenities,
    CoworkingAttributes,
    OfficeRentAttributes,
    GenericAttributes,
    PropertyAttributes,
    Furnishing,
    CoworkingBuildingType,
    OfficeBuildingType,
    family_of,
    parse_attributes,
)
from workspot.models.property import Property
from workspot.models.filters import PropertyFilter, SortOrder
from workspot.models.user import User
from workspot.models.message import Message

__all__ = [
    # Atributos
    "Amenities",
    "CoworkingAttributes",
    "OfficeRentAttributes",
    "GenericAttributes",
    "PropertyAttributes",
    "Furnishing",
    "CoworkingBuildingType",
    "OfficeBuildingType",
    "family_of",
    "parse_attributes",
    # Propiedades y búsqueda
    "Property",
    "PropertyFilter",
    "SortOrder",
    # Usuarios y mensajes
    "User",
    "Message",
]
