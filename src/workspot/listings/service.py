"""
Operaciones sobre listados existentes: ver, destacar, editar y borrar.
"""

from typing import Any, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from workspot.database import PropertyRepository
from workspot.errors import AccessDenied, NotFound, ValidationError
from workspot.models import Property, User
from workspot.search import parse_properties, sort_properties

logger = structlog.get_logger()

# Campos que el dueño puede editar
EDITABLE_FIELDS = frozenset(
    {"title", "description", "price", "address", "image", "images", "featured"}
)


class ListingService:
    """Lectura y mantenimiento de listados por id."""

    def __init__(self, repository: Optional[PropertyRepository] = None):
        self.repository = repository or PropertyRepository()

    def get(self, property_id: str) -> Property:
        """
        Obtiene una propiedad.

        Raises:
            NotFound: si no existe
            QueryFailed: si el store falla
        """
        row = self.repository.get_by_id(property_id)
        if not row:
            raise NotFound("Property not found", details={"property_id": property_id})
        return Property.model_validate(row)

    def featured(self, limit: int = 4) -> list[Property]:
        """Propiedades destacadas, más nuevas primero."""
        rows = self.repository.fetch_where_equal({"featured": True})
        return sort_properties(parse_properties(rows))[:limit]

    def update(self, owner: User, property_id: str, changes: dict[str, Any]) -> Property:
        """
        Edita una propiedad propia.

        Raises:
            AccessDenied: la propiedad es de otro usuario
            ValidationError: campos no editables o valores inválidos
        """
        current = self.get(property_id)
        self._check_owner(owner, current)

        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(
                "Some fields cannot be edited", details={"fields": sorted(unknown)}
            )
        try:
            merged = current.model_copy(update=changes)
            Property.model_validate(merged.model_dump())
        except PydanticValidationError as e:
            raise ValidationError(
                "Some property details are invalid",
                details={"errors": e.errors(include_url=False, include_context=False)},
            ) from e

        row = self.repository.update(property_id, changes)
        logger.info("Propiedad editada", property_id=property_id, fields=sorted(changes))
        return Property.model_validate(row) if row else merged

    def delete(self, owner: User, property_id: str) -> bool:
        """Borra una propiedad propia."""
        current = self.get(property_id)
        self._check_owner(owner, current)
        return self.repository.delete(property_id)

    def _check_owner(self, owner: User, prop: Property):
        if prop.user_id != owner.id:
            raise AccessDenied(
                "You can only modify your own listings",
                details={"property_id": prop.id},
            )
