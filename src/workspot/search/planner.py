"""
Planner de búsqueda de propiedades.

Dado un PropertyFilter decide qué restricciones se envían al store y
cuáles se evalúan en memoria sobre el resultado:

- Igualdades (type, location, user_id): van al store solo si no hay
  rango de precio. Con rango de precio, el store recibe únicamente el
  rango (un solo campo) y las igualdades se evalúan en memoria; así
  nunca se combina igualdad + rango sobre campos distintos, que en el
  store requiere un índice compuesto.
- Mínimos de bedrooms/bathrooms, texto libre y filtros de coworking /
  office_rent: siempre en memoria.

El resultado es el mismo con o sin pushdown: el pushdown solo reduce
la cantidad de filas transferidas.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

import structlog
from pydantic import ValidationError as PydanticValidationError

from workspot.config import get_settings
from workspot.database import PropertyRepository
from workspot.models import Furnishing, Property, PropertyFilter, SortOrder

logger = structlog.get_logger()

PRICE_FIELD = "price"


@dataclass(frozen=True)
class Predicate:
    """Filtro en memoria con nombre (para logs y tests)."""

    name: str
    test: Callable[[Property], bool]

    def __call__(self, prop: Property) -> bool:
        return self.test(prop)


@dataclass(frozen=True)
class RangeConstraint:
    """Rango sobre un único campo numérico."""

    field: str
    minimum: Optional[float] = None
    maximum: Optional[float] = None


@dataclass
class QueryPlan:
    """Resultado de planificar un filtro."""

    equality: dict[str, Any] = field(default_factory=dict)
    range: Optional[RangeConstraint] = None
    predicates: list[Predicate] = field(default_factory=list)

    @property
    def route(self) -> str:
        """Primitiva del store que se usará: 'range', 'equal' o 'all'."""
        if self.range is not None:
            return "range"
        if self.equality:
            return "equal"
        return "all"

    @property
    def predicate_names(self) -> list[str]:
        return [p.name for p in self.predicates]


def _at_least(value: Optional[float], minimum: int) -> bool:
    return value is not None and value >= minimum


def _details_value(prop: Property, attribute: str) -> Optional[float]:
    # Propiedades sin property_details (o de otra familia) no tienen el campo
    return getattr(prop.property_details, attribute, None)


def _matches_text(prop: Property, term: str) -> bool:
    term = term.lower()
    return (
        term in prop.title.lower()
        or term in prop.location.lower()
        or term in (prop.description or "").lower()
    )


def _matches_furnishing(prop: Property, wanted: str) -> bool:
    furnishing = getattr(prop.property_details, "furnishing", None)
    if wanted == "furnished":
        return furnishing == Furnishing.FULLY_FURNISHED
    return furnishing == Furnishing.UNFURNISHED


def equality_predicates(filters: PropertyFilter) -> list[Predicate]:
    """Predicados equivalentes a las igualdades que pueden ir al store."""
    predicates = []
    if filters.type is not None:
        wanted_type = filters.type
        predicates.append(Predicate("type", lambda p: p.type == wanted_type))
    if filters.location is not None:
        wanted_location = filters.location
        predicates.append(
            Predicate("location", lambda p: p.location == wanted_location)
        )
    if filters.user_id is not None:
        owner = filters.user_id
        predicates.append(Predicate("user_id", lambda p: p.user_id == owner))
    return predicates


def price_predicates(filters: PropertyFilter) -> list[Predicate]:
    predicates = []
    if filters.min_price is not None:
        minimum = filters.min_price
        predicates.append(Predicate("min_price", lambda p: p.price >= minimum))
    if filters.max_price is not None:
        maximum = filters.max_price
        predicates.append(Predicate("max_price", lambda p: p.price <= maximum))
    return predicates


def memory_predicates(filters: PropertyFilter) -> list[Predicate]:
    """Predicados que el store no puede resolver: siempre en memoria."""
    f = filters
    predicates = []

    if f.bedrooms is not None:
        predicates.append(
            Predicate("bedrooms", lambda p: _at_least(p.bedrooms, f.bedrooms))
        )
    if f.bathrooms is not None:
        predicates.append(
            Predicate("bathrooms", lambda p: _at_least(p.bathrooms, f.bathrooms))
        )
    if f.search_term:
        predicates.append(
            Predicate("search_term", lambda p: _matches_text(p, f.search_term))
        )

    # Coworking
    if f.seating_capacity is not None:
        predicates.append(
            Predicate(
                "seating_capacity",
                lambda p: _at_least(
                    _details_value(p, "total_seating_capacity"), f.seating_capacity
                ),
            )
        )
    if f.center_area is not None:
        predicates.append(
            Predicate(
                "center_area",
                lambda p: _at_least(_details_value(p, "total_center_area"), f.center_area),
            )
        )
    if f.weekly_hours is not None:
        predicates.append(
            Predicate(
                "weekly_hours",
                lambda p: _at_least(_details_value(p, "total_weekly_hours"), f.weekly_hours),
            )
        )

    # Office rent
    if f.floor_size is not None:
        predicates.append(
            Predicate(
                "floor_size",
                lambda p: _at_least(_details_value(p, "floor_size"), f.floor_size),
            )
        )
    if f.building_grade is not None:
        predicates.append(
            Predicate(
                "building_grade",
                lambda p: _details_value(p, "building_grade") == f.building_grade,
            )
        )
    if f.furnishing is not None:
        predicates.append(
            Predicate("furnishing", lambda p: _matches_furnishing(p, f.furnishing))
        )

    return predicates


_SORT_KEYS: dict[SortOrder, tuple[Callable[[Property], Any], bool]] = {
    SortOrder.NEWEST: (lambda p: p.created_at, True),
    SortOrder.PRICE_ASC: (lambda p: p.price, False),
    SortOrder.PRICE_DESC: (lambda p: p.price, True),
    SortOrder.SIZE_ASC: (lambda p: p.effective_area, False),
    SortOrder.SIZE_DESC: (lambda p: p.effective_area, True),
}


def parse_properties(rows: list[dict]) -> list[Property]:
    """Filas del store -> Property. Filas inválidas se omiten con un warning."""
    properties = []
    for row in rows:
        try:
            properties.append(Property.model_validate(row))
        except PydanticValidationError as e:
            logger.warning(
                "Propiedad con datos inválidos, se omite",
                property_id=row.get("id"),
                error=str(e),
            )
    return properties


def sort_properties(
    properties: list[Property],
    order: Union[SortOrder, str] = SortOrder.NEWEST,
) -> list[Property]:
    """
    Ordena propiedades según el criterio elegido.

    Empates se resuelven por id; propiedades sin valor para la clave
    (ej. sin superficie) van al final.
    """
    value_of, descending = _SORT_KEYS[SortOrder(order)]
    ordered = sorted(properties, key=lambda p: p.id or "")
    present = [p for p in ordered if value_of(p) is not None]
    missing = [p for p in ordered if value_of(p) is None]
    present.sort(key=value_of, reverse=descending)
    return present + missing


class QueryPlanner:
    """
    Arma y ejecuta búsquedas de propiedades.

    Flujo (secuencial por invocación):
    1. plan(): separa restricciones de store y predicados en memoria
    2. fetch(): una sola lectura contra el store
    3. filtrar en memoria
    4. ordenar

    No hay cache: cada búsqueda vuelve a leer del store.
    """

    def __init__(
        self,
        repository: Optional[PropertyRepository] = None,
        policy: Optional[str] = None,
    ):
        self.repository = repository or PropertyRepository()
        self.policy = policy or get_settings().pushdown_policy

    def plan(self, filters: Optional[PropertyFilter] = None) -> QueryPlan:
        """Decide el ruteo de cada restricción del filtro."""
        filters = filters or PropertyFilter()
        plan = QueryPlan()

        equality = {
            name: value
            for name, value in (
                ("type", filters.type),
                ("location", filters.location),
                ("user_id", filters.user_id),
            )
            if value is not None
        }

        push_equality = self.policy == "always" or (
            self.policy == "conditional" and not filters.has_price_range
        )
        push_range = self.policy == "conditional" and filters.has_price_range

        if push_equality:
            plan.equality = equality
        else:
            plan.predicates.extend(equality_predicates(filters))

        if push_range:
            plan.range = RangeConstraint(
                field=PRICE_FIELD,
                minimum=filters.min_price,
                maximum=filters.max_price,
            )
        else:
            plan.predicates.extend(price_predicates(filters))

        plan.predicates.extend(memory_predicates(filters))
        return plan

    def fetch(self, plan: QueryPlan) -> list[Property]:
        """
        Ejecuta la lectura del plan contra el store.

        Raises:
            QueryFailed: Si el store falla
        """
        if plan.range is not None:
            rows = self.repository.fetch_in_range(
                plan.range.field, plan.range.minimum, plan.range.maximum
            )
        elif plan.equality:
            rows = self.repository.fetch_where_equal(plan.equality)
        else:
            rows = self.repository.fetch_all()
        return parse_properties(rows)

    def search(
        self,
        filters: Optional[PropertyFilter] = None,
        sort: Union[SortOrder, str] = SortOrder.NEWEST,
    ) -> list[Property]:
        """
        Busca propiedades.

        Args:
            filters: Criterios (None = sin filtro)
            sort: Orden del resultado (default: más nuevas primero)

        Returns:
            Propiedades que cumplen todos los criterios, ordenadas

        Raises:
            QueryFailed: Si el store falla (sin reintentos)
        """
        plan = self.plan(filters)
        properties = self.fetch(plan)
        fetched = len(properties)

        for predicate in plan.predicates:
            properties = [p for p in properties if predicate(p)]

        logger.info(
            "Búsqueda de propiedades",
            route=plan.route,
            pushed=plan.equality or (plan.range.field if plan.range else None),
            in_memory=plan.predicate_names,
            fetched=fetched,
            matched=len(properties),
        )
        return sort_properties(properties, sort)
