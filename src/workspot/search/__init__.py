"""
Búsqueda de propiedades.

Separa restricciones entre el store (pushdown) y filtros en memoria,
y ordena el resultado.
"""

from workspot.search.planner import (
    QueryPlanner,
    QueryPlan,
    Predicate,
    RangeConstraint,
    parse_properties,
    sort_properties,
)

__all__ = [
    "QueryPlanner",
    "QueryPlan",
    "Predicate",
    "RangeConstraint",
    "parse_properties",
    "sort_properties",
]
