"""
Script para buscar propiedades desde la línea de comandos.

Usa el mismo planner que la aplicación: sirve para ver qué restricciones
van al store y cuáles se filtran en memoria (ver logs).

Uso:
    python -m workspot.scripts.search_properties --type office_rent --location mumbai
    python -m workspot.scripts.search_properties --min-price 1000 --max-price 50000 --sort price-asc
    python -m workspot.scripts.search_properties --policy memory --json
"""

import argparse
import json
import logging
import sys

import structlog

from workspot.config import get_settings
from workspot.errors import QueryFailed, ValidationError
from workspot.models import PropertyFilter, SortOrder
from workspot.search import QueryPlanner

# Configurar logging
settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(message)s",
    force=True,
)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

# Campos de PropertyFilter expuestos como flags (--min-price, ...)
FILTER_ARGS = [
    "type",
    "min_price",
    "max_price",
    "bedrooms",
    "bathrooms",
    "location",
    "search_term",
    "user_id",
    "seating_capacity",
    "center_area",
    "weekly_hours",
    "floor_size",
    "building_grade",
    "furnishing",
]


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Busca propiedades")
    for name in FILTER_ARGS:
        parser.add_argument(f"--{name.replace('_', '-')}", dest=name)
    parser.add_argument(
        "--sort",
        choices=[order.value for order in SortOrder],
        default=SortOrder.NEWEST.value,
    )
    parser.add_argument(
        "--policy",
        choices=["conditional", "memory", "always"],
        help="Política de pushdown (default: la de la configuración)",
    )
    parser.add_argument("--json", action="store_true", help="Salida en JSON")
    return parser.parse_args(argv)


def format_row(prop) -> str:
    size = prop.effective_area
    return (
        f"{(prop.id or '-')[:8]:8}  {prop.type:26}  {prop.location:12}  "
        f"{prop.price:>12,.0f}  {(f'{size:,.0f}' if size else '-'):>8}  {prop.title}"
    )


def main(argv=None):
    """Entry point del script."""
    args = parse_args(argv)
    params = {name: getattr(args, name) for name in FILTER_ARGS}

    try:
        filters = PropertyFilter.from_params(params)
        planner = QueryPlanner(policy=args.policy)
        results = planner.search(filters, args.sort)
    except ValidationError as e:
        logger.error("Filtro inválido", error=e.message, details=e.details)
        sys.exit(2)
    except QueryFailed as e:
        logger.error("Error consultando propiedades", error=e.message)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Búsqueda interrumpida por usuario")
        sys.exit(130)

    if args.json:
        print(json.dumps([p.model_dump(mode="json") for p in results], indent=2, ensure_ascii=False))
    else:
        for prop in results:
            print(format_row(prop))
        print(f"\n{len(results)} propiedades")
    sys.exit(0)


if __name__ == "__main__":
    main()
