"""
Script para cargar propiedades de ejemplo.

Inserta listados legacy y de coworking / oficinas, útiles para probar
la búsqueda y el dashboard en un proyecto vacío.

Uso:
    python -m workspot.scripts.seed_properties
    python -m workspot.scripts.seed_properties --user-id <uuid> --dry-run
"""

import argparse
import logging
import sys

import structlog

from workspot.config import get_settings
from workspot.database import PropertyRepository
from workspot.errors import QueryFailed
from workspot.models import Property

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


SAMPLE_PROPERTIES = [
    {
        "title": "Modern Apartment in Downtown",
        "location": "ny",
        "price": 450000,
        "bedrooms": 2,
        "bathrooms": 2,
        "area": 1200,
        "image": "https://images.unsplash.com/photo-1522708323590-d24dbb6b0267",
        "type": "apartment",
        "featured": True,
        "description": "Beautiful modern apartment in the heart of downtown with amazing city views.",
    },
    {
        "title": "Spacious Family Home",
        "location": "ca",
        "price": 750000,
        "bedrooms": 4,
        "bathrooms": 3,
        "area": 2500,
        "image": "https://images.unsplash.com/photo-1580587771525-78b9dba3b914",
        "type": "house",
        "featured": True,
        "description": "Perfect family home with large backyard and modern amenities.",
    },
    {
        "title": "Luxury Beachfront Condo",
        "location": "fl",
        "price": 1200000,
        "bedrooms": 3,
        "bathrooms": 2,
        "area": 1800,
        "image": "https://images.unsplash.com/photo-1512917774080-9991f1c4c750",
        "type": "condo",
        "featured": True,
        "description": "Stunning beachfront condo with panoramic ocean views.",
    },
    {
        "title": "Charming Townhouse",
        "location": "tx",
        "price": 350000,
        "bedrooms": 3,
        "bathrooms": 2,
        "area": 1600,
        "image": "https://images.unsplash.com/photo-1570129477492-45c003edd2be",
        "type": "townhouse",
        "description": "Beautiful townhouse in a quiet neighborhood with great amenities.",
    },
    {
        "title": "Hot Desks near Cyber Hub",
        "location": "gurgaon",
        "price": 9000,
        "type": "coworking_dedicated_desk",
        "featured": True,
        "description": "Dedicated desks with 24x7 access, two minutes from the metro.",
        "property_details": {
            "city": "gurgaon",
            "total_weekly_hours": 168,
            "days_open_per_week": 7,
            "weekday_opening_time": "00:00",
            "weekday_closing_time": "23:59",
            "nearest_metro_distance": 0.3,
            "total_center_area": 12000,
            "total_seating_capacity": 180,
            "typical_floorplate_area": 6000,
            "building_type": "business_park",
            "amenities": {"wifi": True, "coffee": True, "meeting_rooms": True, "power_backup": True},
        },
    },
    {
        "title": "Private Cabins in Koramangala",
        "location": "bangalore",
        "price": 42000,
        "type": "coworking_private_cabin",
        "description": "Four and six seater cabins with a shared pantry and lounge.",
        "property_details": {
            "city": "bangalore",
            "total_weekly_hours": 72,
            "days_open_per_week": 6,
            "weekday_opening_time": "09:00",
            "weekday_closing_time": "21:00",
            "total_center_area": 8000,
            "total_seating_capacity": 90,
            "building_type": "independent_commercial_tower",
            "amenities": {"wifi": True, "pantry_area": True, "lounge_area": True, "air_conditioners": True},
        },
    },
    {
        "title": "Furnished Office in Bandra Kurla Complex",
        "location": "mumbai",
        "price": 550000,
        "type": "office_rent",
        "description": "Grade A floor plate with 36 month lock-in.",
        "property_details": {
            "city": "mumbai",
            "floor_size": 5000,
            "lock_in": 36,
            "floors": 12,
            "building_grade": 1,
            "year_built": 2015,
            "furnishing": "fully_furnished",
            "building_type": "business_tower",
            "amenities": {"air_conditioners": True, "lift": True, "security_personnel": True},
        },
    },
]


def build_samples(user_id: str) -> list[Property]:
    return [Property.model_validate({**data, "user_id": user_id}) for data in SAMPLE_PROPERTIES]


def main():
    """Entry point del script."""
    parser = argparse.ArgumentParser(description="Carga propiedades de ejemplo")
    parser.add_argument("--user-id", default="system", help="Dueño de los listados")
    parser.add_argument(
        "--dry-run", action="store_true", help="Valida los ejemplos sin insertarlos"
    )
    args = parser.parse_args()

    samples = build_samples(args.user_id)
    if args.dry_run:
        for prop in samples:
            logger.info("Ejemplo válido", title=prop.title, type=prop.type)
        sys.exit(0)

    repository = PropertyRepository()
    inserted = 0
    try:
        for prop in samples:
            repository.create(prop)
            inserted += 1
            logger.info("Propiedad agregada", title=prop.title)
    except QueryFailed as e:
        logger.error("Error cargando propiedades", inserted=inserted, error=e.message)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Carga interrumpida por usuario", inserted=inserted)
        sys.exit(130)

    logger.info("Propiedades cargadas", inserted=inserted)
    sys.exit(0)


if __name__ == "__main__":
    main()
