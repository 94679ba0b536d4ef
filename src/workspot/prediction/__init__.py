"""
Predicción de precios.

Arma el payload de cada familia (coworking / office_rent / generic),
lo envía al servicio externo y normaliza la respuesta a un único precio.
"""

from workspot.prediction.payloads import (
    PredictionRequest,
    build_coworking_payload,
    build_office_rent_payload,
    build_generic_payload,
    prepare_request,
    validate_for_prediction,
)
from workspot.prediction.client import (
    PredictionClient,
    PredictionResult,
    normalize_response,
)

__all__ = [
    "PredictionRequest",
    "build_coworking_payload",
    "build_office_rent_payload",
    "build_generic_payload",
    "prepare_request",
    "validate_for_prediction",
    "PredictionClient",
    "PredictionResult",
    "normalize_response",
]
