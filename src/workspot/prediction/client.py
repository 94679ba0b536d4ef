"""
Cliente del servicio de predicción de precios.

Un POST por predicción, sin reintentos. El timeout es el default de
aiohttp: un servicio colgado deja la operación esperando hasta ese límite.
"""

import asyncio
import math
from dataclasses import dataclass, field
from typing import Any, Optional

import aiohttp
import structlog

from workspot.config import Settings, get_settings
from workspot.errors import PredictionUnavailable
from workspot.models.attributes import Family
from workspot.prediction.payloads import Attributes, prepare_request

logger = structlog.get_logger()

PREDICTION_FAILED = "Failed to get price prediction. Please try again."


@dataclass
class PredictionResult:
    """Respuesta normalizada del servicio, cualquiera sea su forma."""

    predicted_price: float
    family: Family
    location_features: Optional[dict] = None
    raw: dict = field(default_factory=dict, repr=False)


def _usable_price(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


def normalize_response(body: Any) -> float:
    """
    Extrae el precio predicho de cualquiera de las formas conocidas:

    - {"predicted_price": N}
    - {"predictions": {"<modelo>": {"predicted_price": N}, ...}}  (primer modelo)
    - {"prediction": {"predicted_rent": N}}

    Raises:
        PredictionUnavailable: ninguna forma trae un número positivo
    """
    if not isinstance(body, dict):
        raise PredictionUnavailable(
            PREDICTION_FAILED, details={"reason": "respuesta no es un objeto"}
        )

    candidates = [body.get("predicted_price")]

    predictions = body.get("predictions")
    if isinstance(predictions, dict) and predictions:
        first = next(iter(predictions.values()))
        if isinstance(first, dict):
            candidates.append(first.get("predicted_price"))

    prediction = body.get("prediction")
    if isinstance(prediction, dict):
        candidates.append(prediction.get("predicted_rent"))

    for candidate in candidates:
        if _usable_price(candidate):
            return float(candidate)

    raise PredictionUnavailable(
        PREDICTION_FAILED,
        details={"reason": "forma de respuesta no reconocida", "keys": sorted(body)},
    )


class PredictionClient:
    """
    Envía atributos de propiedad al servicio de predicción.

    Si no se inyecta una sesión, crea una propia en el primer uso y la
    cierra en close().
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.base_url = (base_url or self.settings.prediction_base_url).rstrip("/")
        self._session = session
        self._owns_session = session is None

    async def predict(self, attributes: Optional[Attributes]) -> PredictionResult:
        """
        Pide el precio estimado para una propiedad.

        Args:
            attributes: Atributos tipados de la familia activa

        Returns:
            PredictionResult con el precio canónico

        Raises:
            ValidationError: Falta tipo o ciudad (no se hace el request)
            PredictionUnavailable: El servicio falló o respondió algo inutilizable
        """
        request = prepare_request(attributes, self.settings)
        url = f"{self.base_url}{request.endpoint}"

        logger.info("Solicitando predicción", family=request.family, url=url)
        try:
            body = await self._post(url, request.payload)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("Error llamando al servicio de predicción", url=url, error=str(e))
            raise PredictionUnavailable(
                PREDICTION_FAILED, details={"reason": str(e) or type(e).__name__}
            ) from e

        price = normalize_response(body)
        logger.info("Predicción obtenida", family=request.family, predicted_price=price)
        return PredictionResult(
            predicted_price=price,
            family=request.family,
            location_features=body.get("location_features"),
            raw=body,
        )

    async def close(self):
        """Cierra la sesión HTTP si es propia."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def _post(self, url: str, payload: dict) -> Any:
        if self._session is None:
            self._session = aiohttp.ClientSession()
        async with self._session.post(url, json=payload) as response:
            if response.status >= 400:
                detail = await response.text()
                logger.error(
                    "Servicio de predicción respondió con error",
                    url=url,
                    status=response.status,
                    body=detail[:500],
                )
                raise PredictionUnavailable(
                    PREDICTION_FAILED,
                    details={"status": response.status},
                )
            try:
                return await response.json(content_type=None)
            except ValueError as e:
                raise PredictionUnavailable(
                    PREDICTION_FAILED, details={"reason": "respuesta no es JSON"}
                ) from e
