"""
Publicación de listados.

Cada formulario de publicación es una instancia de ListingSubmission:
primero se pide la predicción de precio y recién con un precio predicho
válido se puede subir la propiedad.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from workspot.database import ImageStorage, ImageUpload, PropertyRepository
from workspot.errors import AccessDenied, PredictionUnavailable, ValidationError
from workspot.models import GenericAttributes, Property, User, parse_attributes
from workspot.prediction import PredictionClient, PredictionResult
from workspot.prediction.payloads import Attributes

logger = structlog.get_logger()


@dataclass(frozen=True)
class ListingDraft:
    """Estado del formulario en el momento de publicar."""

    attributes: Attributes
    predicted_price: Optional[float]
    price: Optional[float]
    title: str
    description: str
    address: str
    images: tuple[ImageUpload, ...]


class ListingSubmission:
    """
    Estado de un formulario de publicación.

    request_prediction() y upload() tienen cada uno un flag "en curso":
    una segunda llamada mientras la primera no terminó no hace nada y
    devuelve None (no se encola ni falla). La protección es por instancia,
    no entre pestañas ni dispositivos.

    discard() marca el formulario como abandonado; respuestas que llegan
    después no modifican su estado.
    """

    def __init__(
        self,
        owner: User,
        repository: Optional[PropertyRepository] = None,
        prediction_client: Optional[PredictionClient] = None,
        storage: Optional[ImageStorage] = None,
    ):
        self.owner = owner
        self.repository = repository or PropertyRepository()
        self.prediction_client = prediction_client or PredictionClient()
        self.storage = storage or ImageStorage()

        self.is_predicting = False
        self.is_submitting = False
        self._discarded = False
        self.reset()

    def reset(self):
        """Vuelve el formulario a su estado inicial."""
        self.attributes: Optional[Attributes] = None
        self.title = ""
        self.description = ""
        self.address = ""
        self.price: Optional[float] = None
        self.images: list[ImageUpload] = []
        self.prediction: Optional[PredictionResult] = None

    @property
    def predicted_price(self) -> Optional[float]:
        return self.prediction.predicted_price if self.prediction else None

    @property
    def discarded(self) -> bool:
        return self._discarded

    def discard(self):
        """El usuario abandonó el formulario."""
        self._discarded = True

    def set_attributes(self, data: dict[str, Any]) -> Attributes:
        """
        Carga los atributos del formulario.

        Cambiar los atributos invalida una predicción previa.

        Raises:
            ValidationError: tipo ausente o campos inválidos
        """
        self.attributes = parse_attributes(data)
        self.prediction = None
        return self.attributes

    def set_details(
        self,
        title: Optional[str] = None,
        description: Optional[str] = None,
        address: Optional[str] = None,
        price: Optional[float] = None,
    ):
        """Datos del listado que no afectan la predicción."""
        if title is not None:
            self.title = title.strip()
        if description is not None:
            self.description = description.strip()
        if address is not None:
            self.address = address.strip()
        if price is not None:
            self.price = price

    def add_image(self, image: ImageUpload):
        self.images.append(image)

    async def request_prediction(self) -> Optional[PredictionResult]:
        """
        Pide la predicción de precio para los atributos actuales.

        Returns:
            El resultado, o None si ya había una predicción en curso, si el
            formulario fue descartado o si los atributos cambiaron mientras
            se esperaba

        Raises:
            ValidationError: falta tipo o ciudad (sin llamada de red)
            PredictionUnavailable: el servicio falló
        """
        if self.is_predicting:
            logger.info("Predicción ya en curso, se ignora", user_id=self.owner.id)
            return None

        attributes = self.attributes
        self.is_predicting = True
        try:
            result = await self.prediction_client.predict(attributes)
        finally:
            self.is_predicting = False

        if self._discarded:
            logger.info("Predicción llegó para un formulario descartado", user_id=self.owner.id)
            return None
        if self.attributes is not attributes:
            logger.info("Predicción llegó para atributos viejos, se descarta", user_id=self.owner.id)
            return None

        self.prediction = result
        return result

    async def upload(self) -> Optional[Property]:
        """
        Sube imágenes y crea la propiedad.

        Se publica el formulario tal como estaba al llamar: cambios hechos
        mientras se suben las imágenes no afectan este listado.

        Returns:
            La propiedad creada, o None si ya había una subida en curso

        Raises:
            AccessDenied: el usuario no es vendedor
            PredictionUnavailable: no hay precio predicho
            ValidationError: faltan datos del listado
            QueryFailed: falló el storage o el store
        """
        if self.is_submitting:
            logger.info("Subida ya en curso, se ignora", user_id=self.owner.id)
            return None

        self._check_ready()
        draft = self.draft()

        self.is_submitting = True
        try:
            image_urls = []
            for image in draft.images:
                image_urls.append(await asyncio.to_thread(self._store_image, image))
            prop = self.build_property(draft, image_urls)
            created = await asyncio.to_thread(self.repository.create, prop)
        finally:
            self.is_submitting = False

        result = Property.model_validate(created) if created else prop
        if self._discarded:
            logger.info("Subida terminó para un formulario descartado", property_id=result.id)
        elif self.attributes is not draft.attributes:
            logger.info("El formulario cambió durante la subida, no se resetea", property_id=result.id)
        else:
            self.reset()
        return result

    def draft(self) -> ListingDraft:
        """Copia del estado actual del formulario."""
        return ListingDraft(
            attributes=self.attributes,
            predicted_price=self.predicted_price,
            price=self.price,
            title=self.title,
            description=self.description,
            address=self.address,
            images=tuple(self.images),
        )

    def build_property(self, draft: ListingDraft, image_urls: list[str]) -> Property:
        """Arma la Property a insertar a partir de un draft del formulario."""
        attributes = draft.attributes
        data: dict[str, Any] = {
            "user_id": self.owner.id,
            "title": draft.title,
            "description": draft.description,
            "type": attributes.property_type,
            "price": draft.price or draft.predicted_price,
            "predicted_price": draft.predicted_price,
            "image": image_urls[0] if image_urls else "",
            "images": image_urls,
        }
        if isinstance(attributes, GenericAttributes):
            data.update(
                location=attributes.location,
                address=attributes.address or draft.address,
                bedrooms=attributes.bedrooms,
                bathrooms=attributes.bathrooms,
                area=attributes.area,
            )
        else:
            data.update(
                location=attributes.city,
                address=draft.address,
                property_details=attributes.model_dump(by_alias=True),
            )
        try:
            return Property.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(
                "Some property details are invalid",
                details={"errors": e.errors(include_url=False, include_context=False)},
            ) from e

    def _check_ready(self):
        if not self.owner.can_sell:
            raise AccessDenied(
                "Only sellers can list properties", details={"role": self.owner.role}
            )
        if self.attributes is None or not self.predicted_price:
            raise PredictionUnavailable("Please get a price prediction first")
        if not self.title:
            raise ValidationError("Title is required", details={"field": "title"})

    def _store_image(self, image: ImageUpload) -> str:
        path = self.storage.put(image, prefix=f"properties/{self.owner.id}")
        return self.storage.download_url(path)
