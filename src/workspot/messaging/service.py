"""
Servicio de mensajes.

Los mensajes son direccionales y no tienen hilo: la conversación entre
dos usuarios se arma uniendo las dos direcciones en memoria. El orden
también se resuelve en memoria (el store no ordena).
"""

from typing import Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from workspot.database import MessageRepository
from workspot.errors import Notice, QueryFailed, ValidationError
from workspot.models import Message, User

logger = structlog.get_logger()


def _parse(rows: list[dict]) -> list[Message]:
    messages = []
    for row in rows:
        try:
            messages.append(Message.model_validate(row))
        except PydanticValidationError as e:
            logger.warning("Mensaje con datos inválidos, se omite", message_id=row.get("id"), error=str(e))
    return messages


class MessageService:
    """Envío y lectura de mensajes."""

    def __init__(self, repository: Optional[MessageRepository] = None):
        self.repository = repository or MessageRepository()

    def send(
        self,
        sender: User,
        receiver_id: str,
        content: str,
        property_id: Optional[str] = None,
    ) -> Message:
        """
        Envía un mensaje.

        Raises:
            ValidationError: contenido vacío o destinatario ausente
            QueryFailed: falló el store
        """
        content = (content or "").strip()
        if not content:
            raise ValidationError("Message cannot be empty", details={"field": "content"})
        if not receiver_id:
            raise ValidationError("Recipient is required", details={"field": "receiver_id"})

        message = Message(
            sender_id=sender.id,
            sender_email=sender.email,
            receiver_id=receiver_id,
            property_id=property_id,
            content=content,
        )
        created = self.repository.create(message)
        return Message.model_validate(created) if created else message

    def inbox(self, user_id: str) -> list[Message]:
        """Mensajes recibidos, más nuevos primero."""
        messages = _parse(self.repository.get_received(user_id))
        return sorted(messages, key=lambda m: m.created_at, reverse=True)

    def conversation(self, user_id: str, other_id: str) -> list[Message]:
        """Mensajes entre dos usuarios en ambas direcciones, más viejos primero."""
        rows = self.repository.get_between(user_id, other_id)
        rows += self.repository.get_between(other_id, user_id)
        return sorted(_parse(rows), key=lambda m: m.created_at)

    def mark_as_read(self, message_id: str) -> Optional[Notice]:
        """
        Marca un mensaje como leído.

        Returns:
            None si salió bien, un Notice de error si no
        """
        try:
            self.repository.mark_as_read(message_id)
        except QueryFailed as e:
            logger.error("No se pudo marcar como leído", message_id=message_id, error=e.message)
            return Notice.from_exception("Could not update message", e)
        return None
