"""
Módulo de mensajería entre usuarios.
"""

from workspot.messaging.service import MessageService

__all__ = ["MessageService"]
