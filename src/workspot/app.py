"""
Contenedor de la aplicación.

Se construye una vez al arrancar y se pasa a la capa de presentación.
Todas las dependencias se crean acá y se comparten entre servicios.
"""

from typing import Optional

import structlog

from workspot.auth import AuthSession
from workspot.config import Settings, get_settings
from workspot.dashboard import DashboardLoader
from workspot.database import (
    ImageStorage,
    MessageRepository,
    PropertyRepository,
    SupabaseClient,
    UserRepository,
    get_supabase_client,
)
from workspot.favorites import FavoritesService
from workspot.listings import ListingService, ListingSubmission
from workspot.messaging import MessageService
from workspot.prediction import PredictionClient
from workspot.search import QueryPlanner

logger = structlog.get_logger()


class App:
    """Settings, store, sesión de auth y servicios."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[SupabaseClient] = None,
    ):
        self.settings = settings or get_settings()
        self.client = client or get_supabase_client()

        self.properties = PropertyRepository(self.client)
        self.users = UserRepository(self.client)
        self.messages_repo = MessageRepository(self.client)
        self.storage = ImageStorage(self.client, self.settings.storage_bucket)

        self.session = AuthSession(self.client, self.users, self.settings)
        self.planner = QueryPlanner(self.properties, self.settings.pushdown_policy)
        self.prediction = PredictionClient(settings=self.settings)

        self.listings = ListingService(self.properties)
        self.messages = MessageService(self.messages_repo)
        self.favorites = FavoritesService(self.users)
        self.dashboard = DashboardLoader(
            self.planner, self.properties, self.messages, self.favorites
        )

    def start(self):
        self.session.start()
        logger.info("Aplicación iniciada", pushdown_policy=self.settings.pushdown_policy)

    async def close(self):
        """Libera la suscripción de auth y la sesión HTTP."""
        self.session.close()
        await self.prediction.close()
        logger.info("Aplicación detenida")

    def new_submission(self) -> ListingSubmission:
        """
        Formulario de publicación para el usuario actual.

        Raises:
            AuthError: no hay sesión
            AccessDenied: el usuario no es vendedor
        """
        owner = self.session.require_seller()
        return ListingSubmission(owner, self.properties, self.prediction, self.storage)
