"""
Sesión de autenticación.

AuthSession es el contexto de usuario de la aplicación: se crea una vez
al arrancar, se suscribe a los cambios de estado del proveedor (Supabase
Auth) y se inyecta en los componentes que necesitan saber quién es el
usuario y qué rol tiene.
"""

from typing import Any, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError
from supabase import AuthError as ProviderAuthError

from workspot.config import Settings, get_settings
from workspot.database import SupabaseClient, UserRepository, get_supabase_client
from workspot.errors import AccessDenied, AuthError, QueryFailed
from workspot.models import User

logger = structlog.get_logger()

INVALID_CREDENTIALS = "Invalid email or password. Please try again."
TOO_MANY_ATTEMPTS = "Too many unsuccessful login attempts. Please try again later."
ACCOUNT_DISABLED = "This account has been disabled. Please contact support."
POPUP_CLOSED = "The sign-in window was closed before completing the sign-in."
ACCOUNT_EXISTS = (
    "An account already exists with the same email address but different "
    "sign-in credentials."
)

# Código del proveedor -> mensaje para el usuario
AUTH_MESSAGES = {
    "invalid_credentials": INVALID_CREDENTIALS,
    "user_not_found": INVALID_CREDENTIALS,
    "over_request_rate_limit": TOO_MANY_ATTEMPTS,
    "over_email_send_rate_limit": TOO_MANY_ATTEMPTS,
    "user_banned": ACCOUNT_DISABLED,
    "flow_state_expired": POPUP_CLOSED,
    "flow_state_not_found": POPUP_CLOSED,
    "identity_already_exists": ACCOUNT_EXISTS,
    "email_exists": ACCOUNT_EXISTS,
    "user_already_exists": ACCOUNT_EXISTS,
}


def describe_auth_error(exc: Any, fallback: str = "An error occurred during sign-in.") -> AuthError:
    """
    Traduce un error del proveedor a un AuthError con mensaje fijo.

    Códigos no mapeados usan el mensaje crudo del proveedor.
    """
    code = getattr(exc, "code", None)
    raw_message = getattr(exc, "message", None) or str(exc)
    message = AUTH_MESSAGES.get(code) or raw_message or fallback
    return AuthError(message, details={"code": code})


class AuthSession:
    """
    Usuario actual, su rol y si el estado inicial todavía está cargando.

    Ciclo de vida: start() al arrancar la app, close() al apagarla.
    Cada evento de auth refresca el perfil desde la tabla 'users'.
    """

    def __init__(
        self,
        client: Optional[SupabaseClient] = None,
        users: Optional[UserRepository] = None,
        settings: Optional[Settings] = None,
    ):
        self._client = client or get_supabase_client()
        self.users = users or UserRepository(self._client)
        self.settings = settings or get_settings()

        self.user_id: Optional[str] = None
        self.email: Optional[str] = None
        self.profile: Optional[User] = None
        self.loading = True
        self._subscription = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def role(self) -> Optional[str]:
        return self.profile.role if self.profile else None

    def start(self):
        """Se suscribe al stream de auth y carga la sesión existente."""
        if self._subscription is not None:
            return
        self._subscription = self._client.auth.on_auth_state_change(
            self._on_auth_state_change
        )
        session = self._client.auth.get_session()
        self._refresh(session.user if session else None)
        logger.info("Sesión de auth iniciada", authenticated=self.is_authenticated)

    def close(self):
        """Cancela la suscripción al stream de auth."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def sign_in_with_email(self, email: str, password: str) -> Optional[User]:
        """
        Login con email y password.

        Raises:
            AuthError: credenciales inválidas, demasiados intentos, cuenta bloqueada...
        """
        try:
            response = self._client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except ProviderAuthError as e:
            logger.warning("Login fallido", email=email, code=getattr(e, "code", None))
            raise describe_auth_error(e, "An error occurred during login.") from e
        self._refresh(response.user)
        return self.profile

    def sign_up_with_email(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
        role: str = "buyer",
    ) -> User:
        """
        Crea la cuenta y el perfil.

        Si la cuenta se crea pero el perfil no se puede guardar, el alta no
        falla: se loguea y el perfil queda solo en memoria.
        """
        try:
            response = self._client.auth.sign_up({"email": email, "password": password})
        except ProviderAuthError as e:
            logger.warning("Alta fallida", email=email, code=getattr(e, "code", None))
            raise describe_auth_error(e, "An error occurred during sign-up.") from e

        user = User(id=response.user.id, email=email, name=name, role=role)
        try:
            self.users.create(user)
        except QueryFailed as e:
            logger.warning("No se pudo crear el perfil", user_id=user.id, error=e.message)

        self.user_id = user.id
        self.email = email
        self.profile = user
        self.loading = False
        return user

    def sign_in_with_google(self) -> str:
        """
        Inicia el login federado con Google.

        Returns:
            URL a la que hay que redirigir al usuario
        """
        options = {}
        if self.settings.oauth_redirect_url:
            options["redirect_to"] = self.settings.oauth_redirect_url
        try:
            response = self._client.auth.sign_in_with_oauth(
                {"provider": "google", "options": options}
            )
        except ProviderAuthError as e:
            raise describe_auth_error(e, "An error occurred during login with Google.") from e
        return response.url

    def sign_out(self):
        try:
            self._client.auth.sign_out()
        except ProviderAuthError as e:
            raise describe_auth_error(e, "An error occurred during sign-out.") from e
        self._refresh(None)

    def require_seller(self) -> User:
        """
        Perfil del usuario actual si puede publicar.

        Raises:
            AuthError: no hay sesión
            AccessDenied: el rol no es seller/both
        """
        if not self.is_authenticated or self.profile is None:
            raise AuthError("Please sign in to list a property.", details={"code": None})
        if not self.profile.can_sell:
            raise AccessDenied(
                "Only sellers can list properties", details={"role": self.profile.role}
            )
        return self.profile

    def become_seller(self) -> User:
        """Habilita el rol de vendedor para el usuario actual."""
        if self.profile is None:
            raise AuthError("Please sign in first.", details={"code": None})
        role = "both" if self.profile.role == "buyer" else self.profile.role
        self.users.update(self.profile.id, {"role": role})
        self.profile = self.profile.model_copy(update={"role": role})
        return self.profile

    def _on_auth_state_change(self, event: str, session: Any):
        logger.info("Evento de auth", auth_event=event)
        self._refresh(session.user if session else None)

    def _refresh(self, auth_user: Any):
        if auth_user is None:
            self.user_id = None
            self.email = None
            self.profile = None
            self.loading = False
            return

        self.user_id = auth_user.id
        self.email = getattr(auth_user, "email", None)
        try:
            row = self.users.get_by_id(auth_user.id)
        except QueryFailed as e:
            logger.error("Error obteniendo perfil", user_id=auth_user.id, error=e.message)
            row = None
        self.profile = self._parse_profile(row) if row else None
        self.loading = False

    def _parse_profile(self, row: dict) -> Optional[User]:
        try:
            return User.model_validate(row)
        except PydanticValidationError as e:
            logger.warning("Perfil con datos inválidos", user_id=row.get("id"), error=str(e))
            return None
