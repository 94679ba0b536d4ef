"""
Módulo de autenticación.

AuthSession mantiene el usuario actual sobre Supabase Auth.
"""

from workspot.auth.session import AUTH_MESSAGES, AuthSession, describe_auth_error

__all__ = [
    "AUTH_MESSAGES",
    "AuthSession",
    "describe_auth_error",
]
