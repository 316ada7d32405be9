"""Session-guard dependencies and session cookie helpers.

Each dependency is one stage of the request pipeline: it either returns the
enriched context (the acting user) or short-circuits by raising a domain
error that the exception handlers turn into a JSON response.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Cookie, Depends, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from api.dependencies import get_session_guard
from domain.model.user import User, UserRole
from services import session_guard
from services.session_guard import SessionGuard
from utils.config import Settings

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "jwt"
LOGGED_OUT_VALUE = "loggedout"
LOGOUT_COOKIE_SECONDS = 10

security = HTTPBearer(auto_error=False)


def _credential(
    credentials: Optional[HTTPAuthorizationCredentials],
    cookie: Optional[str],
) -> Optional[str]:
    # HTTPBearer has already matched the scheme case-insensitively
    header = f"{session_guard.BEARER_PREFIX} {credentials.credentials}" if credentials else None
    return session_guard.extract_token(header, cookie)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    jwt: Optional[str] = Cookie(None),
    guard: SessionGuard = Depends(get_session_guard),
) -> Optional[User]:
    """Get current authenticated user (optional). Returns None instead of failing."""
    return guard.try_authenticate(_credential(credentials, jwt))


def get_current_user_required(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    jwt: Optional[str] = Cookie(None),
    guard: SessionGuard = Depends(get_session_guard),
) -> User:
    """Get current authenticated user (required). Raises 401 if not authenticated."""
    return guard.authenticate(_credential(credentials, jwt))


def restrict_to(*roles: UserRole):
    """Build a dependency that admits only users holding one of ``roles``."""
    def dependency(user: User = Depends(get_current_user_required)) -> User:
        return session_guard.restrict_to(user, roles)

    return dependency


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    max_age = int(timedelta(days=settings.jwt_cookie_expires_days).total_seconds())
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        max_age=max_age,
        expires=datetime.now(timezone.utc) + timedelta(seconds=max_age),
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    """Overwrite the session cookie with a dummy value that expires almost at once."""
    response.set_cookie(
        SESSION_COOKIE_NAME,
        LOGGED_OUT_VALUE,
        max_age=LOGOUT_COOKIE_SECONDS,
        expires=datetime.now(timezone.utc) + timedelta(seconds=LOGOUT_COOKIE_SECONDS),
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
