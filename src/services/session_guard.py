"""Session guard: resolves the acting user from a session credential.

Pure business logic with no HTTP dependencies. A credential passes through
extraction, signature/expiry validation, identity resolution and a freshness
check; the first failing stage raises the matching domain error.
"""

import logging
from collections.abc import Iterable

from domain.model.errors import (
    AuthenticationError,
    ForbiddenError,
    NoSuchUserError,
    NotLoggedInError,
    StalePasswordError,
)
from domain.model.user import User, UserRole
from port.user_repository import UserRepository
from services.token_issuer import TokenIssuer

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer"


def extract_token(authorization: str | None, cookie: str | None) -> str | None:
    """Pick the credential: a bearer Authorization header wins over the cookie."""
    if authorization:
        scheme, _, value = authorization.partition(' ')
        if scheme == BEARER_PREFIX and value.strip():
            return value.strip()
    if cookie:
        return cookie
    return None


def restrict_to(user: User, roles: Iterable[UserRole | str]) -> User:
    """Role gate, applied after authentication.

    Raises:
        ForbiddenError: the user's role is not in ``roles``
    """
    allowed = {UserRole(role) for role in roles}
    if user.role not in allowed:
        raise ForbiddenError()
    return user


class SessionGuard:
    def __init__(self, issuer: TokenIssuer, users: UserRepository):
        self.issuer = issuer
        self.users = users

    def authenticate(self, token: str | None) -> User:
        """Resolve the user behind ``token`` for a protected route.

        Raises:
            NotLoggedInError: no credential supplied
            InvalidTokenError / TokenExpiredError: credential rejected
            NoSuchUserError: the user was deleted after the token was issued
            StalePasswordError: the password changed after the token was issued
        """
        if not token:
            raise NotLoggedInError()

        claims = self.issuer.verify(token)

        user = self.users.get_by_id(claims.user_id)
        if not user:
            raise NoSuchUserError()

        if user.changed_password_after(claims.issued_at):
            raise StalePasswordError()

        return user

    def try_authenticate(self, token: str | None) -> User | None:
        """Optional-auth variant: any failure means an anonymous request."""
        if not token:
            return None
        try:
            return self.authenticate(token)
        except AuthenticationError as e:
            logger.debug("Continuing as anonymous", extra={"reason": type(e).__name__})
            return None
