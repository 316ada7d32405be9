"""Signed session credentials (JWT)."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from domain.model.errors import InvalidTokenError, TokenExpiredError
from domain.model.user import EPOCH, TIMESTAMP_RESOLUTION, to_millis

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
JWT_EXPIRATION_DAYS = 90


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    issued_at: datetime


class TokenIssuer:
    """Mint and verify HS256 session tokens bound to a user id."""

    def __init__(
        self,
        secret: str,
        algorithm: str = JWT_ALGORITHM,
        expires_in: timedelta = timedelta(days=JWT_EXPIRATION_DAYS),
    ):
        if not secret:
            raise ValueError("A signing secret is required")
        self.secret = secret
        self.algorithm = algorithm
        self.expires_in = expires_in

    def issue(self, user_id: str, issued_at: datetime | None = None) -> str:
        """Create a signed token for ``user_id``.

        ``iat`` is a fractional NumericDate carrying milliseconds so the
        freshness check can tell a token from a password change made in the
        same second.
        """
        issued_at = issued_at or datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "iat": to_millis(issued_at) / 1000,
            "exp": issued_at + self.expires_in,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Check signature and expiry and return the embedded claims.

        Raises:
            TokenExpiredError: signature is valid but ``exp`` has passed
            InvalidTokenError: tampered, malformed or missing claims
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError as e:
            logger.debug(f"JWT verification failed: {e}")
            raise InvalidTokenError()

        user_id = payload.get("sub")
        issued_at = payload.get("iat")
        if not user_id or not isinstance(issued_at, (int, float)):
            raise InvalidTokenError()

        return TokenClaims(
            user_id=user_id,
            issued_at=EPOCH + round(issued_at * 1000) * TIMESTAMP_RESOLUTION,
        )
