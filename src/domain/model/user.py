# domain/model/user.py

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum

from domain.model.errors import ValidationError


class UserRole(str, Enum):
    """Roles a user account can hold."""
    USER = 'user'
    GUIDE = 'guide'
    LEAD_GUIDE = 'lead-guide'
    ADMIN = 'admin'


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
# Finest step password_changed_at and token issue times are compared at
TIMESTAMP_RESOLUTION = timedelta(milliseconds=1)


@dataclass
class User:
    """Domain model representing a user account."""
    id: str
    email: str
    created_at: datetime
    updated_at: datetime
    name: str | None = None
    role: UserRole = UserRole.USER
    password_hash: str | None = None
    password_changed_at: datetime | None = None
    password_reset_token: str | None = None
    password_reset_expires: datetime | None = None

    def change_password(self, password_hash: str, now: datetime | None = None) -> None:
        """Replace the password hash and record when it happened."""
        now = now or datetime.now(timezone.utc)
        self.password_hash = password_hash
        self.password_changed_at = truncate_to_millis(now)
        self.updated_at = now

    def changed_password_after(self, issued_at: datetime) -> bool:
        """True if the password changed after a credential was issued.

        Compared in milliseconds, the precision MongoDB keeps. A credential
        signed in the same millisecond as the change is stale too; only
        credentials issued strictly later pass.
        """
        if self.password_changed_at is None:
            return False
        return to_millis(self.password_changed_at) >= to_millis(issued_at)

    def set_reset_token(self, token_hash: str, expires: datetime) -> None:
        self.password_reset_token = token_hash
        self.password_reset_expires = expires

    def clear_reset_token(self) -> None:
        self.password_reset_token = None
        self.password_reset_expires = None

    def validate(self) -> None:
        """Check record invariants before it is persisted.

        Raises:
            ValidationError: the record is inconsistent
        """
        if not self.email or '@' not in self.email:
            raise ValidationError("Please provide a valid email")
        if self.email != normalize_email(self.email):
            raise ValidationError("Email must be lower case")
        if not self.password_hash:
            raise ValidationError("Please provide a password")
        if (self.password_reset_token is None) != (self.password_reset_expires is None):
            raise ValidationError("Reset token and expiry must be set together")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _as_utc(value: datetime) -> datetime:
    # pymongo hands back naive datetimes unless the client is tz_aware
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_millis(value: datetime) -> int:
    """Milliseconds since the Unix epoch, without float rounding."""
    return (_as_utc(value) - EPOCH) // TIMESTAMP_RESOLUTION


def truncate_to_millis(value: datetime) -> datetime:
    return value.replace(microsecond=value.microsecond // 1000 * 1000)
