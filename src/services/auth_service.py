"""Auth service: signup, login and password lifecycle business logic.

Pure business logic with no HTTP dependencies.
Raises domain errors that the API layer maps to HTTP status codes.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from domain.model.errors import (
    DependencyError,
    IncorrectCredentialsError,
    InternalError,
    InvalidResetTokenError,
    NoSuchUserError,
    NotFoundError,
    ValidationError,
    WrongCurrentPasswordError,
)
from domain.model.user import TIMESTAMP_RESOLUTION, User, normalize_email
from port.notification import NotificationSender
from port.user_repository import UserRepository
from services.credentials import PasswordHasher, hash_reset_token, new_reset_token
from services.token_issuer import TokenIssuer

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
PASSWORD_RESET_EXPIRATION = timedelta(minutes=10)


@dataclass(frozen=True)
class IssuedSession:
    """A user together with a freshly signed credential."""
    user: User
    token: str


def _validate_new_password(password: str | None, password_confirm: str | None) -> None:
    if not password:
        raise ValidationError("Please provide a password")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if password != password_confirm:
        raise ValidationError("Passwords are not the same!")


class AuthService:
    def __init__(
        self,
        users: UserRepository,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
        notifier: NotificationSender,
        reset_expires_in: timedelta = PASSWORD_RESET_EXPIRATION,
    ):
        self.users = users
        self.hasher = hasher
        self.issuer = issuer
        self.notifier = notifier
        self.reset_expires_in = reset_expires_in

    def _issue(self, user: User, issued_at: datetime | None = None) -> IssuedSession:
        user.password_hash = None
        return IssuedSession(user=user, token=self.issuer.issue(user.id, issued_at=issued_at))

    def _issue_after_change(self, user: User) -> IssuedSession:
        # tokens from the change's own millisecond are stale, so sign one tick later
        return self._issue(user, issued_at=user.password_changed_at + TIMESTAMP_RESOLUTION)

    def _save(self, user: User, skip_validation: bool = False) -> None:
        if not self.users.save(user, skip_validation=skip_validation):
            raise InternalError("Failed to save user")

    def signup(
        self,
        email: str,
        password: str,
        password_confirm: str,
        welcome_url: str,
        name: str | None = None,
    ) -> IssuedSession:
        """Create an account and sign the new user in.

        The welcome mail is best-effort: a delivery failure is logged only.

        Raises:
            ValidationError: password too short or confirmation mismatch
            ConflictError: email already registered
        """
        _validate_new_password(password, password_confirm)
        email = normalize_email(email)

        user = self.users.create(
            email=email,
            password_hash=self.hasher.hash(password),
            name=name,
        )
        if not user:
            raise InternalError("Failed to create user")

        try:
            self.notifier.send_welcome(user, welcome_url)
        except DependencyError as e:
            logger.warning("Welcome email not sent", extra={"userId": user.id, "error": str(e)})

        logger.info("User signed up", extra={"userId": user.id, "email": email})
        return self._issue(user)

    def login(self, email: str | None, password: str | None) -> IssuedSession:
        """Check credentials and issue a new session.

        Unknown email and wrong password fail identically so callers cannot
        discover which addresses are registered.

        Raises:
            ValidationError: email or password missing
            IncorrectCredentialsError: no such user or wrong password
        """
        if not email or not password:
            raise ValidationError("Please provide email and password!")

        user = self.users.find_by_email(normalize_email(email), include_hash=True)
        if not user or not self.hasher.verify(password, user.password_hash):
            raise IncorrectCredentialsError()

        logger.info("User logged in", extra={"userId": user.id})
        return self._issue(user)

    def forgot_password(self, email: str, reset_url_for) -> None:
        """Store a reset-token hash for the user and mail them the raw token.

        ``reset_url_for`` builds the link from the raw token. If the mail
        cannot be sent the stored token is cleared again.

        Raises:
            NotFoundError: no user with that email
            DependencyError: the reset mail could not be sent
        """
        user = self.users.find_by_email(normalize_email(email))
        if not user:
            raise NotFoundError("There is no user with this email address.")

        raw_token, token_hash = new_reset_token()
        user.set_reset_token(token_hash, datetime.now(timezone.utc) + self.reset_expires_in)
        self._save(user, skip_validation=True)

        try:
            self.notifier.send_password_reset(user, reset_url_for(raw_token))
        except DependencyError:
            user.clear_reset_token()
            self._save(user, skip_validation=True)
            logger.warning("Reset token cleared after send failure", extra={"userId": user.id})
            raise

        logger.info("Password reset token sent", extra={"userId": user.id})

    def reset_password(self, raw_token: str, password: str, password_confirm: str) -> IssuedSession:
        """Set a new password for the holder of a valid reset token.

        Raises:
            InvalidResetTokenError: token unknown, already used or expired
            ValidationError: new password rejected
        """
        now = datetime.now(timezone.utc)
        user = self.users.find_by_reset_token(hash_reset_token(raw_token), now)
        if not user:
            raise InvalidResetTokenError()

        _validate_new_password(password, password_confirm)
        user.change_password(self.hasher.hash(password), now)
        user.clear_reset_token()
        self._save(user)

        logger.info("Password reset", extra={"userId": user.id})
        return self._issue_after_change(user)

    def update_profile(
        self,
        user_id: str,
        name: str | None = None,
        email: str | None = None,
    ) -> User:
        """Change the signed-in user's name and/or email.

        Password and role are never touched here.

        Raises:
            NoSuchUserError: the account no longer exists
            ValidationError: blank name or malformed email
            ConflictError: the email belongs to another account
        """
        user = self.users.get_by_id(user_id, include_hash=True)
        if not user:
            raise NoSuchUserError()

        if name is not None:
            if not name.strip():
                raise ValidationError("Please tell us your name!")
            user.name = name.strip()
        if email is not None:
            user.email = normalize_email(email)

        user.updated_at = datetime.now(timezone.utc)
        self._save(user)

        logger.info("Profile updated", extra={"userId": user.id})
        user.password_hash = None
        return user

    def update_password(
        self,
        user_id: str,
        current_password: str,
        password: str,
        password_confirm: str,
    ) -> IssuedSession:
        """Change the password of a signed-in user.

        Raises:
            WrongCurrentPasswordError: ``current_password`` does not match
            ValidationError: new password rejected
        """
        now = datetime.now(timezone.utc)
        user = self.users.get_by_id(user_id, include_hash=True)
        if not user or not self.hasher.verify(current_password, user.password_hash):
            raise WrongCurrentPasswordError()

        _validate_new_password(password, password_confirm)
        user.change_password(self.hasher.hash(password), now)
        self._save(user)

        logger.info("Password updated", extra={"userId": user.id})
        return self._issue_after_change(user)
