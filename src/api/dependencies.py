from datetime import timedelta

from fastapi import Depends

from adapter.external.smtp_notification import SmtpNotificationSender
from adapter.mongodb.connection import get_mongodb_client, get_database_name
from adapter.mongodb.user_repository import MongoUserRepository
from domain.model.errors import DependencyError
from port.notification import NotificationSender
from port.user_repository import UserRepository
from services.auth_service import AuthService
from services.credentials import PasswordHasher
from services.session_guard import SessionGuard
from services.token_issuer import TokenIssuer
from utils.config import Settings, get_settings


class DatabaseUnavailableError(DependencyError):
    status_code = 503
    default_message = "Database unavailable"


def _get_db():
    """Get MongoDB database, raising 503 if unavailable."""
    client = get_mongodb_client()
    if client is None:
        raise DatabaseUnavailableError()
    return client[get_database_name()]


def get_user_repo() -> UserRepository:
    return MongoUserRepository(_get_db())


def get_notifier(settings: Settings = Depends(get_settings)) -> NotificationSender:
    return SmtpNotificationSender(
        host=settings.email_host,
        port=settings.email_port,
        sender=settings.email_from,
        username=settings.email_username,
        password=settings.email_password,
        reset_expires_minutes=settings.password_reset_expires_minutes,
    )


def get_token_issuer(settings: Settings = Depends(get_settings)) -> TokenIssuer:
    return TokenIssuer(
        secret=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        expires_in=timedelta(days=settings.jwt_expires_days),
    )


def get_password_hasher(settings: Settings = Depends(get_settings)) -> PasswordHasher:
    return PasswordHasher(rounds=settings.bcrypt_rounds)


def get_session_guard(
    issuer: TokenIssuer = Depends(get_token_issuer),
    users: UserRepository = Depends(get_user_repo),
) -> SessionGuard:
    return SessionGuard(issuer, users)


def get_auth_service(
    settings: Settings = Depends(get_settings),
    users: UserRepository = Depends(get_user_repo),
    hasher: PasswordHasher = Depends(get_password_hasher),
    issuer: TokenIssuer = Depends(get_token_issuer),
    notifier: NotificationSender = Depends(get_notifier),
) -> AuthService:
    return AuthService(
        users=users,
        hasher=hasher,
        issuer=issuer,
        notifier=notifier,
        reset_expires_in=timedelta(minutes=settings.password_reset_expires_minutes),
    )
