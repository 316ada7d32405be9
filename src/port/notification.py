"""Port definition for outbound account mail."""

from typing import Protocol

from domain.model.user import User


class NotificationSender(Protocol):
    """Sends account mail. Implementations raise DependencyError on failure."""

    def send_welcome(self, user: User, url: str) -> None: ...
    def send_password_reset(self, user: User, reset_url: str) -> None: ...
