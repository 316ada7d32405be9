"""In-memory implementation of NotificationSender for testing."""

from domain.model.errors import DependencyError
from domain.model.user import User


class FakeNotificationSender:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[dict] = []

    def _record(self, kind: str, user: User, url: str) -> None:
        if self.fail:
            raise DependencyError(f"Could not deliver {kind} mail to {user.email}")
        self.sent.append({'kind': kind, 'to': user.email, 'url': url})

    def send_welcome(self, user: User, url: str) -> None:
        self._record('welcome', user, url)

    def send_password_reset(self, user: User, reset_url: str) -> None:
        self._record('password_reset', user, reset_url)

    def last(self, kind: str) -> dict | None:
        for message in reversed(self.sent):
            if message['kind'] == kind:
                return message
        return None
