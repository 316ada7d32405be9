"""In-memory implementation of UserRepository for testing."""

import uuid
from dataclasses import replace
from datetime import datetime, timezone

from domain.model.errors import ConflictError
from domain.model.user import User, UserRole


class FakeUserRepository:
    def __init__(self):
        self.store: dict[str, User] = {}

    def _read(self, user: User, include_hash: bool) -> User:
        # hand out copies so unsaved mutations never leak into the store
        copy = replace(user)
        if not include_hash:
            copy.password_hash = None
        return copy

    # ── write operations ─────────────────────────────────────

    def create(
        self,
        email: str,
        password_hash: str,
        name: str | None = None,
        role: UserRole = UserRole.USER,
    ) -> User | None:
        if any(u.email == email for u in self.store.values()):
            raise ConflictError(f"Duplicate field value: '{email}'. Please use another value!")

        user_id = uuid.uuid4().hex
        now = datetime.now(timezone.utc)

        user = User(
            id=user_id,
            email=email,
            name=name,
            role=role,
            created_at=now,
            updated_at=now,
            password_hash=password_hash,
        )
        user.validate()
        self.store[user_id] = user
        return self._read(user, include_hash=False)

    def save(self, user: User, skip_validation: bool = False) -> bool:
        stored = self.store.get(user.id)
        if not stored:
            return False

        if any(u.email == user.email and u.id != user.id for u in self.store.values()):
            raise ConflictError(f"Duplicate field value: '{user.email}'. Please use another value!")

        updated = replace(user)
        if not updated.password_hash:
            updated.password_hash = stored.password_hash
        if not skip_validation:
            updated.validate()

        self.store[user.id] = updated
        return True

    # ── read operations ──────────────────────────────────────

    def find_by_email(self, email: str, include_hash: bool = False) -> User | None:
        for user in self.store.values():
            if user.email == email:
                return self._read(user, include_hash)
        return None

    def get_by_id(self, user_id: str, include_hash: bool = False) -> User | None:
        user = self.store.get(user_id)
        return self._read(user, include_hash) if user else None

    def find_by_reset_token(self, token_hash: str, now: datetime) -> User | None:
        for user in self.store.values():
            if (
                user.password_reset_token == token_hash
                and user.password_reset_expires is not None
                and user.password_reset_expires > now
            ):
                return self._read(user, include_hash=False)
        return None
