from datetime import datetime
from typing import Protocol

from domain.model.user import User, UserRole


class UserRepository(Protocol):
    """Protocol defining the interface for user data access.

    Reads leave ``password_hash`` empty unless ``include_hash`` is set.
    """
    def create(
        self,
        email: str,
        password_hash: str,
        name: str | None = None,
        role: UserRole = UserRole.USER,
    ) -> User | None:
        """Create a new user. Return User or None if creation failed.

        Raises:
            ConflictError: email already registered
        """
        ...

    def find_by_email(self, email: str, include_hash: bool = False) -> User | None:
        """Find a user by email. Return User or None if not found."""
        ...

    def get_by_id(self, user_id: str, include_hash: bool = False) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        ...

    def find_by_reset_token(self, token_hash: str, now: datetime) -> User | None:
        """Find the user holding this reset-token hash with an expiry after ``now``."""
        ...

    def save(self, user: User, skip_validation: bool = False) -> bool:
        """Persist a mutated user. Return True if successful.

        Runs ``user.validate()`` first unless ``skip_validation`` is set.
        An empty ``password_hash`` leaves the stored hash untouched.
        """
        ...
