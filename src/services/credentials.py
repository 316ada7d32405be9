"""Password hashing and password-reset tokens."""

import hashlib
import secrets

import bcrypt

BCRYPT_ROUNDS = 12
RESET_TOKEN_BYTES = 32


class PasswordHasher:
    """bcrypt hashing with a configurable cost factor."""

    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')

    def verify(self, password: str, hashed: str | None) -> bool:
        """Check ``password`` against ``hashed``. Never raises on mismatch."""
        if not password or not hashed:
            return False
        try:
            return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))
        except ValueError:
            # malformed hash, e.g. an invalid salt
            return False


def hash_reset_token(raw_token: str) -> str:
    """Fast one-way hash used to store and look up reset tokens."""
    return hashlib.sha256(raw_token.encode('utf-8')).hexdigest()


def new_reset_token() -> tuple[str, str]:
    """Return ``(raw_token, token_hash)``. Only the hash is ever persisted."""
    raw_token = secrets.token_hex(RESET_TOKEN_BYTES)
    return raw_token, hash_reset_token(raw_token)
