"""Test-session environment: a signing secret and a cheap bcrypt cost."""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-natours-accounts")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")
