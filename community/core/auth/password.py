"""Password hashing and policy for community accounts."""

from __future__ import annotations

from typing import Optional

from community.extensions import bcrypt

# Checked when no account matches so unknown emails cost as much as wrong passwords.
_PLACEHOLDER_SECRET = "community-placeholder-secret"


def hash_password(plain_password: str) -> str:
    return bcrypt.generate_password_hash(plain_password).decode("utf-8")


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Check ``plain_password`` against a stored hash; ``None`` never matches."""
    if not hashed_password:
        bcrypt.check_password_hash(hash_password(_PLACEHOLDER_SECRET), plain_password)
        return False
    return bcrypt.check_password_hash(hashed_password, plain_password)


def meets_policy(plain_password: str, min_length: int) -> bool:
    return len(plain_password) >= min_length
