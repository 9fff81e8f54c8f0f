"""
Password hashing and session token helpers.
"""

import hashlib
import secrets

from ruleadmin.core.config import settings
from ruleadmin.core.constants import SESSION_TOKEN_BYTES

_ALGORITHM = "pbkdf2_sha256"


def hash_password(password: str, rounds: int | None = None) -> str:
    """Return a salted PBKDF2-SHA256 hash in ``algo$rounds$salt$hex`` form."""
    if not password:
        raise ValueError("Password cannot be empty")
    rounds = rounds or settings.PASSWORD_HASH_ROUNDS
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("ascii"), rounds
    )
    return f"{_ALGORITHM}${rounds}${salt}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algo, rounds_raw, salt, expected_hex = encoded.split("$", 3)
        rounds = int(rounds_raw)
    except (AttributeError, ValueError):
        return False
    if algo != _ALGORITHM:
        return False
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("ascii"), rounds
    )
    return secrets.compare_digest(digest.hex(), expected_hex)


def new_session_token() -> str:
    return secrets.token_hex(SESSION_TOKEN_BYTES)
