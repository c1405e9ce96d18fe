"""Password policy and hashing.

Hashes use bcrypt (salted, adaptive). Hashing and verification are CPU-bound,
so they run in a worker thread to keep the event loop responsive.
"""

import asyncio
import re

import bcrypt

from ratings_api.settings import get_settings

MIN_LENGTH = 8
MAX_LENGTH = 16
SPECIAL_CHARACTERS = '!@#$%^&*(),.?":{}|<>'

_UPPERCASE_RE = re.compile(r"[A-Z]")
_SPECIAL_RE = re.compile("[" + re.escape(SPECIAL_CHARACTERS) + "]")

# Used to burn comparable time when no account matches the login email.
_dummy_hash: bytes | None = None


class PasswordPolicyError(ValueError):
    pass


def check_password_policy(password: str) -> str:
    """Validate a new password and return it unchanged.

    Raises:
        PasswordPolicyError: If the password breaks a rule.
    """
    if len(password) < MIN_LENGTH:
        raise PasswordPolicyError(f"Password must be at least {MIN_LENGTH} characters")
    if len(password) > MAX_LENGTH:
        raise PasswordPolicyError(f"Password must not exceed {MAX_LENGTH} characters")
    if not _UPPERCASE_RE.search(password):
        raise PasswordPolicyError("Password must contain at least one uppercase letter")
    if not _SPECIAL_RE.search(password):
        raise PasswordPolicyError("Password must contain at least one special character")
    return password


def _hash_sync(password: str, rounds: int) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def _verify_sync(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash in the database, or a password bcrypt refuses.
        return False


async def hash_password(password: str) -> str:
    """Hash a password with bcrypt using the configured cost factor."""
    rounds = get_settings().bcrypt_rounds
    return await asyncio.to_thread(_hash_sync, password, rounds)


async def verify_password(password: str, hashed: str) -> bool:
    """Check a password against a stored bcrypt hash."""
    return await asyncio.to_thread(_verify_sync, password, hashed)


async def burn_verification() -> None:
    """Spend roughly one verification worth of time without a real hash.

    Keeps "unknown email" and "wrong password" login failures alike in timing.
    """
    global _dummy_hash
    if _dummy_hash is None:
        rounds = get_settings().bcrypt_rounds
        _dummy_hash = await asyncio.to_thread(bcrypt.hashpw, b"not-a-password", bcrypt.gensalt(rounds=rounds))
    await asyncio.to_thread(bcrypt.checkpw, b"still-not-a-password", _dummy_hash)
