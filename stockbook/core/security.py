"""Security helpers (hashing, verification, tokens and ids)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
import hashlib
import secrets
import string
import time

from argon2 import PasswordHasher, exceptions as argon_exc

_ph = PasswordHasher()
_PREFIX = "argon2$"
_ID_ALPHABET = string.digits + string.ascii_lowercase

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 100


@dataclass(frozen=True)
class PasswordCheck:
    valid: bool
    reason: Optional[str] = None


def hash_password(password: str) -> str:
    """Create a modern Argon2 hash with a prefix for detection."""
    hashed = _ph.hash(password)
    return f"{_PREFIX}{hashed}"


def legacy_hash_password(password: str) -> str:
    """Unsalted SHA-256 hex digest written by earlier versions of the app."""
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def verify_password(password: str, stored_hash: str | None) -> bool:
    stored = stored_hash or ""
    if stored.startswith(_PREFIX):
        hashed = stored[len(_PREFIX) :]
        try:
            return _ph.verify(hashed, password)
        except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
            return False
    if not stored:
        return False
    legacy = legacy_hash_password(password)
    return secrets.compare_digest(legacy, stored)


def needs_rehash(stored_hash: str | None) -> bool:
    stored = stored_hash or ""
    if not stored.startswith(_PREFIX):
        return True
    try:
        return _ph.check_needs_rehash(stored[len(_PREFIX) :])
    except argon_exc.InvalidHashError:
        return True


def validate_password_strength(password: str | None) -> PasswordCheck:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        return PasswordCheck(False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if len(password) > MAX_PASSWORD_LENGTH:
        return PasswordCheck(False, "Password is too long")
    return PasswordCheck(True)


def generate_session_token() -> str:
    """Opaque token digested from the current time plus random bytes."""
    seed = f"{time.time_ns()}-{secrets.token_hex(16)}"
    return hashlib.sha256(seed.encode("utf-8")).hexdigest()


def generate_id() -> str:
    """Record id shaped like ``<epoch-millis>-<9 base36 chars>``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"{int(time.time() * 1000)}-{suffix}"
