"""
Cryptographic helpers: password hashing and code hashing.

Uses argon2 for passwords (via argon2-cffi) and SHA-256 for verification
code hashing.
"""

from __future__ import annotations

import hashlib

from argon2 import PasswordHasher

_password_hasher = PasswordHasher()


def hash_password(plain_password: str) -> str:
    """Hash *plain_password* with argon2id.

    Returns:
        Argon2 hash string (includes algorithm parameters and salt).
    """
    return _password_hasher.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Verify *plain_password* against an argon2 *password_hash*.

    Returns:
        ``True`` if the password matches, ``False`` for any failure
        (wrong password, invalid hash, etc.).
    """
    try:
        _password_hasher.verify(password_hash, plain_password)
        return True
    except Exception:
        return False


def hash_code(code: str) -> str:
    """Return the hex-encoded SHA-256 digest of *code*.

    Verification codes are stored hashed so the plaintext is never
    persisted; lookups hash the submitted code the same way.
    """
    return hashlib.sha256(code.encode("utf-8")).hexdigest()
