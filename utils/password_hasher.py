"""
Password hashing for the identity provider.

Stored format: pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>
"""

import os

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

ALGORITHM = "pbkdf2_sha256"
KEY_LENGTH = 32
SALT_LENGTH = 16


def _kdf(salt: bytes, iterations: int) -> PBKDF2HMAC:
    # A PBKDF2HMAC instance is single-use, build one per derive/verify
    return PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=iterations,
    )


def hash_password(password: str, iterations: int) -> str:
    """
    Hash a password with a fresh random salt.

    Args:
        password: Plain text password
        iterations: PBKDF2 iteration count

    Returns:
        Encoded hash string including algorithm, iterations and salt
    """
    salt = os.urandom(SALT_LENGTH)
    digest = _kdf(salt, iterations).derive(password.encode("utf-8"))
    return f"{ALGORITHM}${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    """
    Check a password against an encoded hash in constant time.

    Returns False for malformed or foreign-algorithm hashes instead of raising.
    """
    try:
        algorithm, iterations, salt, expected = encoded.split("$")
        iterations = int(iterations)
        salt_bytes = bytes.fromhex(salt)
        expected_bytes = bytes.fromhex(expected)
    except ValueError:
        return False
    if algorithm != ALGORITHM or iterations < 1:
        return False
    try:
        _kdf(salt_bytes, iterations).verify(password.encode("utf-8"), expected_bytes)
    except InvalidKey:
        return False
    return True
