"""
Password Hashing Service

PBKDF2-HMAC-SHA256 password hashes for admin and customer accounts.

Stored format:
    pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>

This is a pure crypto helper with no database dependencies; UserService
decides when to hash and verify.

Usage:
    password_hash = EncryptionService.hash_password("correct horse battery staple")
    EncryptionService.verify_password("correct horse battery staple", password_hash)  # True
"""

import os
import logging

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

logger = logging.getLogger(__name__)


class EncryptionService:
    ALGORITHM = "pbkdf2_sha256"
    ITERATIONS = 600_000  # OWASP recommendation for PBKDF2-HMAC-SHA256
    SALT_BYTES = 16
    KEY_LENGTH = 32

    @staticmethod
    def _kdf(salt: bytes, iterations: int) -> PBKDF2HMAC:
        return PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=EncryptionService.KEY_LENGTH,
            salt=salt,
            iterations=iterations,
        )

    @staticmethod
    def hash_password(password: str, iterations: int | None = None) -> str:
        """
        Hash a password with a fresh random salt.

        Args:
            password: Plain text password
            iterations: Override for the PBKDF2 work factor (tests use a low value)

        Returns:
            Encoded hash string safe to store in users.password_hash

        Raises:
            ValueError: If password is empty
        """
        if not password:
            raise ValueError("Password cannot be empty")

        iterations = iterations or EncryptionService.ITERATIONS
        salt = os.urandom(EncryptionService.SALT_BYTES)
        derived = EncryptionService._kdf(salt, iterations).derive(password.encode('utf-8'))
        return f"{EncryptionService.ALGORITHM}${iterations}${salt.hex()}${derived.hex()}"

    @staticmethod
    def verify_password(password: str, encoded_hash: str | None) -> bool:
        """
        Check a password against a stored hash in constant time.

        Malformed or missing hashes never verify.
        """
        if not password or not encoded_hash:
            return False

        try:
            algorithm, iterations, salt_hex, hash_hex = encoded_hash.split('$')
            if algorithm != EncryptionService.ALGORITHM:
                logger.warning(f"Unsupported password hash algorithm: {algorithm}")
                return False
            kdf = EncryptionService._kdf(bytes.fromhex(salt_hex), int(iterations))
            kdf.verify(password.encode('utf-8'), bytes.fromhex(hash_hex))
            return True
        except InvalidKey:
            return False
        except ValueError:
            logger.warning("Malformed password hash")
            return False
