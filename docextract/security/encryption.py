"""Symmetric encryption for secrets stored at rest (AES-256-GCM, PBKDF2 key derivation).

Blob layout, base64-encoded as one string::

    salt (16 bytes) || nonce (12 bytes) || ciphertext + tag (16 bytes)
"""

import base64
import binascii
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

SALT_LENGTH = 16
NONCE_LENGTH = 12
TAG_LENGTH = 16
KEY_LENGTH = 32
PBKDF2_ITERATIONS = 600_000


class EncryptionError(Exception):
    """Raised when encryption or decryption cannot be performed."""


class DecryptionError(EncryptionError):
    """Raised when ciphertext fails authentication (tampered data or wrong secret)."""


def _derive_key(secret: str, salt: bytes) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=PBKDF2_ITERATIONS,
    )
    return kdf.derive(secret.encode("utf-8"))


def encrypt(plaintext: str, secret: str) -> str:
    """Encrypt ``plaintext`` with a key derived from ``secret``.

    Raises:
        EncryptionError: if either argument is empty.
    """
    if not plaintext or not secret:
        raise EncryptionError("Plaintext and encryption secret are required")

    salt = os.urandom(SALT_LENGTH)
    nonce = os.urandom(NONCE_LENGTH)
    key = _derive_key(secret, salt)
    ciphertext = AESGCM(key).encrypt(nonce, plaintext.encode("utf-8"), None)
    return base64.b64encode(salt + nonce + ciphertext).decode("ascii")


def decrypt(blob: str, secret: str) -> str:
    """Reverse :func:`encrypt`.

    Raises:
        EncryptionError: if either argument is empty or the blob is not valid base64.
        DecryptionError: if authentication fails.
    """
    if not blob or not secret:
        raise EncryptionError("Encrypted data and encryption secret are required")

    try:
        combined = base64.b64decode(blob, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise EncryptionError(f"Encrypted data is not valid base64: {exc}") from exc

    if len(combined) < SALT_LENGTH + NONCE_LENGTH + TAG_LENGTH:
        raise DecryptionError("Encrypted data is too short")

    salt = combined[:SALT_LENGTH]
    nonce = combined[SALT_LENGTH:SALT_LENGTH + NONCE_LENGTH]
    ciphertext = combined[SALT_LENGTH + NONCE_LENGTH:]
    key = _derive_key(secret, salt)
    try:
        plaintext = AESGCM(key).decrypt(nonce, ciphertext, None)
    except InvalidTag as exc:
        raise DecryptionError("Decryption failed: authentication tag mismatch") from exc
    return plaintext.decode("utf-8")
