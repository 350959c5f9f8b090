"""
AES-256-GCM encryption for secrets stored in user settings.

Ciphertexts are stored as ``"<ivHex>:<authTagHex>:<ciphertextHex>"``.
"""

import logging
import os
from typing import Any, Dict

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..config import settings


logger = logging.getLogger(__name__)

IV_LENGTH = 16
TAG_LENGTH = 16

# Setting names matching these fragments are encrypted at rest
SENSITIVE_MARKERS = ("key", "secret")


class CryptoError(Exception):
    """Raised when a value cannot be encrypted or decrypted."""


def _get_key() -> bytes:
    key_hex = settings.ENCRYPTION_KEY
    if not key_hex:
        return b""
    try:
        key = bytes.fromhex(key_hex)
    except ValueError as e:
        raise CryptoError("ENCRYPTION_KEY must be hex encoded") from e
    if len(key) != 32:
        raise CryptoError("ENCRYPTION_KEY must be 32 bytes (64 hex characters)")
    return key


def encrypt(text: str) -> str:
    """Encrypt ``text``; returns it unchanged when no key is configured."""
    key = _get_key()
    if not key:
        logger.warning("ENCRYPTION_KEY not set, storing plain text (development only)")
        return text

    iv = os.urandom(IV_LENGTH)
    sealed = AESGCM(key).encrypt(iv, text.encode("utf-8"), None)
    ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]

    return f"{iv.hex()}:{tag.hex()}:{ciphertext.hex()}"


def decrypt(encrypted_text: str) -> str:
    """
    Decrypt a value produced by :func:`encrypt`.

    Raises:
        CryptoError: if the value is not in ``iv:tag:ciphertext`` form or fails
            authentication.
    """
    key = _get_key()
    if not key:
        logger.warning("ENCRYPTION_KEY not set, returning stored text as-is (development only)")
        return encrypted_text

    parts = encrypted_text.split(":")
    if len(parts) != 3:
        raise CryptoError("Invalid encrypted text format")

    try:
        iv, tag, ciphertext = (bytes.fromhex(part) for part in parts)
        plain = AESGCM(key).decrypt(iv, ciphertext + tag, None)
    except (ValueError, InvalidTag) as e:
        raise CryptoError("Failed to decrypt data") from e

    return plain.decode("utf-8")


def generate_encryption_key() -> str:
    """Generate a random 32-byte key, hex encoded, for ``ENCRYPTION_KEY``."""
    return os.urandom(32).hex()


def is_sensitive(name: str) -> bool:
    lowered = name.lower()
    return any(marker in lowered for marker in SENSITIVE_MARKERS)


def decrypt_lenient(value: Any) -> Any:
    """
    Decrypt ``value`` if it looks like a ciphertext, else return it unchanged.

    Any string containing a colon is a candidate; values that fail to decrypt
    (legacy plain text, URLs) are returned as stored.
    """
    if isinstance(value, str) and ":" in value:
        try:
            return decrypt(value)
        except CryptoError:
            return value
    return value


def encrypt_provider_settings(provider_settings: Dict[str, Any]) -> Dict[str, Any]:
    """Encrypt the sensitive fields of each provider's settings block."""
    encrypted: Dict[str, Any] = {}
    for provider, values in provider_settings.items():
        if isinstance(values, dict):
            encrypted[provider] = {
                name: encrypt(value) if is_sensitive(name) and isinstance(value, str) and value else value
                for name, value in values.items()
            }
        elif is_sensitive(provider) and isinstance(values, str) and values:
            encrypted[provider] = encrypt(values)
        else:
            encrypted[provider] = values
    return encrypted


def decrypt_provider_settings(provider_settings: Dict[str, Any]) -> Dict[str, Any]:
    """Inverse of :func:`encrypt_provider_settings`, tolerant of plain values."""
    decrypted: Dict[str, Any] = {}
    for provider, values in (provider_settings or {}).items():
        if isinstance(values, dict):
            decrypted[provider] = {name: decrypt_lenient(value) for name, value in values.items()}
        else:
            decrypted[provider] = decrypt_lenient(values)
    return decrypted
