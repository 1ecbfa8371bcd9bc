"""Hashing and symmetric encryption helpers.

* :func:`hash_value` produces a salted SHA-256 digest for storing passwords
  or tokens next to their salt.
* :class:`Cipher` encrypts and decrypts text with AES-256-CBC using a
  configured key and initialization vector; ``strong`` encryption draws a
  fresh iv per message and returns it alongside the ciphertext.

Keys, ivs and salts travel as lowercase hex strings.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from typing import NamedTuple

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher as _AesCipher
from cryptography.hazmat.primitives.ciphers import algorithms, modes

from .errors import SecurityError
from .settings import Settings

logger = logging.getLogger(__name__)

KEY_BYTES = 32
IV_BYTES = 16
SALT_BYTES = 32


class HashResult(NamedTuple):
    hash: str
    salt: str


class Encrypted(NamedTuple):
    data: str
    iv: str


def new_key() -> str:
    """Return a random 32 byte AES-256 key, hex encoded."""

    return secrets.token_hex(KEY_BYTES)


def new_iv() -> str:
    return secrets.token_hex(IV_BYTES)


def new_salt() -> str:
    return secrets.token_hex(SALT_BYTES)


def hash_value(value: str, salt: str | None = None) -> HashResult:
    """Hash ``value + salt`` with SHA-256; a new salt is drawn when none is given."""

    applied = salt if salt else new_salt()
    digest = hashlib.sha256(f"{value}{applied}".encode("utf-8")).hexdigest()
    return HashResult(hash=digest, salt=applied)


def verify_hash(value: str, expected: str, salt: str) -> bool:
    """Return ``True`` if ``value`` hashed with ``salt`` equals ``expected``."""

    candidate = hash_value(value, salt).hash
    return hmac.compare_digest(candidate, expected.lower())


def _decode_hex(value: str, *, size: int, label: str) -> bytes:
    try:
        raw = bytes.fromhex(value)
    except ValueError as exc:
        raise SecurityError(f"{label} must be hex encoded") from exc
    if len(raw) != size:
        raise SecurityError(f"{label} must be {size} bytes long, got {len(raw)}")
    return raw


class Cipher:
    """AES-256-CBC with PKCS7 padding around a fixed key and default iv."""

    def __init__(self, key: str, iv: str) -> None:
        self._key = _decode_hex(key, size=KEY_BYTES, label="Key")
        self._iv = _decode_hex(iv, size=IV_BYTES, label="IV")

    @classmethod
    def from_settings(cls, settings: Settings) -> Cipher:
        """Build a cipher from ``EZKIT_SECURITY_KEY`` / ``EZKIT_SECURITY_IV``.

        Missing values are replaced by freshly generated ones. Data encrypted
        with such a cipher cannot be decrypted after the process exits unless
        the caller persists :attr:`key` and :attr:`iv`.
        """

        key = settings.security_key.get_secret_value() if settings.security_key else None
        iv = settings.security_iv.get_secret_value() if settings.security_iv else None
        if key is None or iv is None:
            logger.warning(
                "security.cipher.generated_defaults",
                extra={"generated_key": key is None, "generated_iv": iv is None},
            )
        return cls(key or new_key(), iv or new_iv())

    @property
    def key(self) -> str:
        return self._key.hex()

    @property
    def iv(self) -> str:
        return self._iv.hex()

    def encrypt(self, data: str, strong: bool = False) -> Encrypted:
        """Encrypt ``data``; ``strong`` uses a fresh iv instead of the configured one."""

        iv = bytes.fromhex(new_iv()) if strong else self._iv
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(data.encode("utf-8")) + padder.finalize()
        encryptor = _AesCipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return Encrypted(data=ciphertext.hex(), iv=iv.hex())

    def decrypt(self, data: str, iv: str | None = None) -> str:
        """Decrypt hex ``data`` with ``iv`` (the configured iv when omitted)."""

        raw_iv = _decode_hex(iv, size=IV_BYTES, label="IV") if iv else self._iv
        try:
            ciphertext = bytes.fromhex(data)
        except ValueError as exc:
            raise SecurityError("Encrypted data must be hex encoded") from exc

        decryptor = _AesCipher(algorithms.AES(self._key), modes.CBC(raw_iv)).decryptor()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        try:
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            plain = unpadder.update(padded) + unpadder.finalize()
            return plain.decode("utf-8")
        except (ValueError, UnicodeDecodeError) as exc:
            raise SecurityError("Unable to decrypt data") from exc


__all__ = [
    "Cipher",
    "Encrypted",
    "HashResult",
    "hash_value",
    "new_iv",
    "new_key",
    "new_salt",
    "verify_hash",
]
