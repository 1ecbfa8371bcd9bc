from __future__ import annotations

import hashlib
import logging

import pytest

from ezkit.errors import SecurityError
from ezkit.security import Cipher, hash_value, new_iv, new_key, new_salt, verify_hash
from ezkit.settings import Settings


def test_key_material_lengths() -> None:
    assert len(bytes.fromhex(new_key())) == 32
    assert len(bytes.fromhex(new_iv())) == 16
    assert len(bytes.fromhex(new_salt())) == 32
    assert new_key() != new_key()


def test_hash_with_explicit_salt_is_deterministic() -> None:
    result = hash_value("pancakes", "abcd")

    assert result.salt == "abcd"
    assert result.hash == hashlib.sha256(b"pancakesabcd").hexdigest()
    assert hash_value("pancakes", "abcd") == result


def test_hash_generates_salt_when_missing() -> None:
    first = hash_value("pancakes")
    second = hash_value("pancakes")

    assert len(first.salt) == 64
    assert first.salt != second.salt
    assert first.hash != second.hash


def test_verify_hash() -> None:
    stored = hash_value("hunter2")

    assert verify_hash("hunter2", stored.hash, stored.salt) is True
    assert verify_hash("hunter3", stored.hash, stored.salt) is False


def test_encrypt_with_configured_iv_is_stable() -> None:
    cipher = Cipher(new_key(), new_iv())

    first = cipher.encrypt("table 4: two coffees")
    second = cipher.encrypt("table 4: two coffees")

    assert first == second
    assert first.iv == cipher.iv
    assert cipher.decrypt(first.data) == "table 4: two coffees"


def test_strong_encryption_uses_fresh_iv() -> None:
    cipher = Cipher(new_key(), new_iv())

    encrypted = cipher.encrypt("order #42", strong=True)

    assert encrypted.iv != cipher.iv
    assert cipher.decrypt(encrypted.data, encrypted.iv) == "order #42"


def test_decrypt_tampered_data_fails() -> None:
    cipher = Cipher(new_key(), new_iv())
    # A full block of plaintext is followed by a full block of padding (0x10).
    raw = bytearray.fromhex(cipher.encrypt("0123456789abcdef").data)
    assert len(raw) == 32

    # Flipping a bit in the first block flips the same bit of the padding byte.
    raw[15] ^= 0x01

    with pytest.raises(SecurityError):
        cipher.decrypt(raw.hex())


def test_decrypt_rejects_malformed_input() -> None:
    cipher = Cipher(new_key(), new_iv())

    with pytest.raises(SecurityError):
        cipher.decrypt("not hex")
    with pytest.raises(SecurityError):
        cipher.decrypt("abcd")


@pytest.mark.parametrize(
    ("key", "iv"),
    [
        ("00" * 16, "00" * 16),
        ("00" * 32, "00" * 8),
        ("zz" * 32, "00" * 16),
    ],
)
def test_cipher_rejects_bad_key_material(key: str, iv: str) -> None:
    with pytest.raises(SecurityError):
        Cipher(key, iv)


def test_cipher_from_settings_uses_configured_values() -> None:
    key, iv = new_key(), new_iv()

    cipher = Cipher.from_settings(Settings(security_key=key, security_iv=iv))

    assert cipher.key == key
    assert cipher.iv == iv


def test_cipher_from_settings_generates_missing_values(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="ezkit")

    cipher = Cipher.from_settings(Settings())

    assert len(cipher.key) == 64
    assert len(cipher.iv) == 32
    assert any(r.getMessage() == "security.cipher.generated_defaults" for r in caplog.records)
