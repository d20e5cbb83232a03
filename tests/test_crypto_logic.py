# tests/test_crypto_logic.py
# -*- coding: utf-8 -*-
"""Tests for password checks, key derivation and the salt + IV header."""

import io

import pytest

from cryptostream.core.crypto_logic import (
    check_password, derive_key, generate_iv, generate_salt, read_header, write_header
)
from cryptostream.core.settings import DEFAULT_SETTINGS, EncryptSettings
from cryptostream.utils.exceptions import InvalidPassword, TruncatedHeader


class TrickleStream(io.RawIOBase):
    """Returns at most one byte per read, like a slow pipe."""

    def __init__(self, data: bytes):
        self._data = io.BytesIO(data)

    def readable(self):
        return True

    def readinto(self, b):
        chunk = self._data.read(1)
        b[:len(chunk)] = chunk
        return len(chunk)


@pytest.mark.parametrize("password", [None, "", b""])
def test_empty_password_rejected(password):
    with pytest.raises(InvalidPassword):
        check_password(password)

def test_password_types():
    assert check_password("pässword") == "pässword".encode("utf-8")
    assert check_password(b"raw") == b"raw"
    with pytest.raises(InvalidPassword):
        check_password(12345)

def test_derive_key_is_deterministic():
    salt = generate_salt(DEFAULT_SETTINGS)
    assert derive_key("secret", salt, DEFAULT_SETTINGS) == derive_key(b"secret", salt, DEFAULT_SETTINGS)
    assert len(derive_key("secret", salt, DEFAULT_SETTINGS)) == DEFAULT_SETTINGS.key_bytes

def test_derive_key_depends_on_salt_and_password():
    salt_a = generate_salt(DEFAULT_SETTINGS)
    salt_b = generate_salt(DEFAULT_SETTINGS)
    assert salt_a != salt_b
    assert derive_key("secret", salt_a, DEFAULT_SETTINGS) != derive_key("secret", salt_b, DEFAULT_SETTINGS)
    assert derive_key("secret", salt_a, DEFAULT_SETTINGS) != derive_key("Secret", salt_a, DEFAULT_SETTINGS)

def test_derive_key_known_pbkdf2_vector():
    # RFC 6070 test vector 2 (PBKDF2-HMAC-SHA1, 2 iterations), first 16 bytes
    settings = EncryptSettings(salt_size_bits=32, kdf_iterations=2)
    key = derive_key("password", b"salt", settings)
    assert key == bytes.fromhex("ea6c014dc72d6f8ccd1ed92ace1d41f0")

def test_derive_key_rejects_empty_password():
    with pytest.raises(InvalidPassword):
        derive_key("", generate_salt(DEFAULT_SETTINGS), DEFAULT_SETTINGS)

def test_derive_key_argon2id():
    settings = EncryptSettings(kdf="argon2id", key_size_bits=256)
    salt = generate_salt(settings)
    key = derive_key("secret", salt, settings)
    assert len(key) == 32
    assert key == derive_key("secret", salt, settings)
    assert key != derive_key("secret", salt, settings.replace(kdf="pbkdf2"))

def test_header_round_trip():
    salt = generate_salt(DEFAULT_SETTINGS)
    iv = generate_iv(DEFAULT_SETTINGS)
    stream = io.BytesIO()
    write_header(stream, salt, iv)
    assert stream.getvalue() == salt + iv
    stream.write(b"ciphertext")
    stream.seek(0)
    assert read_header(stream, DEFAULT_SETTINGS) == (salt, iv)
    assert stream.read() == b"ciphertext"

def test_read_header_handles_short_reads():
    header = bytes(range(32))
    salt, iv = read_header(TrickleStream(header), DEFAULT_SETTINGS)
    assert salt + iv == header

@pytest.mark.parametrize("length,field", [(0, "salt"), (15, "salt"), (16, "IV"), (31, "IV")])
def test_read_header_truncated(length: int, field: str):
    with pytest.raises(TruncatedHeader, match=field):
        read_header(io.BytesIO(b"\x00" * length), DEFAULT_SETTINGS)
