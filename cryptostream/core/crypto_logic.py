# crypto_logic.py
# -*- coding: utf-8 -*-
"""Core cryptographic primitives: password checks, key derivation, salt/IV and container header."""

import os
import logging
from typing import BinaryIO

import argon2
from argon2.exceptions import HashingError # Import specific exception
from Crypto.Hash import SHA1
from Crypto.Protocol.KDF import PBKDF2

from .settings import EncryptSettings
from ..utils.constants import (
    KDF_ARGON2ID,
    ARGON2_TIME_COST,
    ARGON2_MEMORY_COST_KIB,
    ARGON2_PARALLELISM
)
from ..utils.exceptions import CryptoStreamError, InvalidPassword, TruncatedHeader

logger = logging.getLogger(__name__)

def check_password(password: str | bytes | None) -> bytes:
    """
    Validates a password and returns it as bytes.

    Text passwords are UTF-8 encoded, bytes are used as given.

    Raises:
        InvalidPassword: If the password is missing, empty or not text/bytes.
    """
    if isinstance(password, str):
        password = password.encode('utf-8')
    elif isinstance(password, (bytes, bytearray)):
        password = bytes(password)
    elif password is not None:
        raise InvalidPassword(f"Password must be str or bytes, got {type(password).__name__}.")

    if not password:
        msg = "Password must not be empty."
        logger.error(msg)
        raise InvalidPassword(msg)
    return password

def generate_salt(settings: EncryptSettings) -> bytes:
    """Generates a cryptographically secure random salt."""
    return os.urandom(settings.salt_bytes)

def generate_iv(settings: EncryptSettings) -> bytes:
    """Generates a random block-sized initialization vector."""
    return os.urandom(settings.block_bytes)

def derive_key(password: bytes, salt: bytes, settings: EncryptSettings) -> bytes:
    """
    Derives the AES key from the password and salt.

    PBKDF2-HMAC-SHA1 is the format's default KDF; Argon2id is used instead
    when the settings select it. Same password and salt always give the same key.

    Args:
        password: The password bytes (see check_password).
        salt: The salt bytes (must be settings.salt_bytes long).
        settings: Format parameters (key size, KDF, iteration count).

    Returns:
        The derived key, settings.key_bytes long.

    Raises:
        InvalidPassword: If the password is empty.
        CryptoStreamError: If the salt length is wrong or the KDF fails.
    """
    password = check_password(password)
    if len(salt) != settings.salt_bytes:
        msg = f"Invalid salt length provided for key derivation. Expected {settings.salt_bytes}, got {len(salt)}."
        logger.error(msg)
        raise CryptoStreamError(msg)

    logger.debug(f"Deriving {settings.key_bytes}-byte key using {settings.kdf}...")
    if settings.kdf == KDF_ARGON2ID:
        try:
            key = argon2.low_level.hash_secret_raw(
                secret=password,
                salt=salt,
                time_cost=ARGON2_TIME_COST,
                memory_cost=ARGON2_MEMORY_COST_KIB,
                parallelism=ARGON2_PARALLELISM,
                hash_len=settings.key_bytes,
                type=argon2.Type.ID
            )
        except HashingError as e:
            msg = f"Argon2 key derivation failed: {e}"
            logger.error(msg, exc_info=True)
            raise CryptoStreamError(msg) from e
    else:
        key = PBKDF2(password, salt, dkLen=settings.key_bytes,
                     count=settings.kdf_iterations, hmac_hash_module=SHA1)

    logger.debug(f"Key derived successfully ({len(key)} bytes).")
    return key

def write_header(stream: BinaryIO, salt: bytes, iv: bytes) -> None:
    """Writes the unencrypted salt and IV that open every container."""
    for name, field in (("salt", salt), ("IV", iv)):
        bytes_written = stream.write(field)
        if bytes_written is not None and bytes_written != len(field):
            raise OSError(f"Failed to write all {name} bytes to output.")
    logger.debug(f"Wrote {len(salt)} salt bytes and {len(iv)} IV bytes.")

def _read_exact(stream: BinaryIO, size: int) -> bytes:
    # Raw streams and pipes may return short reads before end of stream
    data = b''
    while len(data) < size:
        chunk = stream.read(size - len(data))
        if not chunk:
            break
        data += chunk
    return data

def read_header(stream: BinaryIO, settings: EncryptSettings) -> tuple[bytes, bytes]:
    """
    Reads the salt and IV from the start of a container.

    Returns:
        (salt, iv)

    Raises:
        TruncatedHeader: If the stream ends before either field is complete.
    """
    salt = _read_exact(stream, settings.salt_bytes)
    if len(salt) != settings.salt_bytes:
        msg = f"Input too short: could not read {settings.salt_bytes}-byte salt (got {len(salt)})."
        logger.error(msg)
        raise TruncatedHeader(msg)
    iv = _read_exact(stream, settings.block_bytes)
    if len(iv) != settings.block_bytes:
        msg = f"Input too short: could not read {settings.block_bytes}-byte IV after salt (got {len(iv)})."
        logger.error(msg)
        raise TruncatedHeader(msg)
    logger.debug(f"Read {len(salt)} salt bytes and {len(iv)} IV bytes.")
    return salt, iv
