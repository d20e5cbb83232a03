# settings.py
# -*- coding: utf-8 -*-
"""
Cipher and key-derivation parameters shared by the encrypting and decrypting
pipelines. A container can only be read back with the settings it was written
with, since the format stores no version or parameter field.
"""

import dataclasses
import logging

from ..utils.constants import (
    AES_BLOCK_BITS,
    AES_KEY_BITS_ALLOWED,
    DEFAULT_KEY_BITS,
    CIPHER_MODE,
    PADDING_MODE,
    DEFAULT_SALT_BITS,
    KDF_PBKDF2,
    KDF_ARGON2ID,
    PBKDF2_ITERATIONS,
    ARGON2_MIN_SALT_BYTES,
    DEFAULT_COMPRESSION_LEVEL,
)
from ..utils.exceptions import InvalidConfiguration

logger = logging.getLogger(__name__)


def _is_int(value) -> bool:
    # bool is an int subclass but never a meaningful size
    return isinstance(value, int) and not isinstance(value, bool)


@dataclasses.dataclass(frozen=True)
class EncryptSettings:
    """
    Immutable configuration value for one container format.

    Every field is validated when the value is built, including values built
    through `replace()`. Out-of-range values raise InvalidConfiguration.
    """
    block_size_bits: int = AES_BLOCK_BITS
    key_size_bits: int = DEFAULT_KEY_BITS
    mode: str = CIPHER_MODE
    padding: str = PADDING_MODE
    salt_size_bits: int = DEFAULT_SALT_BITS
    kdf: str = KDF_PBKDF2
    kdf_iterations: int = PBKDF2_ITERATIONS
    compression_level: int = DEFAULT_COMPRESSION_LEVEL

    def __post_init__(self) -> None:
        if not _is_int(self.block_size_bits) or self.block_size_bits != AES_BLOCK_BITS:
            self._reject("block_size_bits", f"must be {AES_BLOCK_BITS}")
        if not _is_int(self.key_size_bits) or self.key_size_bits not in AES_KEY_BITS_ALLOWED:
            self._reject("key_size_bits", f"must be one of {AES_KEY_BITS_ALLOWED}")
        if self.mode != CIPHER_MODE:
            self._reject("mode", f"only {CIPHER_MODE} is supported")
        if self.padding != PADDING_MODE:
            self._reject("padding", f"only {PADDING_MODE} is supported")
        if not _is_int(self.salt_size_bits) or self.salt_size_bits <= 0 or self.salt_size_bits % 8:
            self._reject("salt_size_bits", "must be a positive multiple of 8")
        if self.kdf not in (KDF_PBKDF2, KDF_ARGON2ID):
            self._reject("kdf", f"must be '{KDF_PBKDF2}' or '{KDF_ARGON2ID}'")
        if self.kdf == KDF_ARGON2ID and self.salt_bytes < ARGON2_MIN_SALT_BYTES:
            self._reject("salt_size_bits", f"argon2id needs at least {ARGON2_MIN_SALT_BYTES * 8} bits")
        if not _is_int(self.kdf_iterations) or self.kdf_iterations < 1:
            self._reject("kdf_iterations", "must be a positive integer")
        if not _is_int(self.compression_level) or self.compression_level not in range(-1, 10):
            self._reject("compression_level", "must be between -1 and 9")

    def _reject(self, field: str, reason: str) -> None:
        value = getattr(self, field)
        msg = f"Invalid {field} {value!r}: {reason}."
        logger.error(msg)
        raise InvalidConfiguration(msg)

    def replace(self, **changes) -> "EncryptSettings":
        """Returns a validated copy with the given fields changed."""
        return dataclasses.replace(self, **changes)

    @property
    def block_bytes(self) -> int:
        return self.block_size_bits // 8

    @property
    def key_bytes(self) -> int:
        return self.key_size_bits // 8

    @property
    def salt_bytes(self) -> int:
        return self.salt_size_bits // 8

    @property
    def header_bytes(self) -> int:
        """Length of the unencrypted salt + IV prefix of every container."""
        return self.salt_bytes + self.block_bytes


DEFAULT_SETTINGS = EncryptSettings()


def resolve_settings(settings: EncryptSettings | None) -> EncryptSettings:
    """Falls back to DEFAULT_SETTINGS when no settings value was given."""
    if settings is None:
        return DEFAULT_SETTINGS
    if not isinstance(settings, EncryptSettings):
        raise InvalidConfiguration(f"Expected EncryptSettings, got {type(settings).__name__}.")
    return settings
