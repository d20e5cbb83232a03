# encryptor.py
# -*- coding: utf-8 -*-
"""
Encrypting pipeline: plaintext -> raw DEFLATE -> AES-CBC/PKCS#7 -> output,
behind an unencrypted salt + IV header.

Compression runs before encryption. This ordering is part of the container
format; it leaks the compression ratio through the ciphertext length, which
is an accepted property of the format.
"""

import io
import os
import zlib
import logging
from typing import BinaryIO

from .crypto_logic import check_password, derive_key, generate_salt, generate_iv, write_header
from .pipeline import Pipeline
from .settings import EncryptSettings, resolve_settings
from .transforms import CbcEncryptTransform
from ..utils.constants import CHUNK_SIZE

logger = logging.getLogger(__name__)


class Encryptor(Pipeline):
    """
    Writes one encrypted container to a path or binary stream.

    The header is written as soon as the instance is built. Plaintext is
    pushed with write()/encrypt*(); close() (or leaving the `with` block)
    flushes the compressor, pads and finalizes the cipher, then releases the
    output.

    Example:
        with Encryptor("notes.enc", password) as encryptor:
            encryptor.encrypt_bytes(b"hello")
    """

    def __init__(self, output: str | os.PathLike | BinaryIO, password: str | bytes,
                 settings: EncryptSettings | None = None):
        super().__init__()
        settings = resolve_settings(settings)
        password_bytes = check_password(password) # Fail before touching the output
        self.settings = settings

        self._bind_stream(output, 'wb')
        try:
            salt = generate_salt(settings)
            key = derive_key(password_bytes, salt, settings)
            iv = generate_iv(settings)
            self._cipher = CbcEncryptTransform(key, iv, settings.block_bytes)
            self._compressor = zlib.compressobj(settings.compression_level, zlib.DEFLATED, -zlib.MAX_WBITS)
            write_header(self._stream, salt, iv)
        except BaseException:
            self._closed = True
            self._release_stream()
            raise
        logger.debug("Encryptor ready: header written.")

    def write(self, data: bytes) -> int:
        """Compresses and encrypts `data`, writing whatever ciphertext is ready."""
        self._check_open()
        if not data:
            return 0
        encrypted = self._cipher.update(self._compressor.compress(data))
        if encrypted:
            self._stream.write(encrypted)
        self.bytes_processed += len(data)
        return len(data)

    def encrypt(self, input_stream: BinaryIO) -> None:
        """Encrypts everything readable from `input_stream`, in CHUNK_SIZE reads."""
        self._check_open()
        while chunk := input_stream.read(CHUNK_SIZE):
            self.write(chunk)
        logger.debug(f"Encrypted {self.bytes_processed} plaintext bytes so far.")

    def encrypt_bytes(self, data: bytes) -> None:
        with io.BytesIO(data) as input_stream:
            self.encrypt(input_stream)

    def encrypt_file(self, input_path: str | os.PathLike) -> None:
        with open(input_path, 'rb') as input_stream:
            self.encrypt(input_stream)

    def _release_transforms(self) -> None:
        tail = self._cipher.update(self._compressor.flush())
        tail += self._cipher.finalize()
        self._stream.write(tail)
        self._stream.flush()
        logger.debug(f"Encryptor finalized after {self.bytes_processed} plaintext bytes.")

    def _discard_transforms(self) -> None:
        # Without the final padded block the partial output cannot decrypt
        logger.warning(f"Encryptor aborted after {self.bytes_processed} plaintext bytes; output left unfinished.")
        self._cipher = None
        self._compressor = None
