# decryptor.py
# -*- coding: utf-8 -*-
"""
Decrypting pipeline: input -> AES-CBC/PKCS#7 -> raw DEFLATE -> plaintext.

The salt and IV are consumed from the input when the Decryptor is built.
"""

import io
import os
import zlib
import logging
from typing import BinaryIO

from .crypto_logic import check_password, derive_key, read_header
from .pipeline import Pipeline
from .settings import EncryptSettings, resolve_settings
from .transforms import CbcDecryptTransform
from ..utils.constants import CHUNK_SIZE
from ..utils.exceptions import DecryptionFailed

logger = logging.getLogger(__name__)


class Decryptor(Pipeline):
    """
    Reads the plaintext back out of one container.

    Use read() for file-like access or decrypt() to drain everything at once.
    There is no integrity tag: corrupt data or a wrong password is usually
    reported as DecryptionFailed, but can in rare cases decode to garbage.
    """

    def __init__(self, source: str | os.PathLike | BinaryIO, password: str | bytes,
                 settings: EncryptSettings | None = None):
        super().__init__()
        settings = resolve_settings(settings)
        password_bytes = check_password(password)
        self.settings = settings

        self._bind_stream(source, 'rb')
        try:
            salt, iv = read_header(self._stream, settings)
            key = derive_key(password_bytes, salt, settings)
            self._cipher = CbcDecryptTransform(key, iv, settings.block_bytes)
            self._decompressor = zlib.decompressobj(-zlib.MAX_WBITS)
        except BaseException:
            self._closed = True
            self._release_stream()
            raise
        self._buffer = b''
        self._eof = False
        self._failed = False
        logger.debug("Decryptor ready: header consumed.")

    def _inflate(self, data: bytes) -> bytes:
        try:
            return self._decompressor.decompress(data)
        except zlib.error as e:
            msg = f"Decompression failed: incorrect password or corrupted data ({e})."
            raise DecryptionFailed(msg) from e

    def _fill(self) -> None:
        chunk = self._stream.read(CHUNK_SIZE)
        if chunk:
            self.bytes_processed += len(chunk)
            self._buffer += self._inflate(self._cipher.update(chunk))
            return

        # End of input: strip padding and make sure the deflate stream was complete
        self._buffer += self._inflate(self._cipher.finalize())
        self._buffer += self._decompressor.flush()
        if not self._decompressor.eof:
            msg = "Compressed data ended prematurely: truncated or corrupted container."
            raise DecryptionFailed(msg)
        if self._decompressor.unused_data:
            msg = f"{len(self._decompressor.unused_data)} unexpected bytes after end of compressed data."
            raise DecryptionFailed(msg)
        self._eof = True
        logger.debug(f"Decryption finished after {self.bytes_processed} ciphertext bytes.")

    def read(self, size: int = -1) -> bytes:
        """Returns up to `size` plaintext bytes (all remaining if negative); b'' at the end."""
        self._check_open()
        try:
            while not self._eof and (size < 0 or len(self._buffer) < size):
                self._fill()
        except DecryptionFailed as e:
            self._failed = True
            logger.error(f"Decryption failed after {self.bytes_processed} ciphertext bytes: {e}")
            raise
        if size < 0:
            data, self._buffer = self._buffer, b''
        else:
            data, self._buffer = self._buffer[:size], self._buffer[size:]
        return data

    def decrypt(self, sink: str | os.PathLike | BinaryIO | None = None) -> bytes | None:
        """
        Decrypts the rest of the container.

        Args:
            sink: None to get the plaintext back as bytes, a binary stream to
                write it into, or a path to write it to.

        Returns:
            The plaintext bytes when `sink` is None, otherwise None.

        Raises:
            DecryptionFailed: On cipher-layer or decompression-layer failure.
        """
        if sink is None:
            with io.BytesIO() as output_stream:
                self.decrypt(output_stream)
                return output_stream.getvalue()
        if isinstance(sink, (str, os.PathLike)):
            with open(sink, 'wb') as output_stream:
                self.decrypt(output_stream)
            return None

        while chunk := self.read(CHUNK_SIZE):
            sink.write(chunk)
        return None

    def _release_transforms(self) -> None:
        # Padding is only checked when the input is exhausted (see _fill)
        if not self._eof and not self._failed:
            logger.debug(f"Decryptor closed before end of input ({self.bytes_processed} ciphertext bytes read).")
        self._discard_transforms()

    def _discard_transforms(self) -> None:
        self._buffer = b''
        self._cipher = None
        self._decompressor = None
