# append.py
# -*- coding: utf-8 -*-
"""
Appending text to an encrypted file.

The container format cannot be extended in place, so every append decrypts
the existing plaintext into a buffer, adds the new line, and re-encrypts the
whole buffer over the original file. Two buffer strategies exist: memory
(no plaintext ever touches the disk) and a temporary file in a separate
directory (bounded memory, transient plaintext file).
"""

import codecs
import io
import os
import shutil
import logging
import tempfile
from contextlib import contextmanager
from typing import BinaryIO

from .crypto_logic import check_password
from .decryptor import Decryptor
from .encryptor import Encryptor
from .settings import EncryptSettings, resolve_settings
from ..utils.constants import DEFAULT_TEXT_ENCODING
from ..utils.exceptions import InvalidConfiguration

logger = logging.getLogger(__name__)


def _resolved_dir(path: str | os.PathLike) -> str:
    return os.path.normcase(os.path.realpath(path))


class MemoryBufferStrategy:
    """
    Holds the plaintext in an in-memory buffer.

    The expected size (1.5 x encrypted size + appended size) is only logged:
    BytesIO cannot reserve capacity up front, and the estimate has no effect
    on the result.
    """

    @contextmanager
    def open(self, path: str | os.PathLike, append_size: int):
        if os.path.exists(path):
            # Compressed size says little about plaintext size; this is only a hint
            estimate = os.path.getsize(path) * 3 // 2 + append_size
        else:
            estimate = append_size
        logger.debug(f"Buffering plaintext in memory (estimated {estimate} bytes).")
        with io.BytesIO() as buffer:
            yield buffer


class TemporaryFileBufferStrategy:
    """
    Holds the plaintext in a temporary file inside `temp_dir`.

    `temp_dir` must not be the target file's own directory.

    Raises:
        InvalidConfiguration: If `temp_dir` resolves to the target's directory.
    """

    def __init__(self, temp_dir: str | os.PathLike, target: str | os.PathLike):
        target_dir = os.path.dirname(os.path.abspath(target))
        if _resolved_dir(temp_dir) == _resolved_dir(target_dir):
            msg = f"Temporary directory must differ from the directory of '{os.fspath(target)}'."
            logger.error(msg)
            raise InvalidConfiguration(msg)
        self.temp_dir = os.fspath(temp_dir)

    @contextmanager
    def open(self, path: str | os.PathLike, append_size: int):
        prefix = os.path.basename(os.fspath(path)) + '.'
        fd, temp_path = tempfile.mkstemp(prefix=prefix, suffix='.tmp', dir=self.temp_dir)
        logger.debug(f"Buffering plaintext in temporary file: {temp_path}")
        try:
            with os.fdopen(fd, 'w+b') as buffer:
                yield buffer
        finally:
            os.remove(temp_path)
            logger.debug(f"Removed temporary file: {temp_path}")


def _replace_encrypted(plaintext: BinaryIO, path: str | os.PathLike, password: str | bytes,
                       settings: EncryptSettings) -> None:
    """Encrypts `plaintext` into a staging file next to `path`, then moves it into place."""
    path = os.fspath(path)
    directory = os.path.dirname(os.path.abspath(path))
    fd, staging_path = tempfile.mkstemp(prefix='.' + os.path.basename(path) + '.', suffix='.tmp', dir=directory)
    try:
        with os.fdopen(fd, 'wb') as output_stream:
            with Encryptor(output_stream, password, settings) as encryptor:
                encryptor.encrypt(plaintext)
            os.fsync(output_stream.fileno())
        if os.path.exists(path):
            shutil.copymode(path, staging_path)
        os.replace(staging_path, path)
    except BaseException:
        if os.path.exists(staging_path):
            os.remove(staging_path)
        raise
    logger.debug(f"Replaced {path} with {encryptor.bytes_processed} re-encrypted plaintext bytes.")


def _append(path, text: str, password, encoding: str, strategy, settings: EncryptSettings | None) -> None:
    settings = resolve_settings(settings)
    check_password(password)
    try:
        codecs.lookup(encoding)
    except LookupError as e:
        raise InvalidConfiguration(f"Unknown text encoding: {encoding!r}") from e

    try:
        data = (text + os.linesep).encode(encoding)
    except UnicodeEncodeError as e:
        raise InvalidConfiguration(f"Text cannot be encoded as {encoding!r}: {e}") from e
    existing = os.path.exists(path)
    logger.info(f"Appending {len(data)} bytes to {'existing' if existing else 'new'} file {os.fspath(path)}.")

    with strategy.open(path, len(data)) as buffer:
        if existing:
            with Decryptor(path, password, settings) as decryptor:
                decryptor.decrypt(buffer)
        buffer.write(data)
        buffer.seek(0)
        _replace_encrypted(buffer, path, password, settings)
    logger.info("Append finished.")


def append_text(
    path: str | os.PathLike,
    text: str,
    password: str | bytes,
    encoding: str = DEFAULT_TEXT_ENCODING,
    settings: EncryptSettings | None = None
) -> None:
    """
    Appends `text` and a line terminator to an encrypted file, in memory.

    A missing file is created. The whole plaintext is held in memory while the
    file is rewritten.

    Raises:
        InvalidPassword: If the password is empty.
        InvalidConfiguration: If `encoding` is unknown or cannot encode `text`.
        TruncatedHeader, DecryptionFailed: If the existing file cannot be decrypted.
    """
    _append(path, text, password, encoding, MemoryBufferStrategy(), settings)


def append_text_via_temporary_file(
    path: str | os.PathLike,
    temp_dir: str | os.PathLike,
    text: str,
    password: str | bytes,
    encoding: str = DEFAULT_TEXT_ENCODING,
    settings: EncryptSettings | None = None
) -> None:
    """
    Appends `text` and a line terminator to an encrypted file, staging the
    plaintext in a temporary file under `temp_dir`.

    The temporary file is deleted when the append finishes or fails.

    Raises:
        InvalidConfiguration: If `temp_dir` is the file's own directory
            (checked before any I/O), or `encoding` is unknown or cannot
            encode `text`.
        InvalidPassword: If the password is empty.
        TruncatedHeader, DecryptionFailed: If the existing file cannot be decrypted.
    """
    strategy = TemporaryFileBufferStrategy(temp_dir, path)
    _append(path, text, password, encoding, strategy, settings)
