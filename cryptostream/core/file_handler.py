# cryptostream/core/file_handler.py
# -*- coding: utf-8 -*-
"""
Whole-container encrypt/decrypt entry points over file paths, standard
streams or already-open binary streams. Uses context managers for streams.
"""

import sys
import logging
import os
from typing import BinaryIO
from contextlib import contextmanager

from .crypto_logic import check_password
from .decryptor import Decryptor
from .encryptor import Encryptor
from .settings import EncryptSettings, resolve_settings
from ..utils.exceptions import FileAccessError

# Module-specific logger is preferred over root logger
logger = logging.getLogger(__name__)

# --- Context Manager for Stream Handling ---
@contextmanager
def stream_handler(target: str | os.PathLike | BinaryIO | None, mode: str):
    """
    Context manager to safely handle file paths, standard streams (stdin/stdout)
    or binary streams the caller already opened.

    Only files opened here are closed here. Errors while opening a file are
    raised as FileAccessError; errors from the caller's own streams propagate
    unchanged.
    """
    if target is not None and not isinstance(target, (str, os.PathLike)):
        logger.debug("Using caller-supplied stream.")
        yield target
        return

    is_std_stream = target is None
    log_stream_type = ('stdin' if 'r' in mode else 'stdout') if is_std_stream else os.fspath(target)
    logger.debug(f"Attempting to access stream: {log_stream_type} in mode '{mode}'.")
    try:
        if is_std_stream:
            stream = sys.stdin.buffer if 'r' in mode else sys.stdout.buffer
        else:
            # Check existence for reading modes first to provide clearer error
            if 'r' in mode and not os.path.exists(target):
                raise FileNotFoundError(f"Input file not found: {log_stream_type}")
            stream = open(target, mode)
    except OSError as e:
        msg = f"File access error for '{log_stream_type}': {e}"
        logger.error(msg)
        raise FileAccessError(msg) from e

    if is_std_stream:
        yield stream # Do not close the standard streams
        return
    with stream:
        logger.debug(f"Opened file: {log_stream_type} successfully.")
        yield stream
    logger.debug(f"Closed file: {log_stream_type}")


# --- Entry Points ---

def encrypt(
    source: str | os.PathLike | BinaryIO | None,
    destination: str | os.PathLike | BinaryIO | None,
    password: str | bytes,
    settings: EncryptSettings | None = None
) -> None:
    """
    Encrypts `source` into a new container at `destination`.

    Args:
        source: Input path, binary stream, or None for stdin.
        destination: Output path, binary stream, or None for stdout.
        password: Non-empty password (str or bytes).
        settings: Format parameters; DEFAULT_SETTINGS if omitted.

    Raises:
        InvalidPassword: Before any file is opened, if the password is empty.
        FileAccessError: If an input/output file cannot be opened.
        OSError: If reading or writing fails afterwards.
    """
    settings = resolve_settings(settings)
    check_password(password)
    logger.info("Starting encryption...")
    with stream_handler(source, 'rb') as input_stream, \
         stream_handler(destination, 'wb') as output_stream:
        with Encryptor(output_stream, password, settings) as encryptor:
            encryptor.encrypt(input_stream)
        if encryptor.bytes_processed == 0:
            logger.warning("Input data was empty.")
    logger.info(f"Finished encrypting {encryptor.bytes_processed} plaintext bytes.")


def decrypt(
    source: str | os.PathLike | BinaryIO | None,
    destination: str | os.PathLike | BinaryIO | None,
    password: str | bytes,
    settings: EncryptSettings | None = None
) -> None:
    """
    Decrypts the container at `source` into `destination`.

    Args:
        source: Container path, binary stream, or None for stdin.
        destination: Output path, binary stream, or None for stdout.
        password: The password the container was written with.
        settings: The settings the container was written with.

    Raises:
        InvalidPassword: Before any file is opened, if the password is empty.
        FileAccessError: If an input/output file cannot be opened.
        TruncatedHeader: If the input is shorter than the salt + IV header.
        DecryptionFailed: On cipher or decompression failure. Output written so
            far is not guaranteed to be meaningful.
    """
    settings = resolve_settings(settings)
    check_password(password)
    logger.info("Starting decryption...")
    with stream_handler(source, 'rb') as input_stream:
        # Read the header before creating the output so a bad input leaves no file behind
        with Decryptor(input_stream, password, settings) as decryptor, \
             stream_handler(destination, 'wb') as output_stream:
            decryptor.decrypt(output_stream)
    logger.info(f"Finished decrypting {decryptor.bytes_processed} ciphertext bytes.")
