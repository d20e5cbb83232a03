# password_utils.py
# -*- coding: utf-8 -*-
"""Utilities for reading the password from its various sources."""

import getpass
import sys
import logging
import os

# Import constants and exceptions
from ..utils.constants import EXIT_INTERRUPT
from ..utils.exceptions import FileAccessError, InvalidPassword, CryptoStreamError

logger = logging.getLogger(__name__)

def get_interactive_password(confirm: bool = True) -> bytes:
    """
    Prompts the user interactively for a password (and confirmation).

    Args:
        confirm: Ask twice and require both entries to match (used for
            commands that write a new container).

    Returns:
        The password as bytes (utf-8 encoded).

    Raises:
        InvalidPassword: If passwords do not match or the entry is empty.
        CryptoStreamError: On other unexpected errors during input.
        SystemExit: If the user cancels with Ctrl+C (exits with EXIT_INTERRUPT).
    """
    try:
        password = getpass.getpass(prompt="Enter password: ")
        if confirm:
            password_confirm = getpass.getpass(prompt="Confirm password: ")
            if password != password_confirm:
                # Avoid logging the password itself, even on mismatch
                logger.error("Interactive password entry failed: passwords mismatch.")
                print("Error: Passwords do not match.", file=sys.stderr)
                raise InvalidPassword("Passwords do not match.")

        if not password:
            raise InvalidPassword("Empty password entered.")
        logger.info("Password obtained interactively.")
        return password.encode('utf-8')

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        logger.warning("Password entry cancelled by user (KeyboardInterrupt).")
        sys.exit(EXIT_INTERRUPT) # Exit directly on Ctrl+C during password input
    except EOFError:
        # getpass stdin closed unexpectedly (e.g., redirected from /dev/null)
        msg = "Error: Could not read password from standard input (EOF)."
        logger.error(msg)
        print(msg, file=sys.stderr)
        raise CryptoStreamError(msg) from None

def read_password_file(filepath: str) -> bytes:
    """
    Reads the password from the first line of the specified file.

    Returns:
        The password bytes (read as binary, stripped).

    Raises:
        FileAccessError: If the file cannot be found or read.
        InvalidPassword: If the file is empty.
    """
    logger.debug(f"Attempting to read password from file: {filepath}")
    if not os.path.exists(filepath):
        msg = f"Password file not found: {filepath}"
        logger.error(msg)
        raise FileAccessError(msg)
    try:
        with open(filepath, 'rb') as f:
            # Read the first line only and strip leading/trailing whitespace/newlines
            password_bytes = f.readline().strip()
    except OSError as e:
        msg = f"OS error reading password file {filepath}: {e}"
        logger.error(msg)
        raise FileAccessError(msg) from e

    if not password_bytes:
        msg = f"Password file is empty: {filepath}"
        logger.error(msg)
        raise InvalidPassword(msg)

    logger.info(f"Password successfully read from file: {filepath}")
    return password_bytes

def read_password_stdin() -> bytes:
    """
    Reads the password from the first line of standard input.
    Intended for piped input, not interactive use.

    Returns:
        The password bytes (read as binary, stripped).

    Raises:
        InvalidPassword: If stdin is a TTY or if no data is received.
        CryptoStreamError: If stdin cannot be read.
    """
    logger.debug("Attempting to read password from stdin.")
    # This mode expects piped input; an interactive terminal would just hang
    if sys.stdin.isatty():
        msg = "Cannot read password from TTY stdin using --password-stdin. Pipe input (e.g., echo 'pass' | ...) or use --password-interactive."
        logger.error(msg)
        raise InvalidPassword(msg)

    try:
        password_bytes = sys.stdin.buffer.readline().strip()
    except OSError as e:
        msg = f"Error reading password from stdin: {e}"
        logger.error(msg)
        raise CryptoStreamError(msg) from e

    if not password_bytes:
        msg = "No password received from stdin."
        logger.error(msg)
        raise InvalidPassword(msg)

    logger.info("Password successfully read from stdin.")
    return password_bytes
