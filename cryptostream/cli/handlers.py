# cryptostream/cli/handlers.py
# -*- coding: utf-8 -*-
"""Command handlers for the cryptostream CLI."""

import logging
import sys

from cryptostream.cli.password_utils import (
    get_interactive_password,
    read_password_file,
    read_password_stdin
)
from cryptostream.core.append import append_text, append_text_via_temporary_file
from cryptostream.core.file_handler import encrypt, decrypt
from cryptostream.core.settings import EncryptSettings
from cryptostream.utils.exceptions import (
    CryptoStreamError, DecryptionFailed, FileAccessError, InvalidConfiguration,
    InvalidPassword, TruncatedHeader
)
from cryptostream.utils.constants import (
    EXIT_SUCCESS, EXIT_GENERIC_ERROR, EXIT_FILE_ERROR, EXIT_DECRYPT_ERROR, EXIT_ARG_ERROR
)

logger = logging.getLogger(__name__)

def _get_password(args, confirm: bool) -> bytes:
    if args.password_interactive: return get_interactive_password(confirm=confirm)
    if args.password_file: return read_password_file(args.password_file)
    if args.password_stdin: return read_password_stdin()
    raise InvalidPassword("Internal logic error: No password source selected.")

def _build_settings(args) -> EncryptSettings:
    return EncryptSettings(key_size_bits=args.key_size, kdf=args.kdf, kdf_iterations=args.iterations)

def _run(command: str, operation) -> int:
    """Runs `operation` and maps exceptions to exit codes."""
    try:
        operation()
        logger.info(f"{command.capitalize()} process finished successfully.")
        return EXIT_SUCCESS

    # --- Exception Handling and Exit Code Mapping (most specific first) ---
    except (DecryptionFailed, TruncatedHeader) as e: # Bad password, corrupt or foreign input
        logger.error(f"Decryption error during {command}: {e}")
        return EXIT_DECRYPT_ERROR # Exit Code 3
    except FileAccessError as e: # Not found, permissions, write errors
        logger.error(f"File access error during {command}: {e}")
        return EXIT_FILE_ERROR # Exit Code 2
    except (InvalidConfiguration, InvalidPassword) as e: # Bad settings, temp dir or password
        logger.error(f"Invalid argument during {command}: {e}")
        return EXIT_ARG_ERROR # Exit Code 4
    except CryptoStreamError as e: # Other application errors (like key derivation)
        logger.error(f"Application error during {command}: {e}")
        return EXIT_GENERIC_ERROR # Exit Code 1
    except OSError as e: # Read/write errors after the files were opened
        logger.error(f"I/O error during {command}: {e}")
        return EXIT_FILE_ERROR # Exit Code 2
    except Exception as e: # Catch any other unexpected errors
        logger.critical(f"Unexpected error during {command} handling: {e}", exc_info=True)
        print(f"Error: An unexpected error occurred during {command}. Check logs.", file=sys.stderr)
        return EXIT_GENERIC_ERROR # Exit Code 1

def handle_encrypt(args) -> int:
    """Handles the 'encrypt' command."""
    logger.info("Processing 'encrypt' command...")
    def operation():
        settings = _build_settings(args)
        password = _get_password(args, confirm=True)
        encrypt(args.input, args.output, password, settings)
    return _run("encryption", operation)

def handle_decrypt(args) -> int:
    """Handles the 'decrypt' command."""
    logger.info("Processing 'decrypt' command...")
    def operation():
        settings = _build_settings(args)
        password = _get_password(args, confirm=False)
        decrypt(args.input, args.output, password, settings)
    return _run("decryption", operation)

def handle_append(args) -> int:
    """Handles the 'append' command, via memory or a temporary directory."""
    logger.info("Processing 'append' command...")
    def operation():
        settings = _build_settings(args)
        password = _get_password(args, confirm=False)
        if args.temp_dir:
            append_text_via_temporary_file(args.file, args.temp_dir, args.text, password, args.encoding, settings)
        else:
            append_text(args.file, args.text, password, args.encoding, settings)
    return _run("append", operation)
