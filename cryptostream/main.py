# main.py
#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Main entry point for the cryptostream CLI application."""

import argparse
import sys
import logging

from .cli.handlers import handle_encrypt, handle_decrypt, handle_append
from .utils.constants import (
    EXIT_SUCCESS, EXIT_GENERIC_ERROR, EXIT_INTERRUPT,
    AES_KEY_BITS_ALLOWED, DEFAULT_KEY_BITS, KDF_PBKDF2, KDF_ARGON2ID,
    PBKDF2_ITERATIONS, DEFAULT_TEXT_ENCODING
)

def _add_password_options(subparser):
    pw_group = subparser.add_mutually_exclusive_group(required=True)
    pw_group.add_argument('--password-interactive', action='store_true', help='Prompt for password interactively.')
    pw_group.add_argument('--password-file', type=str, metavar='FILE', help='File containing the password.')
    pw_group.add_argument('--password-stdin', action='store_true', help='Read password from stdin.')

def create_parser():
    """Creates and configures the argument parser."""
    parser = argparse.ArgumentParser(
        prog="cryptostream",
        description="CLI Tool for compressed AES-CBC file encryption and encrypted text logs.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Examples:
  cryptostream encrypt -i notes.txt -o notes.txt.enc --password-interactive
  echo 'mypassword' | cryptostream decrypt --password-stdin -i notes.txt.enc -o notes.txt
  cryptostream append --password-file pass.txt journal.enc "Another line"
  cryptostream append --password-file pass.txt --temp-dir /var/tmp journal.enc "Another line"
"""
    )
    parser.add_argument('-V', '--version', action='version', version='%(prog)s 0.1.0')

    # --- Logging Control Group ---
    log_level_group = parser.add_mutually_exclusive_group()
    log_level_group.add_argument(
        '-q', '--quiet',
        action='store_const',
        const=logging.ERROR,
        dest='log_level',
        help='Show only error messages.'
    )
    log_level_group.add_argument(
        '-v', '--verbose',
        action='store_const',
        const=logging.DEBUG,
        dest='log_level',
        help='Show detailed debug messages.'
    )
    parser.set_defaults(log_level=logging.INFO) # Default log level

    # --- Format Options (shared by every command) ---
    format_options = argparse.ArgumentParser(add_help=False)
    format_options.add_argument('--key-size', type=int, choices=AES_KEY_BITS_ALLOWED, default=DEFAULT_KEY_BITS,
                                help=f'AES key size in bits (default: {DEFAULT_KEY_BITS}).')
    format_options.add_argument('--kdf', choices=(KDF_PBKDF2, KDF_ARGON2ID), default=KDF_PBKDF2,
                                help=f'Key derivation function (default: {KDF_PBKDF2}).')
    format_options.add_argument('--iterations', type=int, default=PBKDF2_ITERATIONS, metavar='N',
                                help=f'PBKDF2 iteration count (default: {PBKDF2_ITERATIONS}).')

    # --- Subparsers ---
    subparsers = parser.add_subparsers(dest='command', help='Available commands (encrypt/decrypt/append)', required=True)

    # --- Encrypt Command ---
    parser_encrypt = subparsers.add_parser('encrypt', parents=[format_options], help='Encrypt a file or stdin.')
    parser_encrypt.add_argument('-i', '--input', type=str, default=None, metavar='FILE', help='Input file path (default: stdin).')
    parser_encrypt.add_argument('-o', '--output', type=str, default=None, metavar='FILE', help='Output file path (default: stdout).')
    _add_password_options(parser_encrypt)
    parser_encrypt.set_defaults(func=handle_encrypt)

    # --- Decrypt Command ---
    parser_decrypt = subparsers.add_parser('decrypt', parents=[format_options], help='Decrypt a file or stdin.')
    parser_decrypt.add_argument('-i', '--input', type=str, default=None, metavar='FILE', help='Input encrypted file path (default: stdin).')
    parser_decrypt.add_argument('-o', '--output', type=str, default=None, metavar='FILE', help='Output decrypted file path (default: stdout).')
    _add_password_options(parser_decrypt)
    parser_decrypt.set_defaults(func=handle_decrypt)

    # --- Append Command ---
    parser_append = subparsers.add_parser('append', parents=[format_options], help='Append a line of text to an encrypted file.')
    parser_append.add_argument('file', metavar='FILE', help='Encrypted file (created if missing).')
    parser_append.add_argument('text', metavar='TEXT', help='Text to append; a line terminator is added.')
    parser_append.add_argument('--temp-dir', type=str, default=None, metavar='DIR',
                               help='Stage plaintext in a temporary file under DIR instead of memory (must not be the file\'s directory).')
    parser_append.add_argument('--encoding', type=str, default=DEFAULT_TEXT_ENCODING,
                               help=f'Text encoding of the file contents (default: {DEFAULT_TEXT_ENCODING}).')
    _add_password_options(parser_append)
    parser_append.set_defaults(func=handle_append)

    return parser

def main():
    """Main execution function: parses arguments, sets up logging, and calls the appropriate handler."""
    parser = create_parser()
    exit_code = EXIT_SUCCESS # Default to success

    try:
        args = parser.parse_args()

        # --- Configure Logging ---
        log_level = args.log_level
        log_format = '%(asctime)s - %(levelname)s - %(message)s'
        # Use a more detailed format for debug level
        if log_level <= logging.DEBUG:
            log_format = '%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s'

        # Logs go to stderr so stdout stays free for decrypted/encrypted data
        logging.basicConfig(level=log_level, format=log_format, stream=sys.stderr, force=True)

        logging.debug(f"Log level set to: {logging.getLevelName(log_level)}")
        logging.debug(f"Command: {args.command}")

        # --- Dispatch to Handler ---
        exit_code = args.func(args)

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        exit_code = EXIT_INTERRUPT
    except SystemExit as e:
        # argparse help/version and password prompt cancellation exit through here
        exit_code = e.code or EXIT_SUCCESS
    except Exception as e:
        logging.critical(f"An unhandled exception reached main: {e}", exc_info=True)
        print(f"\nCritical Error: An unexpected error occurred. Use --verbose for more details or check logs.", file=sys.stderr)
        exit_code = EXIT_GENERIC_ERROR
    finally:
        logging.debug(f"Exiting with code: {exit_code}")
        sys.exit(exit_code)

if __name__ == "__main__":
    main()
