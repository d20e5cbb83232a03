# constants.py
# -*- coding: utf-8 -*-
"""Defines constants used throughout the cryptostream package."""

# --- AES-CBC Parameters ---
AES_BLOCK_BITS: int = 128          # AES always works on 128-bit blocks
AES_KEY_BITS_ALLOWED: tuple[int, ...] = (128, 192, 256)
DEFAULT_KEY_BITS: int = 128        # Key size of the original container format
CIPHER_MODE: str = "CBC"           # Only chaining mode the format knows about
PADDING_MODE: str = "PKCS7"        # Padding applied when the cipher is finalized

# --- Key Derivation Parameters ---
DEFAULT_SALT_BITS: int = 128       # Salt stored unencrypted at the head of every container
KDF_PBKDF2: str = "pbkdf2"
KDF_ARGON2ID: str = "argon2id"
PBKDF2_ITERATIONS: int = 1000      # Iteration count producers and consumers must agree on

# Argon2 Parameters (only used when a settings value selects the argon2id KDF)
ARGON2_TIME_COST: int = 3           # Number of iterations (increases computation time)
ARGON2_MEMORY_COST_KIB: int = 65536 # Memory cost in KiB (64 MiB)
ARGON2_PARALLELISM: int = 4         # Degree of parallelism
ARGON2_MIN_SALT_BYTES: int = 8      # argon2 refuses shorter salts

# --- Compression ---
DEFAULT_COMPRESSION_LEVEL: int = -1 # zlib default (level 6)

# --- File I/O ---
CHUNK_SIZE: int = 4096              # Read loop buffer size for both pipelines
DEFAULT_TEXT_ENCODING: str = "utf-8" # Appended text encoding, no byte-order mark

# --- Exit Codes ---
EXIT_SUCCESS: int = 0        # Operation completed successfully
EXIT_GENERIC_ERROR: int = 1  # Generic or unexpected runtime error
EXIT_FILE_ERROR: int = 2     # File access/IO error (e.g., not found, permission denied)
EXIT_DECRYPT_ERROR: int = 3  # Container could not be decrypted (bad password, corrupt or truncated data)
EXIT_ARG_ERROR: int = 4      # Invalid arguments, password or configuration
EXIT_INTERRUPT: int = 130    # Process interrupted by user (Ctrl+C -> SIGINT)
