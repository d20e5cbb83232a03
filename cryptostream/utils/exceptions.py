# exceptions.py
# -*- coding: utf-8 -*-
"""Custom exception classes for the cryptostream package."""

class CryptoStreamError(Exception):
    """Base class for application-specific errors."""
    pass

class InvalidConfiguration(CryptoStreamError):
    """A settings value is out of range, or an append temp directory is unusable."""
    pass

class InvalidPassword(CryptoStreamError):
    """The password is missing or empty."""
    pass

class TruncatedHeader(CryptoStreamError):
    """The input ended before the salt and IV could be read."""
    pass

class DecryptionFailed(CryptoStreamError):
    """Cipher or decompression failure while reading a container.

    Raised for bad padding, misaligned or corrupt ciphertext and, usually,
    a wrong password. The format carries no integrity tag, so a wrong password
    is not guaranteed to be detected.
    """
    pass

class FileAccessError(CryptoStreamError, OSError):
    """Error related to file access (not found, permissions, I/O)."""
    pass
