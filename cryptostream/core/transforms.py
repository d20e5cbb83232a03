# transforms.py
# -*- coding: utf-8 -*-
"""
Incremental AES-CBC transforms with PKCS#7 padding.

pycryptodome's CBC objects only accept whole blocks, so these wrappers buffer
the partial tail between calls and pad/unpad when the stream is finalized.
"""

from Crypto.Cipher import AES
from Crypto.Util.Padding import pad, unpad

from ..utils.exceptions import DecryptionFailed


class CbcEncryptTransform:
    """Encrypts a byte stream in CBC mode, padding at finalize()."""

    def __init__(self, key: bytes, iv: bytes, block_bytes: int):
        self._cipher = AES.new(key, AES.MODE_CBC, iv=iv)
        self._block_bytes = block_bytes
        self._pending = b''
        self.finalized = False

    def update(self, data: bytes) -> bytes:
        self._pending += data
        usable = len(self._pending) - len(self._pending) % self._block_bytes
        if not usable:
            return b''
        blocks, self._pending = self._pending[:usable], self._pending[usable:]
        return self._cipher.encrypt(blocks)

    def finalize(self) -> bytes:
        if self.finalized:
            return b''
        self.finalized = True
        # A block-aligned tail still gets a full block of padding
        return self._cipher.encrypt(pad(self._pending, self._block_bytes, style='pkcs7'))


class CbcDecryptTransform:
    """Decrypts a CBC byte stream, stripping PKCS#7 padding at finalize()."""

    def __init__(self, key: bytes, iv: bytes, block_bytes: int):
        self._cipher = AES.new(key, AES.MODE_CBC, iv=iv)
        self._block_bytes = block_bytes
        self._pending = b''
        self.finalized = False

    def update(self, data: bytes) -> bytes:
        self._pending += data
        usable = len(self._pending) - len(self._pending) % self._block_bytes
        # The last complete block may be the padded one; keep it until finalize()
        if usable == len(self._pending):
            usable -= self._block_bytes
        if usable <= 0:
            return b''
        blocks, self._pending = self._pending[:usable], self._pending[usable:]
        return self._cipher.decrypt(blocks)

    def finalize(self) -> bytes:
        """
        Decrypts the held-back block and removes its padding.

        Raises:
            DecryptionFailed: If the ciphertext was empty or not block-aligned,
                or the padding is invalid (corrupt data or wrong key).
        """
        if self.finalized:
            return b''
        self.finalized = True
        if len(self._pending) != self._block_bytes:
            msg = (f"Ciphertext length is not a positive multiple of the {self._block_bytes}-byte block size "
                   f"({len(self._pending)} trailing bytes).")
            raise DecryptionFailed(msg)
        try:
            return unpad(self._cipher.decrypt(self._pending), self._block_bytes, style='pkcs7')
        except ValueError as e:
            msg = "Padding check failed: incorrect password or corrupted data."
            raise DecryptionFailed(msg) from e
