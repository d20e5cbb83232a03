# pipeline.py
# -*- coding: utf-8 -*-
"""Shared lifecycle for the encrypting and decrypting pipelines."""

import os
import logging
from abc import ABC, abstractmethod
from typing import BinaryIO

from ..utils.exceptions import DecryptionFailed

logger = logging.getLogger(__name__)


class Pipeline(ABC):
    """
    Internal base class of Encryptor and Decryptor.

    Owns (or borrows) a byte stream plus the compression and cipher transforms
    chained onto it.

    A pipeline built from a path opens the file and closes it on close().
    A pipeline built from an open binary stream only flushes it; the caller
    keeps ownership. Instances are not thread-safe.

    Teardown always runs in the same order: compression transform, cipher
    transform, then the underlying stream. A DecryptionFailed raised purely
    by teardown is ignored when no data went through the pipeline, and
    propagated otherwise. Leaving a `with` block because of an exception
    aborts instead of closing, so the original exception is what propagates.
    """

    def __init__(self):
        self.bytes_processed = 0
        self._stream: BinaryIO | None = None
        self._owns_stream = False
        self._closed = False

    def _bind_stream(self, target, mode: str) -> None:
        if isinstance(target, (str, os.PathLike)):
            self._stream = open(target, mode)
            self._owns_stream = True
            logger.debug(f"Opened file: {os.fspath(target)} in mode '{mode}'.")
        elif target is None:
            raise ValueError("A path or binary stream is required.")
        else:
            self._stream = target
            self._owns_stream = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError(f"I/O operation on closed {type(self).__name__}.")

    @abstractmethod
    def _release_transforms(self) -> None:
        """Flushes/finalizes the compression and cipher transforms, in that order."""

    def _discard_transforms(self) -> None:
        """Drops the transforms without emitting or checking anything further."""

    def _release_stream(self) -> None:
        if self._stream is None:
            return
        if self._owns_stream:
            self._stream.close()
            logger.debug(f"Closed owned stream of {type(self).__name__}.")
        elif not getattr(self._stream, 'closed', False):
            self._stream.flush()

    def close(self) -> None:
        """Releases transforms and stream. Calling close() again is a no-op."""
        if self._closed:
            return
        self._closed = True
        try:
            self._release_transforms()
        except DecryptionFailed as e:
            if self.bytes_processed:
                raise
            # Nothing was ever read or written, so this cannot hide a real failure
            logger.debug(f"Ignoring teardown diagnostic of unused {type(self).__name__}: {e}")
        finally:
            self._release_stream()

    def abort(self) -> None:
        """
        Releases the stream without finalizing the transforms.

        Used when the pipeline is left because of an error: output written so
        far is not completed into a valid container, and no teardown error
        can replace the error already being raised.
        """
        if self._closed:
            return
        self._closed = True
        self._discard_transforms()
        try:
            self._release_stream()
        except OSError as e:
            logger.warning(f"Error releasing stream of aborted {type(self).__name__}: {e}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        if exc_type is None:
            self.close()
        else:
            self.abort()
        return False
