# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Seekable scratch buffer for bucketfs sessions.

This module provides the in-memory byte container that lets a one-shot
object store stream be treated as a random-access file. Content lives in a
SpooledTemporaryFile, so very large objects spill to disk instead of
exhausting memory.
"""

import os
import tempfile
from .utils import logger

# Spool to disk after 32GB in RAM
DEFAULT_SPOOL_MAX_SIZE = 32 * 1024 * 1024 * 1024  # 32GB

class SeekableBuffer:
    """
    A named, file-like byte buffer with a close/reopen lifecycle.

    close() ends the current I/O phase but keeps the content, and open()
    starts a new phase at offset 0. This is how a write session switches
    from accumulating bytes to reading them back for upload. release()
    discards the content for good.

    Not safe for concurrent use.

    Attributes:
        name (str): Name of the file the buffer stands in for
    """

    def __init__(self, name: str, data: bytes = b"", max_size: int = DEFAULT_SPOOL_MAX_SIZE):
        self.name = name
        self._spooled_file = tempfile.SpooledTemporaryFile(max_size=max_size, mode='w+b')
        self._closed = False
        if data:
            self._spooled_file.write(data)
            self._spooled_file.seek(0)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def released(self) -> bool:
        return self._spooled_file is None

    def _check_open(self):
        if self._closed or self._spooled_file is None:
            raise ValueError(f"I/O operation on closed buffer {self.name!r}")

    def open(self) -> None:
        """
        Start a new I/O phase positioned at the beginning of the content.

        Raises:
            ValueError: If the buffer has been released
        """
        if self._spooled_file is None:
            raise ValueError(f"Cannot reopen released buffer {self.name!r}")
        self._spooled_file.seek(0)
        self._closed = False

    def close(self) -> None:
        """End the current I/O phase. The content is kept."""
        self._closed = True

    def release(self) -> None:
        """Close the buffer and discard its content."""
        self._closed = True
        if self._spooled_file is not None:
            spooled_file, self._spooled_file = self._spooled_file, None
            spooled_file.close()
            logger.debug(f"Released buffer for {self.name}")

    def read(self, size: int = -1) -> bytes:
        self._check_open()
        return self._spooled_file.read(size)

    def readinto(self, b) -> int:
        data = self.read(len(b))
        b[:len(data)] = data
        return len(data)

    def write(self, data) -> int:
        self._check_open()
        return self._spooled_file.write(data)

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        self._check_open()
        if whence == os.SEEK_SET and offset < 0:
            raise ValueError(f"Negative seek position {offset}")
        return self._spooled_file.seek(offset, whence)

    def tell(self) -> int:
        self._check_open()
        return self._spooled_file.tell()

    @property
    def size(self) -> int:
        """Size of the stored content in bytes, 0 once released."""
        if self._spooled_file is None:
            return 0
        original_pos = self._spooled_file.tell()
        self._spooled_file.seek(0, os.SEEK_END)
        size = self._spooled_file.tell()
        self._spooled_file.seek(original_pos)  # Restore position
        return size
