# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Read and write sessions for bucketfs.

Object stores only offer one-shot streams: an object is uploaded in one go
and downloaded in one go. This module gives both directions the behavior of
a seekable local file by staging the content in a SeekableBuffer.

- WriteFile buffers every write locally and hands the whole content to the
  store sink exactly once, when the session is closed.
- ReadFile downloads the whole object when it is opened and serves every
  read and seek from the local copy afterwards.
"""

import errno
import os
import shutil
import time
from abc import ABC, abstractmethod
from typing import Optional

from bucketfs.client.exceptions import ObjectNotFoundError, StorageError, UnsupportedOperationError
from .buffer import SeekableBuffer
from .info import FileInfo
from .utils import logger, time_function, trace_op

# Chunk size used when streaming between the buffer and the store
COPY_CHUNK_SIZE = 4 * 1024 * 1024  # 4MB


class _SessionFile(ABC):
    """Behavior shared by read and write sessions."""

    name = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def readdir(self, count: int = -1):
        raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), self.name)

    def readdirnames(self, n: int = -1):
        raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), self.name)

    @abstractmethod
    def close(self) -> None:
        pass


class WriteFile(_SessionFile):
    """
    A write session for one object.

    Writes go to a local buffer and never touch the network. close() copies
    the buffered content to the store sink and closes the sink. The sink is
    closed on every close path, even when the flush fails, so the network
    handle is never leaked.

    close() is idempotent: only the first call flushes. A failed flush is not
    retried by a second close because the sink has already been closed.

    Attributes:
        name (str): Object name being written
        sink_error (Exception): Error raised by the sink's close(), if any.
            It is logged rather than raised so it cannot mask a successful copy.
    """

    def __init__(self, name: str, buffer: SeekableBuffer, sink):
        self.name = name
        self._buffer = buffer
        self._sink = sink
        self._closed = False
        self.sink_error: Optional[Exception] = None

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, data) -> int:
        """
        Write data to the local buffer at the current position.

        Raises:
            ValueError: If the session has been closed
        """
        trace_op("write", self.name, size=len(data))
        return self._buffer.write(data)

    def write_string(self, s: str) -> int:
        return self.write(s.encode('utf-8'))

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        return self._buffer.seek(offset, whence)

    def tell(self) -> int:
        return self._buffer.tell()

    def read(self, size: int = -1) -> bytes:
        raise UnsupportedOperationError(f"{self.name} is open for writing only", operation="read")

    def stat(self) -> FileInfo:
        """Metadata for the content buffered so far."""
        return FileInfo(name=self.name, size=self._buffer.size)

    def close(self) -> None:
        """
        Flush the buffered content to the store.

        1. Switch the buffer from its write phase to a read phase.
        2. Copy the whole buffer, in order, to the sink.
        3. Close the sink whatever happened in 1 and 2.

        Raises:
            Exception: Any buffer or copy failure. Sink-close failures are
                logged and kept on sink_error instead.
        """
        if self._closed:
            logger.debug(f"close: {self.name} already closed, nothing to flush")
            return
        self._closed = True

        trace_op("close", self.name)
        start_time = time.time()
        try:
            self._buffer.close()
            self._buffer.open()
            copied = self._copy_to_sink()
            logger.info(f"Flushed {copied} bytes to {self.name}")
        except Exception as e:
            logger.error(f"Error flushing buffer for {self.name}: {e}", exc_info=True)
            raise
        finally:
            self._close_sink()
            self._buffer.release()
            time_function("WriteFile.close", start_time)

    def _copy_to_sink(self) -> int:
        copied = 0
        while True:
            chunk = self._buffer.read(COPY_CHUNK_SIZE)
            if not chunk:
                break
            self._sink.write(chunk)
            copied += len(chunk)
        return copied

    def _close_sink(self) -> None:
        try:
            self._sink.close()
        except Exception as e:
            self.sink_error = e
            logger.error(f"Error closing store writer for {self.name}: {e}", exc_info=True)


class ReadFile(_SessionFile):
    """
    A read session over a materialized copy of one object.

    Opening the session is the only network traffic: the whole object is
    downloaded into a local buffer, and later reads and seeks are served from
    it. Concurrent changes to the remote object are not visible to an open
    session.

    Attributes:
        name (str): Object name being read
    """

    def __init__(self, info: FileInfo, buffer: SeekableBuffer):
        self.name = info.name
        self._info = info
        self._buffer = buffer

    @classmethod
    def open(cls, store, path: str, timeout: Optional[float] = None) -> "ReadFile":
        """
        Download an object into a new read session.

        Args:
            store (ObjectStore): Store to read from
            path (str): Object name
            timeout (float, optional): Deadline for each store call in seconds

        Returns:
            ReadFile: The open session

        Raises:
            ObjectNotFoundError: If no object exists at path when the reader is opened
            StorageError: If the attribute fetch or the copy fails, including
                when the object vanishes after its reader was opened
        """
        trace_op("open", path)
        start_time = time.time()
        source = store.open_reader(path, timeout=timeout)
        buffer = None
        try:
            try:
                attrs = store.get_attributes(path, timeout=timeout)
            except ObjectNotFoundError as e:
                # Only a missing object at reader open means "not a file".
                raise StorageError(f"Object {path} vanished while opening: {e}", code=e.code) from e
            buffer = SeekableBuffer(path)
            shutil.copyfileobj(source, buffer, COPY_CHUNK_SIZE)
            buffer.close()
            buffer.open()
        except Exception:
            if buffer is not None:
                buffer.release()
            raise
        finally:
            source.close()

        logger.debug(f"Materialized {buffer.size} bytes of {path}")
        time_function("ReadFile.open", start_time)
        return cls(FileInfo.from_attributes(attrs), buffer)

    @property
    def closed(self) -> bool:
        return self._buffer.closed

    def read(self, size: int = -1) -> bytes:
        """
        Read up to size bytes from the current position; all remaining bytes
        when size is negative.
        """
        return self._buffer.read(size)

    def readinto(self, b) -> int:
        return self._buffer.readinto(b)

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        return self._buffer.seek(offset, whence)

    def tell(self) -> int:
        return self._buffer.tell()

    def write(self, data) -> int:
        raise UnsupportedOperationError(f"{self.name} is open for reading only", operation="write")

    def stat(self) -> FileInfo:
        return self._info

    def close(self) -> None:
        """Discard the local copy. No network call is made."""
        self._buffer.release()
