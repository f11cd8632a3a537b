# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Filesystem facade over an object store bucket.

BucketFs is the entry point callers use. It routes each call to a write
session, a read session or a synthesized directory, and translates object
metadata into FileInfo records.

Usage:
    from bucketfs.client import InMemoryObjectStore
    from bucketfs.fs import BucketFs

    fs = BucketFs(InMemoryObjectStore())
    with fs.create("a/b.txt") as f:
        f.write(b"hello")

    with fs.open("a/b.txt") as f:
        f.read()                      # b"hello"

    fs.open("a").readdirnames()       # ["a/b.txt"]
"""

import errno
import os
import time
from datetime import timedelta
from typing import Optional

from bucketfs.client.exceptions import ObjectNotFoundError, UnsupportedOperationError
from bucketfs.client.store import ObjectStore
from .buffer import SeekableBuffer
from .directory import DirectoryFile
from .files import ReadFile, WriteFile
from .info import FileInfo
from .utils import logger, normalize_path, time_function, trace_op

SIGNED_URL_METHOD = "GET"
SIGNED_URL_EXPIRY = timedelta(hours=1)


def _not_found(path) -> FileNotFoundError:
    return FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)


class UnsupportedMixin:
    """
    Filesystem operations the object store has no primitive for.

    Each raises UnsupportedOperationError instead of pretending to succeed.
    """

    def mkdir(self, path, mode=0o755):
        raise UnsupportedOperationError("Object stores have no directory objects", operation="mkdir")

    def mkdir_all(self, path, mode=0o755):
        raise UnsupportedOperationError("Object stores have no directory objects", operation="mkdir_all")

    def remove_all(self, path):
        raise UnsupportedOperationError("Recursive removal is not supported", operation="remove_all")

    def rename(self, old, new):
        raise UnsupportedOperationError("Object stores have no atomic rename", operation="rename")

    def chmod(self, path, mode):
        raise UnsupportedOperationError("Object stores have no permission bits", operation="chmod")

    def chtimes(self, path, atime, mtime):
        raise UnsupportedOperationError("Modification times are set by the store", operation="chtimes")


class BucketFs(UnsupportedMixin):
    """
    Hierarchical, seekable view of an object store.

    Every call that reaches the store accepts an optional ``timeout`` in
    seconds which is passed unchanged to the store call.

    Attributes:
        store (ObjectStore): The backing object store client
    """

    _NAME = "BucketFs"

    def __init__(self, store: ObjectStore):
        self.store = store

    @property
    def name(self) -> str:
        """Name of this filesystem."""
        return self._NAME

    def create(self, path: str, timeout: Optional[float] = None) -> WriteFile:
        """
        Start a write session for path.

        There is no existence check and nothing is uploaded until the
        session is closed.

        Args:
            path (str): Path of the object to write
            timeout (float, optional): Deadline for the store call in seconds

        Returns:
            WriteFile: The write session
        """
        trace_op("create", path)
        key = normalize_path(path)
        sink = self.store.open_writer(key, timeout=timeout)
        logger.debug(f"create: Opened write session for {key}")
        return WriteFile(key, SeekableBuffer(key), sink)

    def open(self, path: str, timeout: Optional[float] = None):
        """
        Open path for reading.

        A path that names an object opens as a ReadFile. Any other path is a
        synthesized directory; whether it has entries is only known once it
        is listed.

        Args:
            path (str): Path to open
            timeout (float, optional): Deadline for each store call in seconds

        Returns:
            ReadFile or DirectoryFile

        Raises:
            StorageError: For store failures other than a missing object
        """
        trace_op("open", path)
        start_time = time.time()
        key = normalize_path(path)
        if not key or key.endswith('/'):
            return DirectoryFile(self.store, key, timeout=timeout)
        try:
            f = ReadFile.open(self.store, key, timeout=timeout)
        except ObjectNotFoundError:
            logger.debug(f"open: No object at {key}, treating it as a directory")
            f = DirectoryFile(self.store, key, timeout=timeout)
        time_function("open", start_time)
        return f

    def open_file(self, path: str, flags: int, timeout: Optional[float] = None):
        """
        Open path with os.open style flags.

        A read-only access mode without O_CREAT or O_TRUNC behaves like
        open(). Every other combination, including ones with no special
        meaning here, starts a write session like create().
        """
        trace_op("open_file", path, flags=flags)
        read_only = (flags & os.O_ACCMODE) == os.O_RDONLY
        if read_only and not flags & (os.O_CREAT | os.O_TRUNC):
            return self.open(path, timeout=timeout)
        return self.create(path, timeout=timeout)

    def stat(self, path: str, timeout: Optional[float] = None) -> FileInfo:
        """
        Get the metadata of the object at path.

        Raises:
            FileNotFoundError: If no object exists at path
        """
        trace_op("stat", path)
        key = normalize_path(path)
        if not key:
            return FileInfo.directory(key)
        try:
            attrs = self.store.get_attributes(key, timeout=timeout)
        except ObjectNotFoundError as e:
            raise _not_found(key) from e
        return FileInfo.from_attributes(attrs)

    def remove(self, path: str, timeout: Optional[float] = None) -> None:
        """
        Delete the object at path.

        Raises:
            FileNotFoundError: If no object exists at path
            StorageError: For any other store failure
        """
        trace_op("remove", path)
        key = normalize_path(path)
        try:
            self.store.delete(key, timeout=timeout)
        except ObjectNotFoundError as e:
            raise _not_found(key) from e
        logger.info(f"remove: Deleted {key}")

    def signed_url(self, path: str, identity: str, private_key: str,
                   timeout: Optional[float] = None) -> str:
        """
        Get a URL granting temporary GET access to the object at path.

        Args:
            path (str): Object path
            identity (str): Signer identity, e.g. a service account email
            private_key (str): PEM-encoded private key of the signer
        """
        trace_op("signed_url", path, identity=identity)
        return self.store.sign_url(
            normalize_path(path),
            identity,
            private_key,
            SIGNED_URL_METHOD,
            SIGNED_URL_EXPIRY,
            timeout=timeout,
        )

    def close(self) -> None:
        """Close the underlying store client."""
        self.store.close()
