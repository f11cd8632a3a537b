# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Synthesized directories for bucketfs.

Object stores have no directory objects. A path that does not name an object
is treated as a directory whose entries are the objects listed under its
prefix. Listings are paginated by the store with an opaque continuation
token, which is carried between calls in a ListingCursor.
"""

import errno
import os
import time
from dataclasses import dataclass
from threading import Lock
from typing import List, Optional, Tuple

from bucketfs.client.exceptions import StorageError
from .info import FileInfo
from .utils import logger, normalize_path, time_function, trace_op


@dataclass(frozen=True)
class ListingCursor:
    """
    Position in a directory listing.

    Attributes:
        token (str): Opaque continuation token from the store, passed back unchanged
        exhausted (bool): True once the store reported no further pages
    """
    token: Optional[str] = None
    exhausted: bool = False


class DirectoryFile:
    """
    A directory that exists only as a prefix of object names.

    read_page() is stateless: the caller passes the cursor returned by the
    previous call. readdir() keeps a cursor on the handle for callers that
    expect the usual directory-read contract, so one handle walks one
    listing once. Cursor updates in readdir() are serialized with a lock.

    Listed entries are always reported as files with their full object
    names. Nested names are not grouped into sub-directories.

    Attributes:
        name (str): Directory path without leading or trailing slashes
        prefix (str): Listing prefix, the path plus '/' or '' for the root
    """

    def __init__(self, store, path: str, timeout: Optional[float] = None):
        self.name = normalize_path(path).rstrip('/')
        self.prefix = f"{self.name}/" if self.name else ''
        self._store = store
        self._timeout = timeout
        self._cursor: Optional[ListingCursor] = None
        self._lock = Lock()
        self._closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def cursor(self) -> Optional[ListingCursor]:
        """Cursor readdir() will continue from, None before the first call."""
        return self._cursor

    def _not_found(self) -> FileNotFoundError:
        return FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), self.name)

    def read_page(self, count: int = -1,
                  cursor: Optional[ListingCursor] = None) -> Tuple[List[FileInfo], ListingCursor]:
        """
        Read one page of directory entries.

        Args:
            count (int): Maximum entries to return; zero or negative reads
                everything that is left in a single call
            cursor (ListingCursor, optional): Cursor returned by the previous
                call, None to start from the beginning

        Returns:
            tuple: (entries, cursor for the next call). An exhausted cursor
                yields no entries and no store call is made.

        Raises:
            FileNotFoundError: If the listing fails, or if a listing from the
                beginning finds nothing under a non-root prefix
        """
        if self._closed:
            raise ValueError(f"I/O operation on closed directory {self.name!r}")
        if cursor is not None and cursor.exhausted:
            return [], cursor

        trace_op("readdir", self.name, count=count, cursor=cursor)
        start_time = time.time()
        max_results = count if count > 0 else None
        try:
            page = self._store.list(
                self.prefix,
                cursor=cursor.token if cursor is not None else None,
                max_results=max_results,
                timeout=self._timeout,
            )
        except StorageError as e:
            # Network failures and missing paths look the same from here.
            logger.warning(f"Listing prefix '{self.prefix}' failed: {e}")
            raise self._not_found() from e

        if cursor is None and not page.entries and self.prefix:
            logger.debug(f"No objects under prefix '{self.prefix}'")
            raise self._not_found()

        entries = [FileInfo.from_attributes(attrs) for attrs in page.entries]
        next_cursor = ListingCursor(token=page.next_cursor, exhausted=page.next_cursor is None)
        logger.debug(f"Listed {len(entries)} entries under '{self.prefix}' (more: {not next_cursor.exhausted})")
        time_function("DirectoryFile.read_page", start_time)
        return entries, next_cursor

    def readdir(self, count: int = -1) -> List[FileInfo]:
        """
        Read the next entries of this directory.

        Args:
            count (int): Maximum entries to return; zero or negative reads
                everything that is left

        Returns:
            list: FileInfo records, empty once the listing is exhausted
        """
        with self._lock:
            entries, self._cursor = self.read_page(count, self._cursor)
        return entries

    def readdirnames(self, n: int = -1) -> List[str]:
        return [info.name for info in self.readdir(n)]

    def stat(self) -> FileInfo:
        return FileInfo.directory(self.name)

    def read(self, size: int = -1) -> bytes:
        raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR), self.name)

    def write(self, data) -> int:
        raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR), self.name)

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR), self.name)

    def close(self) -> None:
        self._closed = True
