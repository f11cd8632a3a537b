# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Filesystem adapter for object store buckets.

The FUSE bridge lives in ``bucketfs.fs.fuse_mount`` and needs libfuse, so it
is not imported here.
"""
from .buffer import SeekableBuffer
from .directory import DirectoryFile, ListingCursor
from .files import ReadFile, WriteFile
from .filesystem import SIGNED_URL_EXPIRY, SIGNED_URL_METHOD, BucketFs, UnsupportedMixin
from .info import FileInfo

__all__ = [
    "BucketFs",
    "DirectoryFile",
    "FileInfo",
    "ListingCursor",
    "ReadFile",
    "SIGNED_URL_EXPIRY",
    "SIGNED_URL_METHOD",
    "SeekableBuffer",
    "UnsupportedMixin",
    "WriteFile",
]
