# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Object store clients used by the bucketfs adapter.

The Google Cloud Storage client lives in ``bucketfs.client.gcs`` and is
imported on demand.
"""
from .exceptions import (
    ObjectNotFoundError,
    StorageConnectionError,
    StorageError,
    StoragePermissionError,
    UnsupportedOperationError,
)
from .memory import InMemoryObjectStore
from .store import ObjectStore
from .types import ListPage, ObjectAttributes

__all__ = [
    "InMemoryObjectStore",
    "ListPage",
    "ObjectAttributes",
    "ObjectNotFoundError",
    "ObjectStore",
    "StorageConnectionError",
    "StorageError",
    "StoragePermissionError",
    "UnsupportedOperationError",
]
