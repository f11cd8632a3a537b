# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
In-memory object store.

This module provides a process-local ObjectStore with the same observable
behavior as a cloud bucket: objects only become visible when their writer is
closed, listings are ordered by name and paginated with opaque cursors, and
content types are sniffed from the object name.
"""
import base64
import hashlib
import hmac
import logging
import mimetypes
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from io import BytesIO
from threading import RLock
from typing import Dict, Optional
from urllib.parse import quote, urlencode

from .exceptions import ObjectNotFoundError, StorageError
from .store import ObjectStore
from .types import ListPage, ObjectAttributes

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass
class _StoredObject:
    data: bytes
    updated: datetime
    content_type: str


class _MemoryWriter(BytesIO):
    """Collects written bytes and commits them to the store on close."""

    def __init__(self, store: "InMemoryObjectStore", path: str):
        super().__init__()
        self._store = store
        self._path = path

    def close(self) -> None:
        if not self.closed:
            self._store._commit(self._path, self.getvalue())
        super().close()

    def __del__(self):
        # Abandoned writers are discarded, not committed.
        BytesIO.close(self)


def _encode_cursor(name: str) -> str:
    return base64.urlsafe_b64encode(name.encode("utf-8")).decode("ascii")


def _decode_cursor(cursor: str) -> str:
    try:
        return base64.urlsafe_b64decode(cursor.encode("ascii")).decode("utf-8")
    except (ValueError, UnicodeError) as e:
        raise StorageError(f"Invalid listing cursor: {cursor!r}", code="ERR_INVALID_CURSOR") from e


class InMemoryObjectStore(ObjectStore):
    """
    Object store kept in a dictionary.

    Attributes:
        bucket (str): Bucket name used when building signed URLs
        objects (dict): Object name to stored content and metadata
        lock (threading.RLock): Guards the object table
    """

    def __init__(self, bucket: str = "memory"):
        self.bucket = bucket
        self.objects: Dict[str, _StoredObject] = {}
        self.lock = RLock()

    def _commit(self, path: str, data: bytes) -> None:
        content_type, _ = mimetypes.guess_type(path)
        with self.lock:
            self.objects[path] = _StoredObject(
                data=data,
                updated=datetime.now(timezone.utc),
                content_type=content_type or DEFAULT_CONTENT_TYPE,
            )
        logger.debug(f"Committed {len(data)} bytes to {path}")

    def _get(self, path: str) -> _StoredObject:
        with self.lock:
            obj = self.objects.get(path)
        if obj is None:
            raise ObjectNotFoundError("Object does not exist", key=path)
        return obj

    @staticmethod
    def _attributes(path: str, obj: _StoredObject) -> ObjectAttributes:
        return ObjectAttributes(
            name=path,
            size=len(obj.data),
            updated=obj.updated,
            content_type=obj.content_type,
        )

    def get_attributes(self, path: str, timeout: Optional[float] = None) -> ObjectAttributes:
        return self._attributes(path, self._get(path))

    def open_writer(self, path: str, timeout: Optional[float] = None) -> _MemoryWriter:
        return _MemoryWriter(self, path)

    def open_reader(self, path: str, timeout: Optional[float] = None) -> BytesIO:
        return BytesIO(self._get(path).data)

    def delete(self, path: str, timeout: Optional[float] = None) -> None:
        with self.lock:
            if path not in self.objects:
                raise ObjectNotFoundError("Object does not exist", key=path)
            del self.objects[path]

    def list(self, prefix: str, cursor: Optional[str] = None,
             max_results: Optional[int] = None,
             timeout: Optional[float] = None) -> ListPage:
        start_after = _decode_cursor(cursor) if cursor else None
        with self.lock:
            names = sorted(name for name in self.objects if name.startswith(prefix))
            if start_after is not None:
                names = [name for name in names if name > start_after]
            more = max_results is not None and max_results > 0 and len(names) > max_results
            if more:
                names = names[:max_results]
            entries = [self._attributes(name, self.objects[name]) for name in names]
        next_cursor = _encode_cursor(names[-1]) if more else None
        return ListPage(entries=entries, next_cursor=next_cursor)

    def sign_url(self, path: str, identity: str, private_key: str, method: str,
                 expiry: timedelta, timeout: Optional[float] = None) -> str:
        if not identity or not private_key:
            raise StorageError("Signing requires an identity and a private key", code="ERR_SIGN")
        expires = int(time.time() + expiry.total_seconds())
        resource = f"/{self.bucket}/{path}"
        payload = f"{method}\n{expires}\n{resource}".encode("utf-8")
        digest = hmac.new(private_key.encode("utf-8"), payload, hashlib.sha256).digest()
        query = urlencode({
            "GoogleAccessId": identity,
            "Expires": expires,
            "Signature": base64.b64encode(digest).decode("ascii"),
        })
        return f"memory://{self.bucket}/{quote(path)}?{query}"
