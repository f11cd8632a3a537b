# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""Google Cloud Storage object store."""

import logging
from datetime import timedelta
from typing import Optional

from google.api_core.exceptions import Forbidden, NotFound
from google.cloud import storage as gcs
from google.oauth2 import service_account

from .exceptions import (
    ObjectNotFoundError,
    StorageConnectionError,
    StorageError,
    StoragePermissionError,
)
from .store import ObjectStore
from .types import ListPage, ObjectAttributes

log = logging.getLogger(__name__)

TOKEN_URI = "https://oauth2.googleapis.com/token"


def _call_kwargs(timeout: Optional[float]) -> dict:
    return {"timeout": timeout} if timeout is not None else {}


class GCSObjectStore(ObjectStore):
    """ObjectStore backed by a single Google Cloud Storage bucket."""

    def __init__(
        self,
        bucket_name: str,
        project: Optional[str] = None,
        credentials_path: Optional[str] = None,
        client: Optional[gcs.Client] = None,
    ):
        self._bucket_name = bucket_name
        if client is None:
            kwargs: dict = {}
            if project:
                kwargs["project"] = project
            if credentials_path:
                kwargs["credentials"] = service_account.Credentials.from_service_account_file(credentials_path)
            client = gcs.Client(**kwargs)
        self._gcs_client = client
        self._bucket = client.bucket(bucket_name)

    def _attributes(self, blob) -> ObjectAttributes:
        return ObjectAttributes(
            name=blob.name,
            size=blob.size or 0,
            updated=blob.updated,
            content_type=blob.content_type,
        )

    def _require_blob(self, path: str, timeout: Optional[float]):
        blob = self._bucket.get_blob(path, **_call_kwargs(timeout))
        if blob is None:
            raise ObjectNotFoundError("Object does not exist", key=path)
        return blob

    def get_attributes(self, path: str, timeout: Optional[float] = None) -> ObjectAttributes:
        try:
            return self._attributes(self._require_blob(path, timeout))
        except StorageError:
            raise
        except Exception as e:
            raise self._translate_error(e, path) from e

    def open_writer(self, path: str, timeout: Optional[float] = None):
        try:
            return self._bucket.blob(path).open("wb", **_call_kwargs(timeout))
        except Exception as e:
            raise self._translate_error(e, path) from e

    def open_reader(self, path: str, timeout: Optional[float] = None):
        try:
            blob = self._require_blob(path, timeout)
            return blob.open("rb", **_call_kwargs(timeout))
        except StorageError:
            raise
        except Exception as e:
            raise self._translate_error(e, path) from e

    def delete(self, path: str, timeout: Optional[float] = None) -> None:
        try:
            self._bucket.blob(path).delete(**_call_kwargs(timeout))
        except Exception as e:
            raise self._translate_error(e, path) from e

    def list(self, prefix: str, cursor: Optional[str] = None,
             max_results: Optional[int] = None,
             timeout: Optional[float] = None) -> ListPage:
        try:
            if max_results is None:
                # unbounded: drain every page in one call
                blobs = self._bucket.list_blobs(prefix=prefix, page_token=cursor, **_call_kwargs(timeout))
                return ListPage(entries=[self._attributes(blob) for blob in blobs])

            iterator = self._bucket.list_blobs(
                prefix=prefix,
                page_token=cursor,
                max_results=max_results,
                **_call_kwargs(timeout),
            )
            page = next(iterator.pages, None)
            entries = [self._attributes(blob) for blob in page] if page is not None else []
            return ListPage(entries=entries, next_cursor=iterator.next_page_token or None)
        except Exception as e:
            raise self._translate_error(e) from e

    def sign_url(self, path: str, identity: str, private_key: str, method: str,
                 expiry: timedelta, timeout: Optional[float] = None) -> str:
        try:
            credentials = service_account.Credentials.from_service_account_info({
                "client_email": identity,
                "private_key": private_key,
                "token_uri": TOKEN_URI,
            })
            return self._bucket.blob(path).generate_signed_url(
                version="v4",
                expiration=expiry,
                method=method,
                credentials=credentials,
            )
        except Exception as e:
            raise self._translate_error(e, path) from e

    def close(self) -> None:
        self._gcs_client.close()

    def _translate_error(self, error: Exception, key: Optional[str] = None) -> StorageError:
        if isinstance(error, NotFound):
            return ObjectNotFoundError(str(error), key=key)
        if isinstance(error, Forbidden):
            return StoragePermissionError(str(error), key=key)
        if isinstance(error, ValueError) and "credentials" in str(error).lower():
            return StoragePermissionError(str(error), key=key)
        if isinstance(error, ConnectionError):
            return StorageConnectionError(str(error))
        log.debug(f"Untranslated storage error for {key}: {error!r}")
        return StorageError(str(error))
