# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Object store client interface.

This module defines the calls the filesystem adapter needs from an object
store: attribute lookup, streaming readers and writers, deletion, paginated
prefix listing and URL signing. Every call is blocking and may fail on its
own; none of them are retried by the adapter.

Classes:
    ObjectStore: Abstract base class implemented by concrete store clients.
"""
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import BinaryIO, Optional

from .types import ListPage, ObjectAttributes


class ObjectStore(ABC):
    """
    Abstract object store client.

    Implementations raise ObjectNotFoundError when the named object is absent
    and another StorageError subclass for any other failure. The optional
    ``timeout`` argument is a per-call deadline in seconds; None leaves the
    deadline to the implementation.
    """

    @abstractmethod
    def get_attributes(self, path: str, timeout: Optional[float] = None) -> ObjectAttributes:
        """
        Fetch the metadata of an object.

        Args:
            path (str): Object name
            timeout (float, optional): Deadline for the call in seconds

        Returns:
            ObjectAttributes: Size, modification time and content type

        Raises:
            ObjectNotFoundError: If no object exists at path
            StorageError: For any other failure
        """

    @abstractmethod
    def open_writer(self, path: str, timeout: Optional[float] = None) -> BinaryIO:
        """
        Open a one-shot writable stream for an object.

        The object becomes visible once the returned stream is closed.

        Args:
            path (str): Object name
            timeout (float, optional): Deadline for the call in seconds

        Returns:
            BinaryIO: A sink supporting write() and close()
        """

    @abstractmethod
    def open_reader(self, path: str, timeout: Optional[float] = None) -> BinaryIO:
        """
        Open a one-shot readable stream for an object.

        Args:
            path (str): Object name
            timeout (float, optional): Deadline for the call in seconds

        Returns:
            BinaryIO: A source supporting read() and close()

        Raises:
            ObjectNotFoundError: If no object exists at path
        """

    @abstractmethod
    def delete(self, path: str, timeout: Optional[float] = None) -> None:
        """
        Delete an object.

        Raises:
            ObjectNotFoundError: If no object exists at path
        """

    @abstractmethod
    def list(self, prefix: str, cursor: Optional[str] = None,
             max_results: Optional[int] = None,
             timeout: Optional[float] = None) -> ListPage:
        """
        List one page of objects whose names start with prefix.

        Args:
            prefix (str): Name prefix to match
            cursor (str, optional): Opaque continuation token from a previous page
            max_results (int, optional): Page size; None lists everything
            timeout (float, optional): Deadline for the call in seconds

        Returns:
            ListPage: Matching entries in name order and the token for the
                next page, or None when the listing is complete
        """

    @abstractmethod
    def sign_url(self, path: str, identity: str, private_key: str, method: str,
                 expiry: timedelta, timeout: Optional[float] = None) -> str:
        """
        Produce a signed URL granting temporary access to an object.

        Args:
            path (str): Object name
            identity (str): Signer identity (service account email)
            private_key (str): PEM-encoded signing key
            method (str): HTTP method the URL is valid for
            expiry (timedelta): How long the URL stays valid

        Returns:
            str: The signed URL
        """

    def close(self) -> None:
        """Release client resources. The default does nothing."""
