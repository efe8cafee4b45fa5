# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Object store adapter contract.

Every remote read, write, list, delete and copy performed by s3memfs goes
through a single bucket handle implementing :class:`ObjectStore`. Keys are
relative to that bucket.

Implementations must raise :class:`~s3memfs.client.exceptions.NotFoundError`
when an object is absent and :class:`~s3memfs.client.exceptions.RemoteFailureError`
for every other failure, so that callers never inspect error text.
"""

from abc import ABC, abstractmethod
from typing import BinaryIO, Iterable, Iterator, Optional

from .types import AccessLevel, HeadObjectOutput, ListObjectsOptions, ListObjectsOutput


class ObjectStore(ABC):
    """
    Single-bucket object store handle.

    Attributes:
        name (str): Name of the bucket this handle is bound to
    """

    name = ""

    @abstractmethod
    def head_object(self, key: str) -> HeadObjectOutput:
        """
        Fetch object metadata without transferring its content.

        Args:
            key (str): Object key

        Returns:
            HeadObjectOutput: Entity tag, size and last-modified time

        Raises:
            NotFoundError: If the object does not exist
            RemoteFailureError: For any other failure
        """

    @abstractmethod
    def get_object(self, key: str) -> bytes:
        """
        Fetch the full content of an object.

        Args:
            key (str): Object key

        Returns:
            bytes: The object content
        """

    @abstractmethod
    def get_object_reader(self, key: str) -> BinaryIO:
        """
        Open a streaming reader over an object's content.

        Args:
            key (str): Object key

        Returns:
            BinaryIO: A readable binary stream
        """

    @abstractmethod
    def put_object(self, key: str, data: bytes, content_type: Optional[str] = None,
                   access_level: AccessLevel = AccessLevel.PRIVATE) -> None:
        """
        Upload the full content of an object in a single request.

        Args:
            key (str): Object key
            data (bytes): Object content
            content_type (str, optional): MIME type stored with the object
            access_level (AccessLevel, optional): Canned access level. Defaults to private.
        """

    @abstractmethod
    def delete_object(self, key: str) -> None:
        """
        Delete an object. Deleting a missing key is not an error.

        Args:
            key (str): Object key
        """

    @abstractmethod
    def delete_objects(self, keys: Iterable[str]) -> None:
        """
        Delete several objects.

        Args:
            keys (Iterable[str]): Object keys
        """

    @abstractmethod
    def list_objects(self, options: Optional[ListObjectsOptions] = None) -> ListObjectsOutput:
        """
        List one page of objects.

        Args:
            options (ListObjectsOptions, optional): Prefix, delimiter, continuation token and page size

        Returns:
            ListObjectsOutput: The entries of this page and the token for the next one
        """

    @abstractmethod
    def copy_object(self, key: str, source_key: str,
                    access_level: AccessLevel = AccessLevel.PRIVATE) -> None:
        """
        Server-side copy of ``source_key`` to ``key`` within the bucket.

        Args:
            key (str): Destination key
            source_key (str): Source key
            access_level (AccessLevel, optional): Canned access level of the copy
        """

    def list_all(self, prefix: str = "", delimiter: Optional[str] = None,
                 page_size: Optional[int] = None) -> Iterator[ListObjectsOutput]:
        """
        Iterate over every page of a listing, following continuation tokens.

        A failing page raises before the caller sees it, so nothing is
        processed for a page that could not be listed.

        Args:
            prefix (str, optional): Key prefix. Defaults to "".
            delimiter (str, optional): Grouping delimiter
            page_size (int, optional): Maximum keys per page

        Yields:
            ListObjectsOutput: One page at a time
        """
        token = None
        while True:
            page = self.list_objects(ListObjectsOptions(
                prefix=prefix,
                delimiter=delimiter,
                continuation_token=token,
                max_keys=page_size,
            ))
            yield page
            if not page.is_truncated or not page.next_token:
                return
            token = page.next_token

    def url(self, key: str) -> str:
        """
        Return the ``s3://`` URI of a key in this bucket.

        Args:
            key (str): Object key

        Returns:
            str: The object URI
        """
        return f"s3://{self.name}/{key.lstrip('/')}"
