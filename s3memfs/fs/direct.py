# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Direct, non-caching variant.

:class:`S3Fs` keeps no namespace: every call is one round trip to the
bucket, directories do not exist, and :class:`S3File` only supports
sequential reads and whole-object writes. Positional access, seeking,
truncation and directory listing raise ``UnsupportedError``.
"""

import io

from ..client.exceptions import UnsupportedError
from .fingerprint import matches
from .stat import FileInfo
from .utils import logger, trace_op


def _key(name: str) -> str:
    return name.lstrip("/")


class S3File:
    """
    Handle on one object, without local state beyond a read buffer.

    Attributes:
        source_key (str): Object key
        head (HeadObjectOutput): Metadata from when the handle was opened; None for new files
    """

    def __init__(self, source_key: str, store, head=None):
        self.source_key = source_key
        self._store = store
        self.head = head
        self._reader = None
        # Everything read so far is teed here
        self.content_buffer = io.BytesIO()

    @property
    def name(self) -> str:
        return self._store.url(self.source_key)

    def read(self, size: int = -1) -> bytes:
        """
        Read the next ``size`` bytes of the object, streaming it from the bucket.

        Returns:
            bytes: The data read; empty at end of object
        """
        if size == 0:
            return b""
        if self._reader is None:
            self._reader = self._store.get_object_reader(self.source_key)
        chunk = self._reader.read() if size is None or size < 0 else self._reader.read(size)
        self.content_buffer.write(chunk)
        return chunk

    def write(self, data) -> int:
        """
        Replace the object with ``data`` unless its entity tag already matches.

        Returns:
            int: Number of bytes accepted
        """
        data = bytes(data)
        if self.head is not None and matches(data, self.head.etag):
            logger.debug(f"Skipping upload of {self.source_key}: content unchanged")
            return len(data)
        self._store.put_object(self.source_key, data)
        return len(data)

    def write_string(self, s: str) -> int:
        return self.write(s.encode("utf-8"))

    def stat(self) -> FileInfo:
        """
        Raises:
            NotFoundError: If the object does not exist
        """
        head = self._store.head_object(self.source_key)
        return FileInfo.from_head(self.source_key, head)

    def close(self):
        # Nothing to release on the remote side
        if self._reader is not None:
            self._reader.close()
            self._reader = None

    def _unsupported(self, operation):
        raise UnsupportedError(f"{operation} is not supported by the direct variant",
                               path=self.source_key, operation=operation)

    def read_at(self, size: int, offset: int) -> bytes:
        self._unsupported("read_at")

    def write_at(self, data, offset: int) -> int:
        self._unsupported("write_at")

    def seek(self, offset: int, whence: int = 0) -> int:
        self._unsupported("seek")

    def truncate(self, size: int):
        self._unsupported("truncate")

    def readdir(self, count: int = -1) -> list:
        self._unsupported("readdir")

    def readdirnames(self, count: int = -1) -> list:
        self._unsupported("readdir")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class S3Fs:
    """
    Filesystem issuing one bucket request per call.

    Attributes:
        store (ObjectStore): The bucket
    """

    def __init__(self, store):
        self.store = store

    @property
    def name(self) -> str:
        return "S3Fs: direct s3 access"

    def create(self, name: str) -> S3File:
        trace_op("create", name)
        return S3File(_key(name), self.store)

    def open(self, name: str) -> S3File:
        """
        Raises:
            NotFoundError: If the object does not exist
        """
        trace_op("open", name)
        key = _key(name)
        head = self.store.head_object(key)
        return S3File(key, self.store, head=head)

    def stat(self, name: str) -> FileInfo:
        """
        Raises:
            NotFoundError: If the object does not exist
        """
        key = _key(name)
        return FileInfo.from_head(key, self.store.head_object(key))

    def remove(self, name: str):
        trace_op("remove", name)
        self.store.delete_object(_key(name))

    def mkdir(self, name: str, mode: int = 0o777):
        # The bucket has no directories
        pass

    def mkdir_all(self, name: str, mode: int = 0o777):
        pass
