# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Buffered remote file.

A :class:`RemoteFile` is the regular-file variant of a namespace node. Its
content lives in a local byte buffer bound to one object key:

- the remote object is fetched in full on the first read if the buffer is
  not yet authoritative,
- writes, seeks and truncation only touch the buffer; writes and
  non-empty truncation fetch the remote object first,
- ``close`` uploads the buffer, unless its fingerprint matches the entity
  tag the store reports for the key.

A handle is not safe for concurrent use; callers sharing one must
serialize their calls.
"""

import mimetypes
import os
import time
from datetime import datetime, timezone

from ..client.exceptions import (
    ClosedHandleError,
    NotFoundError,
    OutOfRangeError,
    UnsupportedError,
)
from .acl import acl_for_mode
from .fingerprint import fingerprint, matches
from .node import Node
from .utils import logger, time_function, trace_op

DEFAULT_FILE_MODE = 0o600
DEFAULT_CONTENT_TYPE = "application/octet-stream"


class RemoteFile(Node):
    """
    Regular file backed by one object of the bucket.

    Attributes:
        path (str): Namespace path; the object key is the path without its leading "/"
        mode (int): Permission bits, translated to an access level on upload
        closed (bool): Whether the handle has been closed
    """

    def __init__(self, path: str, store, mode: int = DEFAULT_FILE_MODE, loaded: bool = True,
                 remote_size: int = 0, mod_time: datetime = None):
        """
        Build a file node.

        Args:
            path (str): Namespace path
            store (ObjectStore): Bucket the file is stored in
            mode (int, optional): Permission bits. Defaults to 0o600.
            loaded (bool, optional): Whether the empty buffer is already the file's
                content (new files) or the content still has to be fetched
                (files discovered remotely). Defaults to True.
            remote_size (int, optional): Size reported by the store for unloaded files
            mod_time (datetime, optional): Modification time. Defaults to now.
        """
        super().__init__(path, mode, mod_time)
        self._store = store
        self._data = bytearray()
        self._loaded = loaded
        self._remote_size = remote_size
        # Plain int: rebinding is atomic, which is all the cursor promises
        self._offset = 0
        self.closed = False

    @property
    def key(self) -> str:
        return self.path.lstrip("/")

    @property
    def size(self) -> int:
        if self._loaded:
            return len(self._data)
        return self._remote_size

    def _check_open(self, operation):
        if self.closed:
            raise ClosedHandleError(f"{operation} on closed file {self.path}", path=self.path)

    def _ensure_loaded(self):
        if self._loaded:
            return
        start_time = time.time()
        data = self._store.get_object(self.key)
        self._data = bytearray(data)
        self._loaded = True
        logger.debug(f"Fetched {len(data)} bytes for {self.path}")
        time_function("fetch", start_time)

    def _touch(self):
        self.mod_time = datetime.now(timezone.utc)

    def open(self):
        self._offset = 0
        self.closed = False

    def read(self, size: int = -1) -> bytes:
        """
        Read up to ``size`` bytes from the cursor; all remaining bytes if negative.

        Returns:
            bytes: The data read; empty at end of file
        """
        self._check_open("read")
        trace_op("read", self.path, size=size, offset=self._offset)
        if size == 0:
            return b""
        self._ensure_loaded()
        start = self._offset
        end = len(self._data) if size < 0 else start + size
        chunk = bytes(self._data[start:end])
        self._offset = start + len(chunk)
        return chunk

    def readinto(self, b) -> int:
        """
        Read into a writable buffer from the cursor.

        A zero-length buffer always yields 0 without fetching anything.

        Returns:
            int: Number of bytes copied; 0 at end of file
        """
        self._check_open("read")
        n = len(b)
        if n == 0:
            return 0
        chunk = self.read(n)
        b[:len(chunk)] = chunk
        return len(chunk)

    def read_at(self, size: int, offset: int) -> bytes:
        """Read up to ``size`` bytes at ``offset`` without moving the cursor."""
        self._check_open("read")
        if offset < 0:
            raise OutOfRangeError(f"negative offset {offset}", path=self.path)
        if size == 0:
            return b""
        self._ensure_loaded()
        end = len(self._data) if size < 0 else offset + size
        return bytes(self._data[offset:end])

    def _write_at(self, data, offset: int) -> int:
        # Writes overlay the remote content
        self._ensure_loaded()
        length = len(self._data)
        if offset > length:
            self._data.extend(b"\x00" * (offset - length))
        self._data[offset:offset + len(data)] = data
        self._touch()
        return len(data)

    def write(self, data) -> int:
        """
        Write at the cursor, zero-padding any gap, and advance the cursor.

        Returns:
            int: Number of bytes accepted
        """
        self._check_open("write")
        trace_op("write", self.path, size=len(data), offset=self._offset)
        n = self._write_at(data, self._offset)
        self._offset += n
        return n

    def write_at(self, data, offset: int) -> int:
        """Write at ``offset`` without moving the cursor."""
        self._check_open("write")
        if offset < 0:
            raise OutOfRangeError(f"negative offset {offset}", path=self.path)
        trace_op("write_at", self.path, size=len(data), offset=offset)
        return self._write_at(data, offset)

    def write_string(self, s: str) -> int:
        return self.write(s.encode("utf-8"))

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        """
        Move the cursor. Positions past the end are allowed.

        Args:
            offset (int): Offset relative to ``whence``
            whence (int, optional): os.SEEK_SET, os.SEEK_CUR or os.SEEK_END

        Returns:
            int: The new absolute position

        Raises:
            ClosedHandleError: If the file is closed
            OutOfRangeError: If the position would be negative or whence is invalid
        """
        self._check_open("seek")
        if whence == os.SEEK_SET:
            position = offset
        elif whence == os.SEEK_CUR:
            position = self._offset + offset
        elif whence == os.SEEK_END:
            position = self.size + offset
        else:
            raise OutOfRangeError(f"invalid whence {whence}", path=self.path)
        if position < 0:
            raise OutOfRangeError(f"negative seek position {position}", path=self.path)
        self._offset = position
        return position

    def tell(self) -> int:
        return self._offset

    def truncate(self, size: int):
        """
        Resize the content, zero-padding on growth. The cursor is not moved.

        Raises:
            ClosedHandleError: If the file is closed
            OutOfRangeError: If ``size`` is negative
        """
        self._check_open("truncate")
        if size < 0:
            raise OutOfRangeError(f"negative truncate size {size}", path=self.path)
        trace_op("truncate", self.path, size=size)
        if size == 0:
            self._data = bytearray()
            self._loaded = True
        else:
            self._ensure_loaded()
            length = len(self._data)
            if size < length:
                del self._data[size:]
            else:
                self._data.extend(b"\x00" * (size - length))
        self._touch()

    def close(self):
        """
        Close the handle and upload the buffer if it differs from the remote copy.

        The handle is marked closed before anything else happens. Files whose
        content was never loaded or written have nothing to upload.

        Raises:
            RemoteFailureError: If the metadata probe or the upload fails
        """
        self.closed = True
        trace_op("close", self.path)
        if self._loaded:
            self._flush()

    def _flush(self) -> bool:
        """
        Upload the buffer unless the remote entity tag already matches it.

        Returns:
            bool: True if an upload was issued
        """
        start_time = time.time()
        data = bytes(self._data)
        try:
            head = self._store.head_object(self.key)
        except NotFoundError:
            head = None

        if head is not None and matches(data, head.etag):
            logger.debug(f"Skipping upload of {self.path}: content unchanged ({fingerprint(data)})")
            return False

        content_type = mimetypes.guess_type(self.path)[0] or DEFAULT_CONTENT_TYPE
        self._store.put_object(self.key, data, content_type=content_type,
                               access_level=acl_for_mode(self.mode))
        self._remote_size = len(data)
        logger.info(f"Uploaded {len(data)} bytes to {self.key}")
        time_function("flush", start_time)
        return True

    def readdir(self, count: int = -1) -> list:
        raise UnsupportedError(f"{self.path} is not a directory", path=self.path, operation="readdir")

    def readdirnames(self, count: int = -1) -> list:
        raise UnsupportedError(f"{self.path} is not a directory", path=self.path, operation="readdir")
