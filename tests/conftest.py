import hashlib
import io
import os
import threading
from datetime import datetime, timezone

import pytest

from s3memfs.client.base import ObjectStore
from s3memfs.client.exceptions import NotFoundError, RemoteFailureError
from s3memfs.client.types import (
    AccessLevel,
    HeadObjectOutput,
    ListObjectsOptions,
    ListObjectsOutput,
    ObjectSummary,
)
from s3memfs.fs.memfs import MemS3Fs


class StoredObject:
    def __init__(self, data, access_level=AccessLevel.PRIVATE, content_type=None):
        self.data = bytes(data)
        self.etag = '"' + hashlib.md5(self.data).hexdigest() + '"'
        self.access_level = access_level
        self.content_type = content_type
        self.last_modified = datetime.now(timezone.utc)


class FakeStore(ObjectStore):
    """
    In-memory bucket for tests.

    Every call is recorded in ``calls`` as ``(operation, key)``. ``fail(op)``
    makes the next calls of an operation raise, and ``hooks[op]`` runs
    before an operation touches any state.
    """

    def __init__(self, name="test-bucket", page_size=1000):
        self.name = name
        self.page_size = page_size
        self.objects = {}
        self.calls = []
        self.hooks = {}
        self._failures = {}
        self._lock = threading.Lock()

    def seed(self, key, data):
        with self._lock:
            self.objects[key] = StoredObject(data)

    def fail(self, operation, error=None):
        self._failures[operation] = error or RemoteFailureError(f"injected {operation} failure",
                                                                 operation=operation)

    def count(self, operation):
        return sum(1 for op, _ in self.calls if op == operation)

    def _enter(self, operation, key=None):
        with self._lock:
            self.calls.append((operation, key))
        hook = self.hooks.get(operation)
        if hook is not None:
            hook(key)
        error = self._failures.get(operation)
        if error is not None:
            raise error

    def _get(self, key, operation):
        obj = self.objects.get(key)
        if obj is None:
            raise NotFoundError(f"Object {key} does not exist", path=key, operation=operation)
        return obj

    def head_object(self, key):
        self._enter("head", key)
        with self._lock:
            obj = self._get(key, "HEAD")
            return HeadObjectOutput(etag=obj.etag, content_length=len(obj.data),
                                    last_modified=obj.last_modified, content_type=obj.content_type)

    def get_object(self, key):
        self._enter("get", key)
        with self._lock:
            return self._get(key, "GET").data

    def get_object_reader(self, key):
        self._enter("get", key)
        with self._lock:
            return io.BytesIO(self._get(key, "GET").data)

    def put_object(self, key, data, content_type=None, access_level=AccessLevel.PRIVATE):
        self._enter("put", key)
        with self._lock:
            self.objects[key] = StoredObject(data, access_level, content_type)

    def delete_object(self, key):
        self._enter("delete", key)
        with self._lock:
            self.objects.pop(key, None)

    def delete_objects(self, keys):
        keys = list(keys)
        self._enter("delete_many", ",".join(keys))
        with self._lock:
            for key in keys:
                self.objects.pop(key, None)

    def list_objects(self, options=None):
        options = options or ListObjectsOptions()
        self._enter("list", options.prefix)
        prefix = options.prefix or ""
        with self._lock:
            keys = sorted(k for k in self.objects if k.startswith(prefix))
            if options.delimiter:
                keys = [k for k in keys if options.delimiter not in k[len(prefix):]]
            # Token is the last key of the previous page
            if options.continuation_token:
                keys = [k for k in keys if k > options.continuation_token]
            limit = options.max_keys or self.page_size
            page = keys[:limit]
            entries = [
                ObjectSummary(key=k, size=len(self.objects[k].data), etag=self.objects[k].etag,
                              last_modified=self.objects[k].last_modified)
                for k in page
            ]
        truncated = len(keys) > len(page)
        return ListObjectsOutput(entries=entries, is_truncated=truncated,
                                 next_token=page[-1] if truncated else None)

    def copy_object(self, key, source_key, access_level=AccessLevel.PRIVATE):
        self._enter("copy", key)
        with self._lock:
            source = self._get(source_key, "COPY")
            obj = StoredObject(source.data, access_level, source.content_type)
            self.objects[key] = obj


def pytest_configure(config):
    """Configure test environment."""
    # Keep tests away from a real credentials file
    os.environ.setdefault("S3MEMFS_CREDENTIALS_FILE", os.path.join(os.devnull, "credentials.yaml"))


@pytest.fixture
def store():
    """Fixture to provide an empty in-memory bucket."""
    return FakeStore()


@pytest.fixture
def fs(store):
    """Fixture to provide a filesystem over the in-memory bucket."""
    return MemS3Fs(store)
