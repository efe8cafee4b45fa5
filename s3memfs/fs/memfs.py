# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
In-memory namespace over a flat bucket.

:class:`MemS3Fs` mirrors a hierarchical namespace in memory while file
contents live in the bucket. Directories are fabricated on demand and never
stored remotely: creating ``/a/b/c.txt`` brings ``/a`` and ``/a/b`` into
existence as directory nodes.

Every node is reachable twice, through the namespace map and through its
parent's ``children``. Both views are only changed here, under the
namespace's write lock.

Usage:
    fs = MemS3Fs(Bucket("my-bucket"))
    with fs.create("/reports/2024/summary.txt") as f:
        f.write_string("hello")
    fs.stat("/reports").is_dir  # True
"""

import time

from ..client.exceptions import (
    AlreadyExistsError,
    DestinationExistsError,
    NotFoundError,
    RemoteFailureError,
    UnsupportedError,
)
from .acl import acl_for_mode
from .file import DEFAULT_FILE_MODE, RemoteFile
from .namespace import ROOT, Namespace, normalize
from .node import DEFAULT_DIR_MODE, DirectoryNode, parent_path
from .utils import logger, time_function, trace_op


def _key(path: str) -> str:
    return path.lstrip("/")


class MemS3Fs:
    """
    Filesystem keeping its namespace in memory and file contents in a bucket.

    Attributes:
        store (ObjectStore): The bucket all remote calls go to
        namespace (Namespace): Path-to-node map and its lock; pass the same
            instance to several filesystems to share it
    """

    def __init__(self, store, namespace: Namespace = None):
        self.store = store
        self.namespace = namespace or Namespace()

    @property
    def name(self) -> str:
        return "MemS3Fs: s3-backed memfs"

    # -- helpers; the write lock must be held -------------------------------

    def _check_ancestors(self, path: str):
        """Fail if a regular file sits where an ancestor directory of ``path`` belongs."""
        ancestor = parent_path(path)
        while True:
            node = self.namespace.get(ancestor)
            if node is not None:
                if not node.is_dir:
                    raise AlreadyExistsError(f"{ancestor} exists and is not a directory", path=ancestor)
                return
            ancestor = parent_path(ancestor)

    def _register_dirs(self, node):
        """
        Register a node with its parent directory, fabricating the parent first
        if it does not exist. Fabrication goes through ``_mkdir_locked``, which
        registers the new directory in turn, so missing ancestors appear one
        level at a time up to the first existing one.
        """
        if node.path == ROOT:
            return
        ppath = parent_path(node.path)
        parent = self.namespace.get(ppath)
        if parent is None:
            parent = self._mkdir_locked(ppath, DEFAULT_DIR_MODE)
            logger.debug(f"Fabricated directory {ppath}")
        parent.add(node)

    def _unregister(self, node):
        parent = self.namespace.get(parent_path(node.path))
        if parent is not None and parent.is_dir:
            parent.remove(node)

    def _mkdir_locked(self, path: str, mode: int) -> DirectoryNode:
        node = DirectoryNode(path, mode & 0o7777)
        self.namespace.nodes[path] = node
        self._register_dirs(node)
        return node

    # -- namespace operations -------------------------------------------------

    def create(self, path: str, mode: int = DEFAULT_FILE_MODE) -> RemoteFile:
        """
        Create an empty regular file, replacing any file already at ``path``.

        Nothing is uploaded until the returned handle is closed.

        Args:
            path (str): Path of the file
            mode (int, optional): Permission bits. Defaults to 0o600.

        Returns:
            RemoteFile: The new, open file

        Raises:
            AlreadyExistsError: If ``path`` or one of its ancestors is occupied
                by a node of the wrong kind
        """
        path = normalize(path)
        trace_op("create", path, mode=oct(mode))
        with self.namespace.lock.write_locked():
            existing = self.namespace.get(path)
            if existing is not None and existing.is_dir:
                raise AlreadyExistsError(f"{path} is a directory", path=path)
            if existing is None:
                self._check_ancestors(path)
            else:
                self._unregister(existing)
            node = RemoteFile(path, self.store, mode=mode & 0o7777)
            self.namespace.nodes[path] = node
            self._register_dirs(node)
        logger.debug(f"Created {path}")
        return node

    def mkdir(self, path: str, mode: int = DEFAULT_DIR_MODE):
        """
        Create a directory node. Nothing is sent to the bucket.

        Creating a directory that already exists succeeds without effect.

        Args:
            path (str): Path of the directory
            mode (int, optional): Permission bits. Defaults to 0o777.

        Raises:
            AlreadyExistsError: If a regular file occupies ``path`` or one of its ancestors
        """
        path = normalize(path)
        trace_op("mkdir", path, mode=oct(mode))
        with self.namespace.lock.write_locked():
            existing = self.namespace.get(path)
            if existing is not None:
                if existing.is_dir:
                    return
                raise AlreadyExistsError(f"{path} exists and is not a directory", path=path)
            self._check_ancestors(path)
            self._mkdir_locked(path, mode)

    def mkdir_all(self, path: str, mode: int = DEFAULT_DIR_MODE):
        """Create a directory and any missing ancestors; same as :meth:`mkdir`."""
        self.mkdir(path, mode)

    def open(self, path: str):
        """
        Open an existing node, rewinding its cursor and clearing its closed flag.

        Args:
            path (str): Path to open

        Returns:
            Node: The file or directory node, which doubles as the handle

        Raises:
            NotFoundError: If nothing exists at ``path``
        """
        path = normalize(path)
        trace_op("open", path)
        with self.namespace.lock.read_locked():
            node = self.namespace.get(path)
        if node is None:
            raise NotFoundError(f"{path} does not exist", path=path)
        node.open()
        return node

    def open_file(self, path: str, flags: int = 0, mode: int = None):
        """
        Open an existing node and apply ``mode``.

        ``flags`` are accepted for compatibility and ignored: the path must
        exist whatever they request.

        Raises:
            NotFoundError: If nothing exists at ``path``
        """
        node = self.open(path)
        if mode is not None:
            self.chmod(node.path, mode)
        return node

    def remove(self, path: str):
        """
        Delete a node locally and, for regular files, remotely.

        The remote delete is idempotent. If it fails while a local node exists,
        the local node is still removed and the failure is logged; with no
        local node the failure is raised.

        Args:
            path (str): Path to remove

        Raises:
            RemoteFailureError: If the remote delete fails and no local node existed
        """
        path = normalize(path)
        trace_op("remove", path)
        if path == ROOT:
            raise UnsupportedError("cannot remove the root directory", path=path, operation="remove")
        start_time = time.time()
        with self.namespace.lock.write_locked():
            node = self.namespace.get(path)
            remote_error = None
            if node is None or not node.is_dir:
                try:
                    self.store.delete_object(_key(path))
                except RemoteFailureError as e:
                    remote_error = e

            if node is None:
                if remote_error is not None:
                    raise remote_error
                time_function("remove", start_time)
                return

            del self.namespace.nodes[path]
            self._unregister(node)
            if remote_error is not None:
                logger.error(f"remove: remote delete of {path} failed, local node removed anyway: {remote_error}")
        time_function("remove", start_time)

    def remove_all(self, prefix: str):
        """
        Remove every node whose path starts with ``prefix`` and every remote
        object under it.

        Matching is a plain string prefix, not a path-segment match:
        ``/foo`` also removes ``/foobar``.

        Args:
            prefix (str): Path prefix

        Raises:
            RemoteFailureError: If listing or deleting fails; a page that cannot
                be listed is never deleted
        """
        prefix = normalize(prefix)
        trace_op("remove_all", prefix)
        start_time = time.time()
        with self.namespace.lock.write_locked():
            doomed = [p for p in self.namespace.nodes if p.startswith(prefix) and p != ROOT]
            for p in doomed:
                node = self.namespace.nodes.pop(p)
                self._unregister(node)
            logger.debug(f"remove_all: dropped {len(doomed)} local nodes under {prefix}")

            deleted = 0
            for page in self.store.list_all(prefix=_key(prefix)):
                keys = [entry.key for entry in page.entries]
                if keys:
                    self.store.delete_objects(keys)
                    deleted += len(keys)
            logger.info(f"remove_all: deleted {deleted} remote objects under {prefix}")
        time_function("remove_all", start_time)

    def rename(self, old: str, new: str):
        """
        Move a node, and everything beneath it for a directory, to a new path.

        The namespace changes first and is visible to other callers as soon as
        the lock is released. Each regular file is then copied server-side to
        its new key and its old key deleted. Until that finishes the bucket
        still holds the object under the old key; a file that was never
        uploaded has nothing to copy and is skipped.

        Args:
            old (str): Current path
            new (str): Target path

        Raises:
            NotFoundError: If ``old`` does not exist
            DestinationExistsError: If ``new`` is occupied
            RemoteFailureError: If a remote copy or delete fails; the namespace
                keeps the new path
        """
        old = normalize(old)
        new = normalize(new)
        trace_op("rename", new, old=old)
        start_time = time.time()
        with self.namespace.lock.write_locked():
            node = self.namespace.get(old)
            if node is None:
                raise NotFoundError(f"{old} does not exist", path=old)
            if new in self.namespace:
                raise DestinationExistsError(f"{new} already exists", path=new)
            if old == ROOT or new.startswith(old + "/"):
                raise UnsupportedError(f"cannot move {old} into itself", path=old, operation="rename")
            self._check_ancestors(new)

            moved = [node]
            if node.is_dir:
                moved.extend(n for p, n in self.namespace.nodes.items() if p.startswith(old + "/"))

            self._unregister(node)
            pending = []
            for n in moved:
                old_path = n.path
                del self.namespace.nodes[old_path]
                n.path = new + old_path[len(old):]
                self.namespace.nodes[n.path] = n
                if not n.is_dir:
                    pending.append((old_path, n))
            self._register_dirs(node)
        logger.debug(f"rename: {old} -> {new} applied locally, moving {len(pending)} objects")

        for old_path, n in pending:
            self._move_remote(old_path, n)
        time_function("rename", start_time)

    def _move_remote(self, old_path: str, node):
        old_key = _key(old_path)
        try:
            self.store.copy_object(node.key, old_key, access_level=acl_for_mode(node.mode))
        except NotFoundError:
            logger.debug(f"rename: {old_key} was never uploaded, nothing to copy")
            return
        self.store.delete_object(old_key)
        logger.info(f"rename: moved {old_key} to {node.key}")

    def stat(self, path: str):
        """
        Open ``path`` and project it into a :class:`~s3memfs.fs.stat.FileInfo`.

        Raises:
            NotFoundError: If nothing exists at ``path``
        """
        return self.open(path).stat()

    def chmod(self, path: str, mode: int):
        """
        Raises:
            NotFoundError: If nothing exists at ``path``
        """
        path = normalize(path)
        with self.namespace.lock.write_locked():
            node = self.namespace.get(path)
            if node is None:
                raise NotFoundError(f"{path} does not exist", path=path, operation="chmod")
            node.chmod(mode)

    def chtimes(self, path: str, atime, mtime):
        """
        Raises:
            NotFoundError: If nothing exists at ``path``
        """
        path = normalize(path)
        with self.namespace.lock.write_locked():
            node = self.namespace.get(path)
            if node is None:
                raise NotFoundError(f"{path} does not exist", path=path, operation="chtimes")
            node.chtimes(atime, mtime)

    def list(self) -> list:
        """
        Snapshot of the namespace for debugging.

        Returns:
            list[tuple[str, int]]: ``(path, size)`` pairs sorted by path
        """
        with self.namespace.lock.read_locked():
            snapshot = sorted((p, n.size) for p, n in self.namespace.nodes.items())
        for path, size in snapshot:
            logger.debug(f"{path} {size}")
        return snapshot

    def load_remote(self, prefix: str = "") -> int:
        """
        Register a lazily loaded file node for every object under ``prefix``.

        Paths already present in the namespace are left alone. Keys ending in
        "/" (directory markers written by other tools) are skipped, as are
        keys that would need a directory where a file already is.

        Args:
            prefix (str, optional): Key prefix. Defaults to the whole bucket.

        Returns:
            int: Number of nodes added
        """
        start_time = time.time()
        added = 0
        for page in self.store.list_all(prefix=_key(prefix)):
            with self.namespace.lock.write_locked():
                for entry in page.entries:
                    if entry.key.endswith("/"):
                        continue
                    path = normalize(entry.key)
                    if path in self.namespace:
                        continue
                    try:
                        self._check_ancestors(path)
                    except AlreadyExistsError as e:
                        logger.warning(f"load_remote: skipping {entry.key}: {e.message}")
                        continue
                    node = RemoteFile(path, self.store, loaded=False, remote_size=entry.size,
                                      mod_time=entry.last_modified)
                    self.namespace.nodes[path] = node
                    self._register_dirs(node)
                    added += 1
        logger.info(f"load_remote: registered {added} objects from {self.store.name}")
        time_function("load_remote", start_time)
        return added
