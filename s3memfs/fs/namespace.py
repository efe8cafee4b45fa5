# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Namespace map: absolute path to node, guarded by a reader/writer lock.

A :class:`Namespace` is owned by a filesystem instance, or shared between
several by passing the same object to each of them. Its lock is created
with it; nothing about it is module-level state.
"""

import posixpath

from ._lock import ReadWriteLock
from .node import DirectoryNode

ROOT = "/"


def normalize(path: str) -> str:
    """
    Normalize a namespace path: absolute, no trailing slash, no dot segments.

    Args:
        path (str): A path such as ``a/b/../c/``

    Returns:
        str: The normalized path, e.g. ``/a/c``
    """
    if not path:
        raise ValueError("path must not be empty")
    normalized = posixpath.normpath("/" + path.lstrip("/"))
    # normpath keeps a leading "//"
    return "/" + normalized.lstrip("/")


class Namespace:
    """
    Path-to-node map plus the lock that protects it.

    Callers take ``lock.read_locked()`` to look nodes up and
    ``lock.write_locked()`` for every mutation. The root directory always exists.
    """

    def __init__(self):
        self.lock = ReadWriteLock()
        self.nodes = {ROOT: DirectoryNode(ROOT)}

    @property
    def root(self) -> DirectoryNode:
        return self.nodes[ROOT]

    def get(self, path: str):
        return self.nodes.get(path)

    def __contains__(self, path: str) -> bool:
        return path in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)
