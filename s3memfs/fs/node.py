# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Namespace nodes.

A node is one path of the emulated namespace and is either a regular file
(:class:`~s3memfs.fs.file.RemoteFile`) or a :class:`DirectoryNode`. The
variant is fixed when the node is built; each variant only supports the
operations that make sense for it and raises ``UnsupportedError`` for the
rest.

Nodes hold no pointer to their parent. The parent path is always derived
from the node's own path.
"""

import posixpath
from datetime import datetime, timezone

from ..client.exceptions import UnsupportedError
from .stat import FileInfo

DEFAULT_DIR_MODE = 0o777
# Directories have no remote size
DIRECTORY_SIZE = 42


def _now():
    return datetime.now(timezone.utc)


def parent_path(path: str) -> str:
    """Return the parent of a normalized absolute path ("/" for top-level entries)."""
    return posixpath.dirname(path) or "/"


class Node:
    """
    Common state of every namespace node.

    Attributes:
        path (str): Absolute, normalized path; unique key in the namespace
        mode (int): Permission bits
        mod_time (datetime): Last modification time
    """

    is_dir = False

    def __init__(self, path: str, mode: int, mod_time: datetime = None):
        if not path:
            raise ValueError("node path must not be empty")
        self.path = path
        self.mode = mode
        self.mod_time = mod_time or _now()

    @property
    def name(self) -> str:
        """Base name of the node; the root is named "/"."""
        return posixpath.basename(self.path) or "/"

    @property
    def size(self) -> int:
        raise NotImplementedError

    def open(self):
        """Rewind the handle; called by the namespace on every open."""

    def close(self):
        """Release the handle."""

    def sync(self):
        """Commit is a no-op; content is only uploaded on close."""

    def stat(self) -> FileInfo:
        return FileInfo.from_node(self)

    def chmod(self, mode: int):
        self.mode = mode & 0o7777

    def chtimes(self, atime: datetime, mtime: datetime):
        # atime is not tracked
        self.mod_time = mtime

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def __repr__(self):
        return f"{type(self).__name__}({self.path!r})"


class DirectoryNode(Node):
    """
    A directory of the emulated namespace.

    Directories exist only in memory; the object store never sees them.
    ``children`` maps the base name of each direct child to its node and is
    kept in step with the namespace map by the namespace manager.
    """

    is_dir = True

    def __init__(self, path: str, mode: int = DEFAULT_DIR_MODE, mod_time: datetime = None):
        super().__init__(path, mode, mod_time)
        self.children = {}
        self._dir_offset = 0

    @property
    def size(self) -> int:
        return DIRECTORY_SIZE

    def add(self, child: Node):
        self.children[child.name] = child
        self.mod_time = _now()

    def remove(self, child: Node):
        # Only drop the entry if it still refers to this very node
        if self.children.get(child.name) is child:
            del self.children[child.name]
            self.mod_time = _now()

    def open(self):
        self._dir_offset = 0

    def readdir(self, count: int = -1) -> list:
        """
        Read directory entries, continuing where the previous call stopped.

        Args:
            count (int, optional): Maximum number of entries. Zero or negative
                returns every remaining entry. Defaults to -1.

        Returns:
            list[FileInfo]: The entries, sorted by name; empty once the directory is exhausted
        """
        entries = sorted(list(self.children.values()), key=lambda n: n.name)
        start = min(self._dir_offset, len(entries))
        end = len(entries) if count <= 0 else min(start + count, len(entries))
        self._dir_offset = end
        return [child.stat() for child in entries[start:end]]

    def readdirnames(self, count: int = -1) -> list:
        """Same as :meth:`readdir` but returning base names only."""
        return [info.name for info in self.readdir(count)]

    def _not_a_file(self, operation):
        raise UnsupportedError(f"{self.path} is a directory", path=self.path, operation=operation)

    def read(self, size: int = -1) -> bytes:
        self._not_a_file("read")

    def readinto(self, b) -> int:
        self._not_a_file("read")

    def read_at(self, size: int, offset: int) -> bytes:
        self._not_a_file("read")

    def write(self, data) -> int:
        self._not_a_file("write")

    def write_at(self, data, offset: int) -> int:
        self._not_a_file("write")

    def write_string(self, s: str) -> int:
        self._not_a_file("write")

    def seek(self, offset: int, whence: int = 0) -> int:
        self._not_a_file("seek")

    def truncate(self, size: int):
        self._not_a_file("truncate")
