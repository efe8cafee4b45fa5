# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
File metadata projection.

:class:`FileInfo` is the file-info shape handed to callers, built either
from an in-memory node or, for the direct variant, from a HEAD response.
"""

import posixpath
import stat
from dataclasses import dataclass
from datetime import datetime, timezone

# Mode reported for objects seen through the direct variant
DIRECT_MODE = 0o777

_EPOCH = datetime.fromtimestamp(0, timezone.utc)


@dataclass
class FileInfo:
    """
    Metadata of one file or directory.

    Attributes:
        name (str): Base name
        size (int): Content length in bytes; a fixed placeholder for directories
        mod_time (datetime): Last modification time
        is_dir (bool): Whether the entry is a directory
        mode (int): Permission bits
    """
    name: str
    size: int
    mod_time: datetime
    is_dir: bool
    mode: int

    @property
    def st_mode(self) -> int:
        """Permission bits combined with the file type bits."""
        return (stat.S_IFDIR if self.is_dir else stat.S_IFREG) | self.mode

    @classmethod
    def from_node(cls, node) -> "FileInfo":
        return cls(
            name=node.name,
            size=node.size,
            mod_time=node.mod_time,
            is_dir=node.is_dir,
            mode=node.mode,
        )

    @classmethod
    def from_head(cls, key: str, head) -> "FileInfo":
        """
        Project a HEAD response of the direct variant.

        Args:
            key (str): Object key
            head (HeadObjectOutput): Metadata returned by the store

        Returns:
            FileInfo: Size and modification time taken from the response
        """
        return cls(
            name=posixpath.basename(key.rstrip("/")) or "/",
            size=head.content_length,
            mod_time=head.last_modified or _EPOCH,
            is_dir=False,
            mode=DIRECT_MODE,
        )
