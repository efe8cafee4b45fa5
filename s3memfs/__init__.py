# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
s3memfs: a POSIX-like filesystem over a single object-store bucket.

Directories are fabricated in memory, file contents are buffered locally
and only uploaded on close when their fingerprint differs from the
remote copy.
"""

from .client.bucket import Bucket
from .client.session import Session
from .fs.memfs import MemS3Fs
from .fs.direct import S3Fs

__all__ = ["Bucket", "Session", "MemS3Fs", "S3Fs"]
__version__ = "0.1.0"
