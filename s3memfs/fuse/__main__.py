# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""Entry point for ``python -m s3memfs.fuse <bucket> <mountpoint>``."""

from .fuse_mount import main

if __name__ == '__main__':
    main()
