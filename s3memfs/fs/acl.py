# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Permission bits to access-control level translation.

Object stores have no POSIX modes, so the mode of a file is approximated
by one canned access level when the file is uploaded. The mapping is lossy
and one-way; execute bits are ignored.
"""

import stat

from ..client.types import AccessLevel


def acl_for_mode(mode: int) -> AccessLevel:
    """
    Pick the access level for a permission-bits value.

    The first matching rule wins: other-write, other-read, group-write,
    group-read, otherwise private.

    Args:
        mode (int): Permission bits, e.g. 0o644

    Returns:
        AccessLevel: The canned access level to upload with
    """
    if mode & stat.S_IWOTH:
        return AccessLevel.PUBLIC_READ_WRITE
    if mode & stat.S_IROTH:
        return AccessLevel.PUBLIC_READ
    if mode & stat.S_IWGRP:
        return AccessLevel.BUCKET_OWNER_FULL_CONTROL
    if mode & stat.S_IRGRP:
        return AccessLevel.BUCKET_OWNER_READ
    return AccessLevel.PRIVATE
