# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Content fingerprinting for write avoidance.

The object store reports an entity tag for every object. For objects
uploaded in a single request that tag is the MD5 digest of the content,
so comparing it with the digest of a local buffer tells whether an upload
would change anything. Multipart uploads carry a ``<digest>-<parts>`` tag
that never matches, and such objects are always rewritten.
"""

import hashlib


def fingerprint(data) -> str:
    """
    Compute the content fingerprint of a buffer.

    Args:
        data (bytes): The content

    Returns:
        str: Lowercase hex MD5 digest, in the same form as an entity tag
    """
    return hashlib.md5(bytes(data)).hexdigest()


def normalize_etag(etag: str) -> str:
    """
    Strip quoting and weak-validator markers from an entity tag.

    Args:
        etag (str): Entity tag as reported by the store, e.g. ``"9a0364b9..."``

    Returns:
        str: The bare, lowercase tag
    """
    if not etag:
        return ""
    e = etag.strip()
    if e.startswith("W/"):
        e = e[2:]
    return e.strip('"').lower()


def matches(data, etag: str) -> bool:
    """
    Tell whether a buffer's fingerprint equals a remote entity tag.

    Args:
        data (bytes): Local content
        etag (str): Remote entity tag

    Returns:
        bool: True if uploading ``data`` would not change the remote object
    """
    remote = normalize_etag(etag)
    return bool(remote) and fingerprint(data) == remote
