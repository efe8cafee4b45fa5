from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class AccessLevel(Enum):
    """Canned access-control levels understood by the object store."""
    PRIVATE = "private"
    PUBLIC_READ = "public-read"
    PUBLIC_READ_WRITE = "public-read-write"
    BUCKET_OWNER_READ = "bucket-owner-read"
    BUCKET_OWNER_FULL_CONTROL = "bucket-owner-full-control"


@dataclass
class HeadObjectOutput:
    """Metadata for an object."""
    etag: str
    content_length: int
    last_modified: Optional[datetime]
    content_type: Optional[str] = None


@dataclass
class ObjectSummary:
    """One entry of a listing."""
    key: str
    size: int
    etag: str = ""
    last_modified: Optional[datetime] = None


@dataclass
class ListObjectsOptions:
    """Options for listing objects."""
    prefix: Optional[str] = None
    delimiter: Optional[str] = None
    continuation_token: Optional[str] = None
    max_keys: Optional[int] = None


@dataclass
class ListObjectsOutput:
    """A single page of a listing."""
    entries: List[ObjectSummary] = field(default_factory=list)
    is_truncated: bool = False
    next_token: Optional[str] = None
