# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
boto3-backed bucket adapter.

:class:`Bucket` binds one S3 (or S3-compatible) bucket and implements the
:class:`~s3memfs.client.base.ObjectStore` contract on top of a boto3 client.
Every call is wrapped in the retry decorator, which also turns botocore
exceptions into s3memfs errors.
"""

import time
from typing import BinaryIO, Iterable, Optional

from botocore.exceptions import ClientError

from ..fs.utils import logger, time_function
from .base import ObjectStore
from .exceptions import RemoteFailureError
from .retry import NOT_FOUND_CODES, _error_code, retry
from .session import Session
from .types import (
    AccessLevel,
    HeadObjectOutput,
    ListObjectsOptions,
    ListObjectsOutput,
    ObjectSummary,
)

# Upper bound on keys per DeleteObjects request
DELETE_BATCH_SIZE = 1000


class Bucket(ObjectStore):
    """
    A single bucket reached through boto3.

    Attributes:
        name (str): Name of the bucket
        session (Session): Connection settings
        client: boto3 S3 client
    """

    def __init__(self, name: str, session: Optional[Session] = None, client=None):
        """
        Bind a bucket.

        Args:
            name (str): Name of the bucket
            session (Session, optional): Connection settings. Defaults to ``Session.from_profile()``.
            client (optional): Prebuilt boto3 S3 client. Defaults to one built from the session.
        """
        self.name = name
        self.session = session or Session.from_profile()
        self.client = client or self.session.client()
        logger.debug(f"Bound bucket {name} in region {self.session.region}")

    @property
    def max_attempts(self) -> int:
        return self.session.max_attempts

    @retry()
    def verify(self) -> None:
        """
        Check that the bucket exists and is reachable.

        Raises:
            NotFoundError: If the bucket does not exist
            RemoteFailureError: If it cannot be accessed
        """
        start_time = time.time()
        self.client.head_bucket(Bucket=self.name)
        time_function("verify", start_time)

    @retry()
    def head_object(self, key: str) -> HeadObjectOutput:
        resp = self.client.head_object(Bucket=self.name, Key=key)
        return HeadObjectOutput(
            etag=resp.get("ETag", ""),
            content_length=resp.get("ContentLength", 0),
            last_modified=resp.get("LastModified"),
            content_type=resp.get("ContentType"),
        )

    @retry()
    def get_object(self, key: str) -> bytes:
        resp = self.client.get_object(Bucket=self.name, Key=key)
        body = resp["Body"]
        try:
            return body.read()
        finally:
            body.close()

    @retry()
    def get_object_reader(self, key: str) -> BinaryIO:
        resp = self.client.get_object(Bucket=self.name, Key=key)
        return resp["Body"]

    @retry()
    def put_object(self, key: str, data: bytes, content_type: Optional[str] = None,
                   access_level: AccessLevel = AccessLevel.PRIVATE) -> None:
        kwargs = {
            "Bucket": self.name,
            "Key": key,
            "Body": data,
            "ACL": access_level.value,
        }
        if content_type:
            kwargs["ContentType"] = content_type
        self.client.put_object(**kwargs)

    @retry()
    def delete_object(self, key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.name, Key=key)
        except ClientError as e:
            if _error_code(e) in NOT_FOUND_CODES:
                logger.debug(f"delete_object: {key} already absent")
                return
            raise

    @retry()
    def delete_objects(self, keys: Iterable[str]) -> None:
        """
        Delete keys in batches of at most 1000.

        Raises:
            RemoteFailureError: If the store reports per-key errors
        """
        keys = list(keys)
        for i in range(0, len(keys), DELETE_BATCH_SIZE):
            batch = keys[i:i + DELETE_BATCH_SIZE]
            resp = self.client.delete_objects(
                Bucket=self.name,
                Delete={"Objects": [{"Key": k} for k in batch], "Quiet": True},
            )
            errors = [err for err in resp.get("Errors", []) if err.get("Code") not in NOT_FOUND_CODES]
            if errors:
                failed = ", ".join(f"{err.get('Key')} ({err.get('Code')})" for err in errors)
                raise RemoteFailureError(f"Failed to delete {len(errors)} objects: {failed}", operation="DELETE")
            logger.debug(f"Deleted batch of {len(batch)} objects from {self.name}")

    @retry()
    def list_objects(self, options: Optional[ListObjectsOptions] = None) -> ListObjectsOutput:
        options = options or ListObjectsOptions()
        kwargs = {"Bucket": self.name}
        if options.prefix:
            kwargs["Prefix"] = options.prefix
        if options.delimiter:
            kwargs["Delimiter"] = options.delimiter
        if options.continuation_token:
            kwargs["ContinuationToken"] = options.continuation_token
        if options.max_keys:
            kwargs["MaxKeys"] = options.max_keys

        resp = self.client.list_objects_v2(**kwargs)
        entries = [
            ObjectSummary(
                key=obj["Key"],
                size=obj.get("Size", 0),
                etag=obj.get("ETag", ""),
                last_modified=obj.get("LastModified"),
            )
            for obj in resp.get("Contents", [])
        ]
        return ListObjectsOutput(
            entries=entries,
            is_truncated=resp.get("IsTruncated", False),
            next_token=resp.get("NextContinuationToken"),
        )

    @retry()
    def copy_object(self, key: str, source_key: str,
                    access_level: AccessLevel = AccessLevel.PRIVATE) -> None:
        self.client.copy_object(
            Bucket=self.name,
            Key=key,
            CopySource={"Bucket": self.name, "Key": source_key},
            ACL=access_level.value,
        )
