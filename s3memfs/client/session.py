# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Session configuration for the bucket adapter.

Credentials and connection settings come from a YAML credentials file keyed
by profile name, for example ``~/.s3memfs/credentials.yaml``::

    default:
      region: eu-west-1
      access_key_id: your_access_key_id
      secret_access_key: your_secret_access_key
    minio:
      endpoint_url: http://localhost:9000

Environment variables override the file: ``S3MEMFS_PROFILE`` selects the
profile, ``S3MEMFS_CREDENTIALS_FILE`` moves the file, ``AWS_REGION`` /
``AWS_DEFAULT_REGION`` set the region and ``S3MEMFS_ENDPOINT_URL`` the
endpoint. Fields left unset fall through to boto3's own credential chain.
"""

import os
from dataclasses import dataclass, fields
from typing import Optional

import boto3
import yaml
from botocore.config import Config as BotoConfig

from ..fs.utils import logger
from .exceptions import ConfigurationError

DEFAULT_REGION = "us-east-1"
DEFAULT_CREDENTIALS_FILE = os.path.join("~", ".s3memfs", "credentials.yaml")


@dataclass
class Session:
    """
    Connection settings for one object store account.

    Attributes:
        region (str): Region of the bucket
        profile (str): Name of the profile the settings were loaded from
        endpoint_url (str): Custom endpoint for S3-compatible stores
        access_key_id (str): Access key; None defers to boto3's credential chain
        secret_access_key (str): Secret key
        connect_timeout (float): Seconds to wait for a connection
        read_timeout (float): Seconds to wait for a response
        max_attempts (int): Attempts per adapter call, including the first
    """
    region: str = DEFAULT_REGION
    profile: Optional[str] = None
    endpoint_url: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    connect_timeout: float = 5.0
    read_timeout: float = 30.0
    max_attempts: int = 3

    @classmethod
    def from_profile(cls, profile: Optional[str] = None, path: Optional[str] = None) -> "Session":
        """
        Load a session from the YAML credentials file.

        Args:
            profile (str, optional): Profile name. Defaults to ``S3MEMFS_PROFILE`` or "default".
            path (str, optional): Credentials file. Defaults to ``S3MEMFS_CREDENTIALS_FILE``
                or ``~/.s3memfs/credentials.yaml``.

        Returns:
            Session: The loaded settings

        Raises:
            ConfigurationError: If the file is malformed or does not contain the profile
        """
        profile = profile or os.environ.get("S3MEMFS_PROFILE", "default")
        path = os.path.expanduser(path or os.environ.get("S3MEMFS_CREDENTIALS_FILE", DEFAULT_CREDENTIALS_FILE))

        settings = {}
        if os.path.exists(path):
            try:
                with open(path) as f:
                    document = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Malformed credentials file {path}: {e}") from e
            if not isinstance(document, dict):
                raise ConfigurationError(f"Credentials file {path} must map profile names to settings")
            if profile not in document:
                raise ConfigurationError(f"Profile {profile} not found in {path}")
            settings = document[profile] or {}
            if not isinstance(settings, dict):
                raise ConfigurationError(f"Profile {profile} in {path} must be a mapping")
            logger.debug(f"Loaded profile {profile} from {path}")
        else:
            logger.debug(f"No credentials file at {path}, using defaults for profile {profile}")

        known = {f.name for f in fields(cls)}
        unknown = set(settings) - known
        if unknown:
            raise ConfigurationError(f"Unknown settings in profile {profile}: {', '.join(sorted(unknown))}")

        session = cls(**settings)
        session.profile = profile

        region = os.environ.get("AWS_REGION") or os.environ.get("AWS_DEFAULT_REGION")
        if region:
            session.region = region
        endpoint_url = os.environ.get("S3MEMFS_ENDPOINT_URL")
        if endpoint_url:
            session.endpoint_url = endpoint_url
        return session

    def client(self):
        """
        Build a boto3 S3 client for these settings.

        botocore's own retries are disabled; retries are handled by the
        adapter's retry decorator.

        Returns:
            botocore.client.S3: The configured client
        """
        config = BotoConfig(
            connect_timeout=self.connect_timeout,
            read_timeout=self.read_timeout,
            retries={"total_max_attempts": 1, "mode": "standard"},
        )
        kwargs = {"config": config, "region_name": self.region}
        if self.endpoint_url:
            kwargs["endpoint_url"] = self.endpoint_url
        if self.access_key_id and self.secret_access_key:
            kwargs["aws_access_key_id"] = self.access_key_id
            kwargs["aws_secret_access_key"] = self.secret_access_key
        return boto3.client("s3", **kwargs)
