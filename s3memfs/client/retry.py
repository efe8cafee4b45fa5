# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Retry Module.

This module provides a retry decorator with exponential backoff for bucket
adapter operations. It handles throttling, transient server errors and
network issues by retrying the failed call with increasing delays, and it
translates every botocore failure into the closed s3memfs error kinds.

Functions:
    retry: Decorator for retrying adapter methods with exponential backoff.
    _convert_client_error: Helper function to convert botocore errors to s3memfs exceptions.
"""
import time
from functools import wraps
from typing import Any, Callable, Optional

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    NoCredentialsError,
    ReadTimeoutError,
)

from ..fs.utils import logger
from .exceptions import ConfigurationError, NotFoundError, RemoteFailureError, S3FsError

DEFAULT_MAX_ATTEMPTS = 3

NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}

RETRYABLE_ERROR_CODES = {
    "Throttling",
    "ThrottlingException",
    "SlowDown",
    "RequestTimeout",
    "InternalError",
    "ServiceUnavailable",
    "500",
    "502",
    "503",
    "504",
}

RETRYABLE_TRANSPORT_ERRORS = (
    EndpointConnectionError,
    ConnectionClosedError,
    ConnectTimeoutError,
    ReadTimeoutError,
)

# Adapter method name -> operation tag used in error codes
OPERATIONS = {
    "head_object": "HEAD",
    "get_object": "GET",
    "get_object_reader": "GET",
    "put_object": "PUT",
    "delete_object": "DELETE",
    "delete_objects": "DELETE",
    "list_objects": "LIST",
    "copy_object": "COPY",
    "verify": "HEAD",
}


def _error_code(e: ClientError) -> str:
    return str(e.response.get("Error", {}).get("Code", ""))


def _convert_client_error(e: Exception, operation: str = None, key: str = None) -> S3FsError:
    """
    Convert botocore errors to s3memfs errors.

    Only the structured error code is inspected, never the message text.

    Args:
        e (Exception): The botocore error to convert.
        operation (str, optional): The operation being performed. Defaults to None.
        key (str, optional): The object key involved. Defaults to None.

    Returns:
        S3FsError: The converted error.
    """
    if isinstance(e, ClientError):
        code = _error_code(e)
        if code in NOT_FOUND_CODES:
            return NotFoundError(f"Object {key} does not exist", path=key, operation=operation)
        return RemoteFailureError(f"{code or 'ClientError'}: {e}", path=key, operation=operation)
    if isinstance(e, NoCredentialsError):
        return ConfigurationError(f"No credentials available: {e}")
    return RemoteFailureError(f"{type(e).__name__}: {e}", path=key, operation=operation)


def _is_retryable(e: Exception) -> bool:
    if isinstance(e, ClientError):
        return _error_code(e) in RETRYABLE_ERROR_CODES
    return isinstance(e, RETRYABLE_TRANSPORT_ERRORS)


def retry(
    max_attempts: Optional[int] = None,
    initial_backoff: float = 0.1,
    max_backoff: float = 5.0,
    backoff_multiplier: float = 2.0,
) -> Callable:
    """
    Decorator for retrying an adapter method with exponential backoff.

    Retryable failures (throttling, 5xx, dropped or timed out connections)
    are retried; everything else is converted and raised immediately.

    Args:
        max_attempts (int, optional): Maximum number of attempts. Defaults to the
            ``max_attempts`` attribute of the adapter instance, or 3.
        initial_backoff (float): Initial backoff time in seconds. Defaults to 0.1.
        max_backoff (float): Maximum backoff time in seconds. Defaults to 5.0.
        backoff_multiplier (float): Multiplier for exponential backoff. Defaults to 2.0.

    Returns:
        Callable: A decorator that wraps the function.
    """
    def decorator(func: Callable) -> Callable:
        operation = OPERATIONS.get(func.__name__)

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            """
            Executes the function with retry logic and exponential backoff.

            Raises:
                S3FsError: If the call fails with a non-retryable error or all attempts fail.
            """
            attempts = max_attempts
            if attempts is None:
                attempts = getattr(args[0], "max_attempts", None) if args else None
            attempts = max(1, attempts or DEFAULT_MAX_ATTEMPTS)

            key = kwargs.get("key")
            if key is None and len(args) > 1 and isinstance(args[1], str):
                key = args[1]

            last_exception = None
            backoff = initial_backoff
            for attempt in range(attempts):
                try:
                    return func(*args, **kwargs)
                except (ClientError, BotoCoreError) as e:
                    last_exception = e
                    if not _is_retryable(e):
                        logger.debug(f"Non-retryable error during {func.__name__}({key}): {e}")
                        raise _convert_client_error(e, operation, key) from e

                    if attempt < attempts - 1:
                        logger.warning(f"Retryable error during {func.__name__}({key}). "
                                       f"Attempt {attempt + 1}/{attempts}. Retrying after {backoff:.2f}s...")
                        time.sleep(backoff)
                        backoff = min(backoff * backoff_multiplier, max_backoff)

            logger.error(f"{func.__name__}({key}) failed after {attempts} attempts: {last_exception}")
            raise _convert_client_error(last_exception, operation, key) from last_exception

        return wrapper
    return decorator
