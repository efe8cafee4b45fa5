# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Logging for s3memfs.

Everything logs through the ``S3MemFs`` logger configured here. Two
environment variables control it: ``S3MEMFS_LOG_LEVEL`` sets the level
(INFO by default) and a truthy ``S3MEMFS_TRACE_OPS`` turns on a DEBUG
line for every filesystem call. Elapsed times of remote-facing calls are
logged at DEBUG, so closes and renames stay quiet at the default level.
"""

import logging
import os
import time

TRACE_OPERATIONS = os.environ.get('S3MEMFS_TRACE_OPS', '').lower() in ('true', '1', 'yes')

LOG_LEVEL = os.environ.get('S3MEMFS_LOG_LEVEL', 'INFO').upper()

logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s] - %(message)s'
)
logger = logging.getLogger('S3MemFs')
logger.setLevel(LOG_LEVEL)


def set_tracing(enabled: bool = True):
    """
    Switch per-operation tracing at runtime.

    Enabling it also lowers the logger to DEBUG so the traces are emitted.

    Args:
        enabled (bool, optional): Whether to trace. Defaults to True.
    """
    global TRACE_OPERATIONS
    TRACE_OPERATIONS = enabled
    if enabled:
        logger.setLevel(logging.DEBUG)


def time_function(func_name, start_time):
    """
    Log how long a remote-facing call took.

    Args:
        func_name (str): Name of the call being timed
        start_time (float): Start time from time.time()

    Returns:
        float: Elapsed time in seconds
    """
    elapsed = time.time() - start_time
    logger.debug(f"{func_name} completed in {elapsed:.4f} seconds")
    return elapsed


def trace_op(operation, path, **details):
    """
    Emit a DEBUG trace of a filesystem call when tracing is on.

    Args:
        operation (str): The call, e.g. "write"
        path (str): The path it concerns
        **details: Extra key=value pairs to include
    """
    if TRACE_OPERATIONS:
        detail_str = ', '.join(f"{k}={v}" for k, v in details.items())
        logger.debug(f"TRACE: {operation} on {path} {detail_str}")
