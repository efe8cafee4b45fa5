# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Mount utilities for the s3memfs FUSE front end.

This module provides functions for unmounting, signal handling and the
option set passed to FUSE.
"""

import signal
import subprocess
import sys
import time

from ..fs.utils import logger, time_function


def unmount(mountpoint):
    """
    Unmount the filesystem using fusermount (Linux).

    Args:
        mountpoint (str): Path where the filesystem is mounted
    """
    logger.info(f"Unmounting filesystem at {mountpoint}")
    start_time = time.time()

    mountpoint = mountpoint.rstrip('/')
    try:
        cp = subprocess.run(["mountpoint", "-q", mountpoint])
        if cp.returncode != 0:
            logger.warning(f"{mountpoint} is not mounted, nothing to unmount.")
            return
        subprocess.run(["fusermount", "-u", mountpoint], check=True)
        logger.info(f"Unmounted {mountpoint} gracefully.")
    except (OSError, subprocess.CalledProcessError) as e:
        logger.error(f"Error during unmounting: {e}")
    finally:
        time_function("unmount", start_time)


def setup_signal_handlers(mountpoint, unmount_func):
    """
    Set up SIGINT and SIGTERM handlers that unmount before exiting.

    Args:
        mountpoint (str): Path where the filesystem is mounted
        unmount_func (callable): Function to call for unmounting

    Returns:
        callable: The signal handler function
    """
    def signal_handler(sig, frame):
        logger.info(f"Signal {sig} received, unmounting...")
        unmount_func(mountpoint)
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    return signal_handler


def get_mount_options(foreground=True, allow_other=False):
    """
    Get mount options for FUSE.

    Attribute and entry caching is kept short because the namespace can
    change underneath the kernel through other MemS3Fs users.

    Args:
        foreground (bool, optional): Run in foreground. Defaults to True.
        allow_other (bool, optional): Allow other users to access the mount.
            Requires 'user_allow_other' in /etc/fuse.conf. Defaults to False.

    Returns:
        dict: Dictionary of mount options
    """
    options = {
        'foreground': foreground,
        'default_permissions': True,
        'rw': True,
        'big_writes': True,
        'entry_timeout': 1,
        'attr_timeout': 1,
        'negative_timeout': 0,
    }

    if allow_other:
        options['allow_other'] = True

    return options
