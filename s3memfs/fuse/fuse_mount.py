# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
FUSE implementation for s3memfs.

This module mounts a bucket as a local filesystem. Namespace operations go
to a :class:`~s3memfs.fs.memfs.MemS3Fs`, so directories are fabricated in
memory and file contents are uploaded when a file is released, and only if
they changed.

Usage:
    # Mount the bucket
    python -m s3memfs.fuse my-bucket /mnt/my-bucket

    # Now you can work with the files as if they were local
    ls /mnt/my-bucket
    cat /mnt/my-bucket/example.txt
"""

import errno
import os
import time
from datetime import datetime, timezone

from fuse import FUSE, FuseOSError, Operations

from ..client.bucket import Bucket
from ..client.exceptions import ErrorKind, S3FsError
from ..client.session import Session
from ..fs.memfs import MemS3Fs
from ..fs.utils import logger, set_tracing, time_function, trace_op
from .mount_utils import get_mount_options, setup_signal_handlers, unmount

ERRNO_BY_KIND = {
    ErrorKind.NOT_FOUND: errno.ENOENT,
    ErrorKind.ALREADY_EXISTS: errno.EEXIST,
    ErrorKind.DESTINATION_EXISTS: errno.EEXIST,
    ErrorKind.CLOSED_HANDLE: errno.EBADF,
    ErrorKind.OUT_OF_RANGE: errno.EINVAL,
    ErrorKind.UNSUPPORTED: errno.ENOTSUP,
}

BLOCK_SIZE = 4096


def _fuse_error(e: S3FsError) -> FuseOSError:
    return FuseOSError(ERRNO_BY_KIND.get(e.kind, errno.EIO))


class S3MemFuse(Operations):
    """
    FUSE operations backed by a MemS3Fs.

    Every open handle of a path shares that path's node, so the file handle
    returned to the kernel is always 0 and reads and writes are positional.

    Attributes:
        fs (MemS3Fs): The filesystem being exposed
    """

    def __init__(self, fs: MemS3Fs):
        self.fs = fs

    def getattr(self, path, fh=None):
        """
        Get file attributes.

        Raises:
            FuseOSError: ENOENT if the path does not exist
        """
        trace_op("getattr", path, fh=fh)
        try:
            info = self.fs.stat(path)
        except S3FsError as e:
            raise _fuse_error(e)

        mtime = info.mod_time.timestamp()
        return {
            'st_mode': info.st_mode,
            'st_nlink': 2 if info.is_dir else 1,
            'st_size': info.size,
            'st_blocks': (info.size + BLOCK_SIZE - 1) // BLOCK_SIZE,
            'st_blksize': BLOCK_SIZE,
            'st_atime': mtime,
            'st_mtime': mtime,
            'st_ctime': mtime,
            'st_uid': os.getuid(),
            'st_gid': os.getgid(),
        }

    def readdir(self, path, fh):
        """
        List directory contents.

        Returns:
            list: ".", ".." and the names of the directory's children
        """
        trace_op("readdir", path, fh=fh)
        try:
            node = self.fs.open(path)
            if not node.is_dir:
                raise FuseOSError(errno.ENOTDIR)
            return ['.', '..'] + node.readdirnames(-1)
        except S3FsError as e:
            raise _fuse_error(e)

    def create(self, path, mode, fi=None):
        trace_op("create", path, mode=oct(mode))
        try:
            self.fs.create(path, mode & 0o7777)
        except S3FsError as e:
            raise _fuse_error(e)
        return 0

    def open(self, path, flags):
        trace_op("open", path, flags=flags)
        try:
            self.fs.open_file(path, flags)
        except S3FsError as e:
            raise _fuse_error(e)
        return 0

    def read(self, path, size, offset, fh):
        trace_op("read", path, size=size, offset=offset)
        try:
            return self.fs.open(path).read_at(size, offset)
        except S3FsError as e:
            logger.error(f"read: Error reading {path}: {e}")
            raise _fuse_error(e)

    def write(self, path, data, offset, fh):
        trace_op("write", path, offset=offset, size=len(data))
        try:
            return self.fs.open(path).write_at(data, offset)
        except S3FsError as e:
            logger.error(f"write: Error writing {path}: {e}")
            raise _fuse_error(e)

    def truncate(self, path, length, fh=None):
        trace_op("truncate", path, length=length)
        try:
            self.fs.open(path).truncate(length)
        except S3FsError as e:
            raise _fuse_error(e)
        return 0

    def release(self, path, fh):
        """
        Close the file, uploading its content if it changed.

        Raises:
            FuseOSError: EIO if the upload fails
        """
        trace_op("release", path, fh=fh)
        start_time = time.time()
        try:
            self.fs.open(path).close()
        except S3FsError as e:
            logger.error(f"release: Error flushing {path}: {e}", exc_info=True)
            raise _fuse_error(e)
        finally:
            time_function("release", start_time)
        return 0

    def flush(self, path, fh):
        return 0

    def fsync(self, path, datasync, fh):
        try:
            self.fs.open(path).sync()
        except S3FsError as e:
            raise _fuse_error(e)
        return 0

    def unlink(self, path):
        trace_op("unlink", path)
        try:
            if self.fs.stat(path).is_dir:
                raise FuseOSError(errno.EISDIR)
            self.fs.remove(path)
        except S3FsError as e:
            raise _fuse_error(e)
        return 0

    def mkdir(self, path, mode):
        trace_op("mkdir", path, mode=oct(mode))
        try:
            try:
                self.fs.stat(path)
            except S3FsError as e:
                if e.kind is not ErrorKind.NOT_FOUND:
                    raise
            else:
                raise FuseOSError(errno.EEXIST)
            self.fs.mkdir(path, mode & 0o7777)
        except S3FsError as e:
            raise _fuse_error(e)
        return 0

    def rmdir(self, path):
        trace_op("rmdir", path)
        try:
            node = self.fs.open(path)
            if not node.is_dir:
                raise FuseOSError(errno.ENOTDIR)
            if node.children:
                raise FuseOSError(errno.ENOTEMPTY)
            self.fs.remove(path)
        except S3FsError as e:
            raise _fuse_error(e)
        return 0

    def rename(self, old, new):
        """
        Rename a file or directory.

        A regular file at the target is replaced, as POSIX rename does.
        """
        trace_op("rename", new, old=old)
        try:
            source = self.fs.stat(old)
            try:
                target = self.fs.stat(new)
            except S3FsError as e:
                if e.kind is not ErrorKind.NOT_FOUND:
                    raise
                target = None
            if target is not None:
                if target.is_dir or source.is_dir:
                    raise FuseOSError(errno.EEXIST)
                self.fs.remove(new)
            self.fs.rename(old, new)
        except S3FsError as e:
            logger.error(f"rename: Error renaming {old} to {new}: {e}")
            raise _fuse_error(e)
        return 0

    def chmod(self, path, mode):
        try:
            self.fs.chmod(path, mode)
        except S3FsError as e:
            raise _fuse_error(e)
        return 0

    def chown(self, path, uid, gid):
        # Objects have no owner beyond the bucket's
        return 0

    def utimens(self, path, times=None):
        now = time.time()
        atime, mtime = times if times else (now, now)
        try:
            self.fs.chtimes(
                path,
                datetime.fromtimestamp(atime, timezone.utc),
                datetime.fromtimestamp(mtime, timezone.utc),
            )
        except S3FsError as e:
            raise _fuse_error(e)
        return 0

    def statfs(self, path):
        # Buckets are unbounded; report a large, fixed capacity
        return {
            'f_bsize': BLOCK_SIZE,
            'f_frsize': BLOCK_SIZE,
            'f_blocks': 1024 * 1024 * 1024,
            'f_bfree': 1024 * 1024 * 1024,
            'f_bavail': 1024 * 1024 * 1024,
            'f_files': 1000000,
            'f_ffree': 1000000,
            'f_favail': 1000000,
            'f_namemax': 1024,
        }


def mount(bucket: str, mountpoint: str, foreground: bool = True, allow_other: bool = False,
          profile: str = None, preload: bool = False):
    """
    Mount a bucket at the specified mountpoint.

    Args:
        bucket (str): Name of the bucket to mount
        mountpoint (str): Local path where the filesystem should be mounted
        foreground (bool, optional): Run in foreground. Defaults to True.
        allow_other (bool, optional): Allow other users to access the mount.
            Requires 'user_allow_other' in /etc/fuse.conf. Defaults to False.
        profile (str, optional): Credentials profile. Defaults to ``S3MEMFS_PROFILE`` or "default".
        preload (bool, optional): Register every existing object before mounting. Defaults to False.

    Raises:
        ValueError: If the bucket cannot be accessed
    """
    logger.info(f"Mounting bucket {bucket} at {mountpoint}")
    start_time = time.time()

    store = Bucket(bucket, Session.from_profile(profile))
    try:
        store.verify()
    except S3FsError as e:
        logger.error(f"Failed to access bucket {bucket}: {e}")
        raise ValueError(f"Failed to access bucket {bucket}: {e}") from e

    fs = MemS3Fs(store)
    if preload:
        fs.load_remote()

    if not os.path.exists(mountpoint):
        logger.info(f"Mountpoint {mountpoint} does not exist, creating it...")
        os.makedirs(mountpoint, mode=0o755)

    options = get_mount_options(foreground, allow_other)
    setup_signal_handlers(mountpoint, unmount)

    try:
        logger.info(f"Starting FUSE mount with options: {options}")
        FUSE(S3MemFuse(fs), mountpoint, nothreads=False, **options)
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received, unmounting...")
        unmount(mountpoint)
    finally:
        time_function("mount", start_time)


def main():
    """
    CLI entry point for mounting buckets.

    Usage:
        python -m s3memfs.fuse <bucket> <mountpoint>

    Options:
        --allow-other: Allow other users to access the mount
            (requires user_allow_other in /etc/fuse.conf)
        --trace: Enable detailed tracing of file operations for debugging
        --profile: Credentials profile to use
        --preload: Register every existing object before mounting
    """
    import argparse
    parser = argparse.ArgumentParser(description='Mount a bucket as a local filesystem')
    parser.add_argument('bucket', help='The name of the bucket to mount')
    parser.add_argument('mountpoint', help='The directory to mount the bucket on')
    parser.add_argument('--allow-other', action='store_true',
                        help='Allow other users to access the mount (requires user_allow_other in /etc/fuse.conf)')
    parser.add_argument('--trace', action='store_true',
                        help='Enable detailed tracing of file operations for debugging')
    parser.add_argument('--profile', default=None,
                        help='Credentials profile from ~/.s3memfs/credentials.yaml')
    parser.add_argument('--preload', action='store_true',
                        help='List the bucket and register existing objects before mounting')

    args = parser.parse_args()

    if args.trace:
        set_tracing(True)
        logger.info("Detailed operation tracing enabled")

    mount(args.bucket, args.mountpoint, allow_other=args.allow_other,
          profile=args.profile, preload=args.preload)


if __name__ == '__main__':
    main()
