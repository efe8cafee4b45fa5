# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""FUSE front end mounting a bucket through MemS3Fs."""
