# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""In-memory namespace, buffered remote files and the direct variant."""
