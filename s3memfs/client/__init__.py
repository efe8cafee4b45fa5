# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""Object store client: the bucket adapter, its configuration and errors."""
