# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""bucketfs: a seekable, hierarchical file system view over an object store bucket."""

__version__ = "0.1.0"
