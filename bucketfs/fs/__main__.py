# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Command-line entry point for mounting a bucket.

Usage:
    python -m bucketfs.fs <bucket> <mountpoint> [--project P] [--credentials FILE]
"""
from .fuse_mount import main

if __name__ == '__main__':
    main()
