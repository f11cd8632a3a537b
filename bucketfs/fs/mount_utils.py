# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Mount utilities for the bucketfs FUSE bridge.

This module provides functions for mounting and unmounting buckets
as local filesystems using FUSE.
"""

import sys
import signal
import subprocess
import time
from .utils import logger, time_function

# Attribute and entry cache lifetime in seconds. Kept short because other
# clients may change the bucket at any time.
ATTR_TIMEOUT = 1.0

def unmount(mountpoint):
    """
    Unmount the filesystem using fusermount (Linux).

    Args:
        mountpoint (str): Path where the filesystem is mounted

    Returns:
        bool: True if the filesystem was unmounted
    """
    logger.info(f"Unmounting filesystem at {mountpoint}")
    start_time = time.time()

    # Normalize mountpoint (remove trailing slash)
    mountpoint = mountpoint.rstrip('/')
    try:
        # Check if the mountpoint is mounted
        cp = subprocess.run(["mountpoint", "-q", mountpoint])
        if cp.returncode != 0:
            logger.warning(f"{mountpoint} is not mounted, nothing to unmount.")
            return False

        subprocess.run(["fusermount", "-u", mountpoint], check=True)
        logger.info(f"Unmounted {mountpoint} gracefully.")
        return True
    except (OSError, subprocess.CalledProcessError) as e:
        logger.error(f"Error during unmounting: {e}")
        return False
    finally:
        time_function("unmount", start_time)

def setup_signal_handlers(mountpoint, unmount_func):
    """
    Set up signal handlers for graceful unmounting.

    Installs handlers for SIGINT and SIGTERM so the filesystem is
    unmounted when the process is terminated.

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
    Get standard mount options for FUSE.

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
        # Writes replace the whole object, so open(O_TRUNC) must not
        # turn into a separate truncate call.
        'atomic_o_trunc': True,
        'entry_timeout': ATTR_TIMEOUT,
        'negative_timeout': ATTR_TIMEOUT,
        'attr_timeout': ATTR_TIMEOUT,
    }

    # Only add allow_other if explicitly requested
    if allow_other:
        options['allow_other'] = True

    return options
