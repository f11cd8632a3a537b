# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Utility functions for the bucketfs filesystem.

This module provides logging configuration and utility functions
shared by the filesystem adapters and the FUSE bridge.
"""

import logging
import time
import os

LOG_LEVEL = os.environ.get('BUCKETFS_LOG_LEVEL', 'INFO').upper()

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s] - %(message)s'
)
logger = logging.getLogger('BucketFs')
logger.setLevel(LOG_LEVEL)

def normalize_path(path):
    """
    Convert a filesystem path to an object key.

    Leading slashes are dropped, so '/a/b.txt' and 'a/b.txt' name the
    same object and '/' becomes the bucket root ''.

    Args:
        path (str): Filesystem path

    Returns:
        str: Object key
    """
    return path.lstrip('/')

def time_function(func_name, start_time):
    """
    Helper function for timing operations.
    
    Calculates and logs the elapsed time for a function call.
    
    Args:
        func_name (str): Name of the function being timed
        start_time (float): Start time from time.time()
        
    Returns:
        float: Elapsed time in seconds
    """
    elapsed = time.time() - start_time
    logger.debug(f"{func_name} completed in {elapsed:.4f} seconds")
    return elapsed 

def trace_op(operation, path, **details):
    """
    Trace a file operation for debugging purposes.
    
    This function logs detailed information about file operations
    when the BUCKETFS_TRACE_OPS environment variable is set.
    
    Args:
        operation (str): The file operation being performed
        path (str): The path of the file being operated on
        **details: Additional details to log
    """
    if os.environ.get('BUCKETFS_TRACE_OPS', '').lower() in ('true', '1', 'yes'):
        detail_str = ', '.join(f"{k}={v}" for k, v in details.items())
        logger.debug(f"TRACE: {operation} on {path} {detail_str}")
