# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
FUSE bridge for bucketfs.

This module mounts a bucket as a local directory by serving FUSE requests
from a BucketFs. Each open file handle is backed by one session: a ReadFile
for files opened for reading, a WriteFile for files being written. A
written file is uploaded when its handle is released.

Usage:
    # Create a mount point
    mkdir -p /mnt/my-bucket

    # Mount the bucket
    python -m bucketfs.fs my-bucket /mnt/my-bucket

    # Now you can work with the files as if they were local
    ls /mnt/my-bucket
    cat /mnt/my-bucket/example.txt
"""

from fuse import FUSE, FuseOSError, Operations
import errno
import itertools
import os
import sys
import time
from datetime import datetime
from functools import wraps
from threading import Lock

from bucketfs.client.exceptions import UnsupportedOperationError
from .directory import DirectoryFile
from .files import WriteFile
from .filesystem import BucketFs
from .info import DIR_MODE, FILE_MODE, FileInfo
from .utils import logger, normalize_path, time_function, trace_op
from .mount_utils import unmount, setup_signal_handlers, get_mount_options

BLOCK_SIZE = 4096

def fuse_errors(func):
    """
    Translate exceptions raised by a FUSE operation into FuseOSError.

    OSErrors keep their errno, unsupported operations become ENOTSUP and
    anything else is logged and reported as EIO.
    """
    @wraps(func)
    def wrapper(self, path, *args, **kwargs):
        try:
            return func(self, path, *args, **kwargs)
        except FuseOSError:
            raise
        except UnsupportedOperationError as e:
            logger.debug(f"{func.__name__}: unsupported on {path}: {e}")
            raise FuseOSError(errno.ENOTSUP)
        except OSError as e:
            if e.errno is None:
                logger.error(f"{func.__name__} error for {path}: {e}", exc_info=True)
                raise FuseOSError(errno.EIO)
            raise FuseOSError(e.errno)
        except Exception as e:
            logger.error(f"{func.__name__} error for {path}: {e}", exc_info=True)
            raise FuseOSError(errno.EIO)
    return wrapper

class BucketFuse(Operations):
    """
    FUSE operations served by a BucketFs.

    Attributes:
        fs (BucketFs): Filesystem facade the requests are routed to
        handles (dict): Open file handle number to its session
        writing (dict): Object key to the write session currently producing it
        lock (threading.Lock): Guards handles and writing
    """

    def __init__(self, fs: BucketFs):
        self.fs = fs
        self.handles = {}
        self.writing = {}
        self.lock = Lock()
        self._fh_counter = itertools.count(1)

    def _register(self, session):
        with self.lock:
            fh = next(self._fh_counter)
            self.handles[fh] = session
            if isinstance(session, WriteFile):
                self.writing[session.name] = session
        return fh

    def _session(self, fh):
        with self.lock:
            session = self.handles.get(fh)
        if session is None:
            raise FuseOSError(errno.EBADF)
        return session

    def _is_directory(self, key):
        if not key:
            return True
        try:
            entries, _ = DirectoryFile(self.fs.store, key).read_page(1)
        except FileNotFoundError:
            return False
        return bool(entries)

    def _stat_dict(self, info: FileInfo):
        mtime = info.mod_time.timestamp() if info.mod_time else datetime.now().timestamp()
        if info.is_dir:
            return {
                'st_mode': DIR_MODE,
                'st_nlink': 2,
                'st_size': BLOCK_SIZE,
                'st_blocks': 8,
                'st_uid': os.getuid(),
                'st_gid': os.getgid(),
                'st_atime': mtime,
                'st_mtime': mtime,
                'st_ctime': mtime,
                'st_blksize': BLOCK_SIZE,
            }
        return {
            'st_mode': FILE_MODE,
            'st_nlink': 1,
            'st_size': info.size,
            'st_blocks': (info.size + BLOCK_SIZE - 1) // BLOCK_SIZE,
            'st_uid': os.getuid(),
            'st_gid': os.getgid(),
            'st_atime': mtime,
            'st_mtime': mtime,
            'st_ctime': mtime,
            'st_blksize': BLOCK_SIZE,
        }

    @fuse_errors
    def getattr(self, path, fh=None):
        """
        Get file attributes.

        Files still being written report their buffered size. A path with no
        object is a directory when at least one object sits under its prefix.

        Raises:
            FuseOSError: ENOENT if the path is neither a file nor a directory
        """
        trace_op("getattr", path, fh=fh)
        key = normalize_path(path).rstrip('/')
        with self.lock:
            pending = self.writing.get(key)
        if pending is not None:
            return self._stat_dict(pending.stat())
        if not key:
            return self._stat_dict(FileInfo.directory(key))
        try:
            return self._stat_dict(self.fs.stat(key))
        except FileNotFoundError:
            pass
        if self._is_directory(key):
            return self._stat_dict(FileInfo.directory(key))
        raise FuseOSError(errno.ENOENT)

    @fuse_errors
    def readdir(self, path, fh):
        """
        List the immediate children of a directory.

        The listing is flat, so nested object names are cut at their first
        '/' after the directory prefix and reported once.
        """
        trace_op("readdir", path, fh=fh)
        start_time = time.time()
        directory = DirectoryFile(self.fs.store, path)
        try:
            infos = directory.readdir(-1)
        finally:
            directory.close()
        children = set()
        for info in infos:
            child = info.name[len(directory.prefix):].split('/', 1)[0]
            if child:
                children.add(child)
        time_function("readdir", start_time)
        return ['.', '..'] + sorted(children)

    @fuse_errors
    def open(self, path, flags):
        """
        Open a file and return a handle backed by a read or write session.

        Objects can only be replaced whole, so a write open must truncate.
        Appending or updating in place would upload a buffer missing the
        existing content.

        Raises:
            FuseOSError: ENOTSUP for write opens without O_TRUNC or with O_APPEND
        """
        trace_op("open", path, flags=flags)
        writing = (flags & os.O_ACCMODE) != os.O_RDONLY
        if writing and (flags & os.O_APPEND or not flags & os.O_TRUNC):
            raise UnsupportedOperationError("Objects can only be replaced whole", operation="open")
        session = self.fs.open_file(path, flags)
        if isinstance(session, DirectoryFile):
            session.close()
            key = normalize_path(path)
            raise FuseOSError(errno.EISDIR if self._is_directory(key) else errno.ENOENT)
        return self._register(session)

    @fuse_errors
    def create(self, path, mode, fi=None):
        """
        Create a new file. Nothing is uploaded until the handle is released.
        """
        trace_op("create", path, mode=oct(mode))
        return self._register(self.fs.create(path))

    @fuse_errors
    def read(self, path, size, offset, fh):
        trace_op("read", path, size=size, offset=offset, fh=fh)
        session = self._session(fh)
        session.seek(offset)
        return session.read(size)

    @fuse_errors
    def write(self, path, data, offset, fh):
        trace_op("write", path, size=len(data), offset=offset, fh=fh)
        session = self._session(fh)
        if isinstance(session, WriteFile) and offset > session.stat().size:
            raise UnsupportedOperationError("Writes must not leave gaps", operation="write")
        session.seek(offset)
        return session.write(data)

    @fuse_errors
    def flush(self, path, fh):
        # Uploads happen once, on release.
        return 0

    @fuse_errors
    def release(self, path, fh):
        """
        Close the session behind a handle. Write sessions upload here.
        """
        trace_op("release", path, fh=fh)
        with self.lock:
            session = self.handles.pop(fh, None)
            if isinstance(session, WriteFile) and self.writing.get(session.name) is session:
                del self.writing[session.name]
        if session is not None:
            session.close()
        return 0

    @fuse_errors
    def truncate(self, path, length, fh=None):
        key = normalize_path(path)
        with self.lock:
            pending = self.writing.get(key)
        if pending is not None and pending.stat().size == length:
            return 0
        raise UnsupportedOperationError("Partial writes are not supported", operation="truncate")

    @fuse_errors
    def unlink(self, path):
        self.fs.remove(path)
        return 0

    @fuse_errors
    def mkdir(self, path, mode):
        return self.fs.mkdir(path, mode)

    @fuse_errors
    def rmdir(self, path):
        return self.fs.remove_all(path)

    @fuse_errors
    def rename(self, old, new):
        return self.fs.rename(old, new)

    @fuse_errors
    def chmod(self, path, mode):
        return self.fs.chmod(path, mode)

    @fuse_errors
    def chown(self, path, uid, gid):
        raise UnsupportedOperationError("Object stores have no owners", operation="chown")

    @fuse_errors
    def utimens(self, path, times=None):
        atime, mtime = times if times else (time.time(), time.time())
        return self.fs.chtimes(path, atime, mtime)

    def destroy(self, path):
        """Close any session still open at unmount, uploading pending writes."""
        with self.lock:
            sessions = list(self.handles.values())
            self.handles.clear()
            self.writing.clear()
        for session in sessions:
            try:
                session.close()
            except Exception as e:
                logger.error(f"Error closing {session.name} at unmount: {e}", exc_info=True)

def mount(bucket, mountpoint, project=None, credentials_path=None, foreground=True, allow_other=False):
    """
    Mount a bucket as a local filesystem.

    Args:
        bucket (str): Name of the bucket to mount
        mountpoint (str): Directory to mount the bucket on
        project (str, optional): Google Cloud project
        credentials_path (str, optional): Service account JSON file
        foreground (bool, optional): Run in the foreground. Defaults to True.
        allow_other (bool, optional): Allow other users to access the mount.
    """
    from bucketfs.client.gcs import GCSObjectStore

    logger.info(f"Mounting bucket {bucket} at {mountpoint}")
    start_time = time.time()

    fs = BucketFs(GCSObjectStore(bucket, project=project, credentials_path=credentials_path))
    setup_signal_handlers(mountpoint, unmount)
    try:
        FUSE(BucketFuse(fs), mountpoint, **get_mount_options(foreground, allow_other))
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received, unmounting...")
        unmount(mountpoint)
    except RuntimeError as e:
        logger.error(f"Error during mount: {type(e).__name__}: {e}")
        unmount(mountpoint)
        raise
    finally:
        fs.close()
        time_function("mount", start_time)

def main(argv=None):
    """
    CLI entry point for mounting buckets.

    Usage:
        python -m bucketfs.fs <bucket> <mountpoint>

    Options:
        --project: Google Cloud project (default: $BUCKETFS_PROJECT)
        --credentials: Service account JSON file
            (default: $GOOGLE_APPLICATION_CREDENTIALS via the client library)
        --allow-other: Allow other users to access the mount
            (requires user_allow_other in /etc/fuse.conf)
        --trace: Enable detailed tracing of file operations for debugging
    """
    import argparse
    parser = argparse.ArgumentParser(description='Mount an object store bucket as a local filesystem')
    parser.add_argument('bucket', help='The name of the bucket to mount')
    parser.add_argument('mountpoint', help='The directory to mount the bucket on')
    parser.add_argument('--project', default=os.environ.get('BUCKETFS_PROJECT'),
                        help='Google Cloud project owning the bucket')
    parser.add_argument('--credentials', default=None,
                        help='Path to a service account JSON file')
    parser.add_argument('--allow-other', action='store_true',
                        help='Allow other users to access the mount (requires user_allow_other in /etc/fuse.conf)')
    parser.add_argument('--trace', action='store_true',
                        help='Enable detailed tracing of file operations for debugging')

    args = parser.parse_args(argv)
    logger.info(f"Starting bucketfs CLI with arguments: {sys.argv}")

    # Set trace environment variable if requested
    if args.trace:
        os.environ['BUCKETFS_TRACE_OPS'] = 'true'

    mount(args.bucket, args.mountpoint, project=args.project,
          credentials_path=args.credentials, allow_other=args.allow_other)

if __name__ == '__main__':
    main()
