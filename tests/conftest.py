import pytest
import os
from bucketfs.client import InMemoryObjectStore

def pytest_configure(config):
    """Configure test environment."""
    # Verbose logging for test runs
    os.environ.setdefault("BUCKETFS_LOG_LEVEL", "DEBUG")

@pytest.fixture
def store():
    """Fresh in-memory object store."""
    return InMemoryObjectStore(bucket="test-bucket")

@pytest.fixture
def fs(store):
    """Filesystem facade over the in-memory store."""
    from bucketfs.fs import BucketFs
    return BucketFs(store)

def put(store, name, data):
    """Commit an object directly through the store's writer."""
    writer = store.open_writer(name)
    writer.write(data)
    writer.close()

@pytest.fixture
def put_object(store):
    """Helper to seed objects without going through the filesystem."""
    def _put(name, data=b"quick create"):
        put(store, name, data)
    return _put
