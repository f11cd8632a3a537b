import io
import pytest
from bucketfs.client import InMemoryObjectStore, ObjectNotFoundError, StorageError, UnsupportedOperationError
from bucketfs.fs.buffer import SeekableBuffer
from bucketfs.fs.files import ReadFile, WriteFile, _SessionFile
from conftest import put

class RecordingSink:
    """Store sink double that records what it receives."""
    def __init__(self, fail_write=False, fail_close=False):
        self.chunks = []
        self.close_calls = 0
        self.fail_write = fail_write
        self.fail_close = fail_close

    @property
    def data(self):
        return b"".join(self.chunks)

    @property
    def closed(self):
        return self.close_calls > 0

    def write(self, data):
        if self.fail_write:
            raise StorageError("upload interrupted")
        self.chunks.append(bytes(data))
        return len(data)

    def close(self):
        self.close_calls += 1
        if self.fail_close:
            raise StorageError("finalize failed")

class BrokenReopenBuffer(SeekableBuffer):
    def open(self):
        raise OSError("cannot reopen buffer")

class TrackingStore(InMemoryObjectStore):
    """In-memory store that remembers the sources it handed out."""
    def __init__(self, source_factory=None, attributes_error=None):
        super().__init__()
        self.sources = []
        self.source_factory = source_factory
        self.attributes_error = attributes_error

    def open_reader(self, path, timeout=None):
        source = super().open_reader(path, timeout=timeout)
        if self.source_factory:
            source = self.source_factory(source)
        self.sources.append(source)
        return source

    def get_attributes(self, path, timeout=None):
        if self.attributes_error is not None:
            raise self.attributes_error
        return super().get_attributes(path, timeout=timeout)

class FailingSource(io.BytesIO):
    def read(self, size=-1):
        if self.tell() > 0:
            raise StorageError("connection reset")
        return super().read(1)

def test_session_base_requires_close():
    with pytest.raises(TypeError):
        _SessionFile()

# --- WriteFile ---

def test_write_is_local_until_close():
    sink = RecordingSink()
    f = WriteFile("a.txt", SeekableBuffer("a.txt"), sink)
    f.write(b"hello ")
    f.write_string("world")
    assert sink.chunks == [], "Writes must not reach the store before close"
    assert f.stat().size == 11
    f.close()
    assert sink.data == b"hello world"
    assert sink.close_calls == 1
    assert f.closed

def test_write_seek_overwrites_buffer():
    sink = RecordingSink()
    f = WriteFile("a.txt", SeekableBuffer("a.txt"), sink)
    f.write(b"hello world")
    f.seek(0)
    f.write(b"J")
    assert f.tell() == 1
    f.close()
    assert sink.data == b"Jello world"

def test_close_is_idempotent():
    sink = RecordingSink()
    f = WriteFile("a.txt", SeekableBuffer("a.txt"), sink)
    f.write(b"once")
    f.close()
    f.close()
    assert sink.data == b"once"
    assert sink.close_calls == 1

def test_write_after_close_fails():
    f = WriteFile("a.txt", SeekableBuffer("a.txt"), RecordingSink())
    f.close()
    with pytest.raises(ValueError):
        f.write(b"late")

def test_copy_failure_raises_and_still_closes_sink():
    sink = RecordingSink(fail_write=True)
    f = WriteFile("a.txt", SeekableBuffer("a.txt"), sink)
    f.write(b"data")
    with pytest.raises(StorageError):
        f.close()
    assert sink.closed, "Sink must be released even when the copy fails"

def test_sink_close_failure_is_logged_not_raised():
    sink = RecordingSink(fail_close=True)
    f = WriteFile("a.txt", SeekableBuffer("a.txt"), sink)
    f.write(b"data")
    f.close()
    assert sink.data == b"data"
    assert isinstance(f.sink_error, StorageError)

def test_buffer_failure_skips_copy():
    sink = RecordingSink()
    f = WriteFile("a.txt", BrokenReopenBuffer("a.txt"), sink)
    f.write(b"data")
    with pytest.raises(OSError):
        f.close()
    assert sink.chunks == []
    assert sink.closed

def test_empty_write_session_uploads_empty_object(store):
    f = WriteFile("empty.txt", SeekableBuffer("empty.txt"), store.open_writer("empty.txt"))
    f.close()
    assert store.get_attributes("empty.txt").size == 0

def test_write_file_rejects_reads():
    f = WriteFile("a.txt", SeekableBuffer("a.txt"), RecordingSink())
    with pytest.raises(UnsupportedOperationError):
        f.read()
    with pytest.raises(NotADirectoryError):
        f.readdir(-1)

def test_write_file_context_manager_flushes():
    sink = RecordingSink()
    with WriteFile("a.txt", SeekableBuffer("a.txt"), sink) as f:
        f.write(b"managed")
    assert sink.data == b"managed"

# --- ReadFile ---

def test_read_file_materializes_object(store):
    put(store, "a/b.txt", b"hello world")
    f = ReadFile.open(store, "a/b.txt")
    assert f.read(5) == b"hello"
    assert f.tell() == 5
    f.seek(6)
    assert f.read() == b"world"
    f.seek(0)
    assert f.read() == b"hello world"
    info = f.stat()
    assert info.name == "a/b.txt"
    assert info.size == 11
    assert not info.is_dir
    f.close()

def test_read_file_missing_object(store):
    with pytest.raises(ObjectNotFoundError):
        ReadFile.open(store, "nope")

def test_read_file_attribute_failure_closes_source():
    store = TrackingStore(attributes_error=StorageError("metadata unavailable"))
    put(store, "a.txt", b"data")
    with pytest.raises(StorageError):
        ReadFile.open(store, "a.txt")
    assert store.sources[0].closed

def test_read_file_object_vanishing_after_reader_open_fails_open():
    store = TrackingStore(attributes_error=ObjectNotFoundError("Object does not exist", key="a.txt"))
    put(store, "a.txt", b"data")
    with pytest.raises(StorageError) as exc_info:
        ReadFile.open(store, "a.txt")
    assert not isinstance(exc_info.value, ObjectNotFoundError)
    assert isinstance(exc_info.value.__cause__, ObjectNotFoundError)
    assert store.sources[0].closed

def test_read_file_copy_failure_closes_source():
    store = TrackingStore(source_factory=lambda src: FailingSource(src.getvalue()))
    put(store, "a.txt", b"data")
    with pytest.raises(StorageError):
        ReadFile.open(store, "a.txt")
    assert store.sources[0].closed

def test_read_file_closes_source_after_copy():
    store = TrackingStore()
    put(store, "a.txt", b"data")
    f = ReadFile.open(store, "a.txt")
    assert store.sources[0].closed
    assert f.read() == b"data"

def test_read_file_is_immune_to_remote_changes(store):
    put(store, "a.txt", b"original")
    f = ReadFile.open(store, "a.txt")
    put(store, "a.txt", b"replaced content")
    store.delete("a.txt")
    assert f.read() == b"original"
    assert f.stat().size == 8

def test_read_file_close_releases_buffer(store):
    put(store, "a.txt", b"data")
    f = ReadFile.open(store, "a.txt")
    f.close()
    assert f.closed
    with pytest.raises(ValueError):
        f.read()

def test_read_file_rejects_writes(store):
    put(store, "a.txt", b"data")
    with ReadFile.open(store, "a.txt") as f:
        with pytest.raises(UnsupportedOperationError):
            f.write(b"x")
        with pytest.raises(NotADirectoryError):
            f.readdirnames(-1)

def test_readinto(store):
    put(store, "a.txt", b"abcdef")
    with ReadFile.open(store, "a.txt") as f:
        target = bytearray(3)
        assert f.readinto(target) == 3
        assert bytes(target) == b"abc"
