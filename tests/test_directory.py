import pytest
from concurrent.futures import ThreadPoolExecutor
from bucketfs.client import InMemoryObjectStore, StorageConnectionError, StorageError
from bucketfs.fs.directory import DirectoryFile, ListingCursor

class CountingStore(InMemoryObjectStore):
    def __init__(self):
        super().__init__()
        self.list_calls = []

    def list(self, prefix, cursor=None, max_results=None, timeout=None):
        self.list_calls.append((prefix, cursor, max_results, timeout))
        return super().list(prefix, cursor=cursor, max_results=max_results, timeout=timeout)

class UnreachableStore(InMemoryObjectStore):
    def list(self, prefix, cursor=None, max_results=None, timeout=None):
        raise StorageConnectionError("network down")

@pytest.fixture
def counting_store():
    store = CountingStore()
    for i in range(7):
        writer = store.open_writer(f"d/{i}.txt")
        writer.write(b"x" * i)
        writer.close()
    return store

def test_readdir_pages_until_exhausted(counting_store):
    directory = DirectoryFile(counting_store, "d")
    pages = []
    while True:
        page = directory.readdir(3)
        if not page:
            break
        pages.append(page)
    assert [len(p) for p in pages] == [3, 3, 1]
    names = [info.name for page in pages for info in page]
    assert names == [f"d/{i}.txt" for i in range(7)], "Every entry exactly once, in order"
    assert directory.cursor.exhausted
    assert directory.cursor.token is None
    # the empty read after exhaustion does not hit the store
    assert len(counting_store.list_calls) == 3

def test_readdir_passes_cursor_and_page_size(counting_store):
    directory = DirectoryFile(counting_store, "d", timeout=2.5)
    directory.readdir(3)
    directory.readdir(3)
    first, second = counting_store.list_calls
    assert first == ("d/", None, 3, 2.5)
    assert second[0] == "d/"
    assert second[1] is not None
    assert second[2] == 3

def test_readdir_unbounded_reads_everything(counting_store):
    for count in (-1, 0):
        infos = DirectoryFile(counting_store, "d").readdir(count)
        assert len(infos) == 7
    assert all(call[2] is None for call in counting_store.list_calls)

def test_unbounded_read_after_a_page_returns_the_rest(counting_store):
    directory = DirectoryFile(counting_store, "d")
    first = directory.readdirnames(2)
    rest = directory.readdirnames(-1)
    assert first + rest == [f"d/{i}.txt" for i in range(7)]
    assert directory.readdirnames(-1) == []

def test_read_page_is_stateless(counting_store):
    directory = DirectoryFile(counting_store, "d")
    first, cursor = directory.read_page(4)
    again, _ = directory.read_page(4)
    assert first == again
    second, last_cursor = directory.read_page(4, cursor)
    assert [i.name for i in second] == ["d/4.txt", "d/5.txt", "d/6.txt"]
    assert last_cursor.exhausted
    assert directory.read_page(4, last_cursor) == ([], last_cursor)
    assert directory.cursor is None, "read_page must not touch the handle's cursor"

def test_entries_are_files_with_full_names(store, put_object):
    put_object("d/1", b"a")
    put_object("d/nested/2", b"bb")
    infos = DirectoryFile(store, "d").readdir(-1)
    assert [(i.name, i.size, i.is_dir) for i in infos] == [
        ("d/1", 1, False),
        ("d/nested/2", 2, False),
    ]
    assert all(i.mod_time is not None for i in infos)

def test_prefix_does_not_match_sibling_names(store, put_object):
    put_object("d/1")
    put_object("dx/2")
    assert DirectoryFile(store, "d").readdirnames(-1) == ["d/1"]
    assert DirectoryFile(store, "/d/").readdirnames(-1) == ["d/1"]

def test_missing_directory_is_not_found(store, put_object):
    put_object("other/1")
    directory = DirectoryFile(store, "missing")
    with pytest.raises(FileNotFoundError):
        directory.readdir(-1)

def test_store_error_is_reported_as_not_found():
    directory = DirectoryFile(UnreachableStore(), "d")
    with pytest.raises(FileNotFoundError) as exc_info:
        directory.readdir(10)
    assert isinstance(exc_info.value.__cause__, StorageError)

def test_empty_root_lists_nothing(store):
    assert DirectoryFile(store, "/").readdir(-1) == []

def test_root_lists_everything(store, put_object):
    put_object("a")
    put_object("b/c")
    assert DirectoryFile(store, "").readdirnames(-1) == ["a", "b/c"]

def test_directory_stat_is_synthetic(store):
    info = DirectoryFile(store, "d/").stat()
    assert info.name == "d"
    assert info.is_dir
    assert info.size == 0
    assert info.mod_time is None

def test_directory_rejects_file_io(store):
    directory = DirectoryFile(store, "d")
    with pytest.raises(IsADirectoryError):
        directory.read()
    with pytest.raises(IsADirectoryError):
        directory.write(b"x")
    with pytest.raises(IsADirectoryError):
        directory.seek(0)

def test_readdir_after_close_fails(counting_store):
    with DirectoryFile(counting_store, "d") as directory:
        directory.readdir(1)
    assert directory.closed
    with pytest.raises(ValueError):
        directory.readdir(1)

def test_concurrent_readdir_enumerates_each_entry_once(counting_store):
    directory = DirectoryFile(counting_store, "d")

    def drain():
        seen = []
        while True:
            names = directory.readdirnames(1)
            if not names:
                return seen
            seen.extend(names)

    with ThreadPoolExecutor(max_workers=4) as executor:
        results = list(executor.map(lambda _: drain(), range(4)))
    names = sorted(name for seen in results for name in seen)
    assert names == [f"d/{i}.txt" for i in range(7)]

def test_listing_cursor_defaults():
    cursor = ListingCursor()
    assert cursor.token is None
    assert not cursor.exhausted
