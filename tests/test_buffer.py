import os
import pytest
from bucketfs.fs.buffer import SeekableBuffer

def test_write_then_reopen_reads_from_start():
    buf = SeekableBuffer("a.txt")
    buf.write(b"hello ")
    buf.write(b"world")
    buf.close()
    assert buf.closed
    buf.open()
    assert buf.tell() == 0
    assert buf.read() == b"hello world"

def test_initial_data_is_readable():
    buf = SeekableBuffer("a.txt", data=b"abc")
    assert buf.read() == b"abc"
    assert buf.size == 3

def test_io_after_close_raises():
    buf = SeekableBuffer("a.txt")
    buf.close()
    with pytest.raises(ValueError):
        buf.write(b"x")
    with pytest.raises(ValueError):
        buf.read()
    with pytest.raises(ValueError):
        buf.seek(0)

def test_release_discards_content():
    buf = SeekableBuffer("a.txt", data=b"abc")
    buf.release()
    assert buf.released
    assert buf.size == 0
    with pytest.raises(ValueError):
        buf.open()

def test_seek_and_overwrite():
    buf = SeekableBuffer("a.txt")
    buf.write(b"hello world")
    buf.seek(0)
    buf.write(b"J")
    buf.seek(-5, os.SEEK_END)
    assert buf.read() == b"world"
    buf.seek(0)
    assert buf.read() == b"Jello world"

def test_negative_seek_rejected():
    buf = SeekableBuffer("a.txt", data=b"abc")
    with pytest.raises(ValueError):
        buf.seek(-1)

def test_size_keeps_position():
    buf = SeekableBuffer("a.txt", data=b"abcdef")
    buf.seek(2)
    assert buf.size == 6
    assert buf.tell() == 2

def test_readinto():
    buf = SeekableBuffer("a.txt", data=b"abcdef")
    target = bytearray(4)
    assert buf.readinto(target) == 4
    assert bytes(target) == b"abcd"
    target = bytearray(4)
    assert buf.readinto(target) == 2
    assert bytes(target[:2]) == b"ef"

def test_spills_to_disk_past_max_size():
    buf = SeekableBuffer("big.bin", max_size=8)
    data = os.urandom(1024)
    buf.write(data)
    buf.close()
    buf.open()
    assert buf.read() == data
