import os

import pytest

from s3memfs.client.exceptions import (
    ClosedHandleError,
    OutOfRangeError,
    RemoteFailureError,
    UnsupportedError,
)
from s3memfs.client.types import AccessLevel


def test_write_read_round_trip(fs, store):
    f = fs.create("/hello.txt")
    assert f.write_string("hello world") == 11
    f.seek(0)
    assert f.read() == b"hello world"
    assert f.read() == b""  # end of file
    f.close()

    assert store.objects["hello.txt"].data == b"hello world"


def test_nothing_uploaded_before_close(fs, store):
    f = fs.create("/draft.txt")
    f.write(b"pending")
    assert store.count("put") == 0
    f.close()
    assert store.count("put") == 1


def test_zero_length_read_does_not_fetch(fs, store):
    store.seed("remote.bin", b"remote content")
    fs.load_remote()

    f = fs.open("/remote.bin")
    assert f.read(0) == b""
    assert f.readinto(bytearray()) == 0
    assert store.count("get") == 0


def test_lazy_fetch_on_first_read(fs, store):
    store.seed("remote.bin", b"remote content")
    fs.load_remote()

    f = fs.open("/remote.bin")
    assert f.size == 14
    assert f.read(6) == b"remote"
    assert f.read() == b" content"
    assert store.count("get") == 1


def test_readinto(fs):
    f = fs.create("/data.bin")
    f.write(b"abcdef")
    f.seek(2)
    buf = bytearray(3)
    assert f.readinto(buf) == 3
    assert bytes(buf) == b"cde"
    assert f.tell() == 5


def test_truncate_sizes(fs):
    f = fs.create("/truncate.txt")
    f.write(b"Hello, World!")
    assert f.size == 13

    f.truncate(10)
    assert f.size == 10
    f.seek(0)
    assert f.read() == b"Hello, Wor"

    f.truncate(1024)
    assert f.size == 1024
    assert f.read_at(1024, 0) == b"Hello, Wor" + b"\x00" * 1014

    f.truncate(0)
    assert f.size == 0

    with pytest.raises(OutOfRangeError):
        f.truncate(-1)


def test_truncate_keeps_cursor(fs):
    f = fs.create("/cursor.txt")
    f.write(b"0123456789")
    f.truncate(4)
    assert f.tell() == 10
    assert f.read() == b""


def test_truncate_fetches_unloaded_content(fs, store):
    store.seed("big.txt", b"0123456789")
    fs.load_remote()

    f = fs.open("/big.txt")
    f.truncate(4)
    assert store.count("get") == 1
    assert f.read() == b"0123"


@pytest.mark.parametrize("start,offset,whence,expected", [
    (0, 5, os.SEEK_SET, 5),
    (5, 2, os.SEEK_CUR, 7),
    (5, -5, os.SEEK_CUR, 0),
    (0, -3, os.SEEK_END, 7),
    (0, 5, os.SEEK_END, 15),
    (0, 20, os.SEEK_SET, 20),
])
def test_seek(fs, start, offset, whence, expected):
    f = fs.create("/seek.txt")
    f.write(b"0123456789")
    f.seek(start)
    assert f.seek(offset, whence) == expected
    assert f.tell() == expected


@pytest.mark.parametrize("offset,whence", [
    (-1, os.SEEK_SET),
    (-11, os.SEEK_END),
    (0, 7),
])
def test_seek_out_of_range(fs, offset, whence):
    f = fs.create("/seek.txt")
    f.write(b"0123456789")
    with pytest.raises(OutOfRangeError):
        f.seek(offset, whence)


def test_write_after_seek_past_end_pads_with_zeros(fs):
    f = fs.create("/sparse.bin")
    f.write(b"ab")
    f.seek(5)
    f.write(b"cd")
    assert f.read_at(-1, 0) == b"ab\x00\x00\x00cd"


def test_read_at_leaves_cursor(fs):
    f = fs.create("/read_at.txt")
    f.write(b"0123456789")
    f.seek(1)
    assert f.read_at(3, 4) == b"456"
    assert f.read_at(5, 8) == b"89"
    assert f.read_at(5, 20) == b""
    assert f.tell() == 1

    with pytest.raises(OutOfRangeError):
        f.read_at(1, -1)


def test_write_at(fs):
    f = fs.create("/write_at.txt")
    f.write(b"0123456789")
    assert f.write_at(b"xy", 3) == 2
    assert f.write_at(b"!", 12) == 1
    assert f.tell() == 10
    assert f.read_at(-1, 0) == b"012xy56789\x00\x00!"

    with pytest.raises(OutOfRangeError):
        f.write_at(b"z", -1)


def test_closed_handle(fs):
    f = fs.create("/closed.txt")
    f.close()
    assert f.closed

    with pytest.raises(ClosedHandleError):
        f.read()
    with pytest.raises(ClosedHandleError):
        f.write(b"data")
    with pytest.raises(ClosedHandleError):
        f.seek(0)
    with pytest.raises(ClosedHandleError):
        f.truncate(0)


def test_reopen_clears_closed_flag(fs):
    f = fs.create("/reopen.txt")
    f.write(b"content")
    f.close()

    g = fs.open("/reopen.txt")
    assert g is f
    assert not g.closed
    assert g.read() == b"content"


def test_unchanged_content_is_not_uploaded_again(fs, store):
    f = fs.create("/same.txt")
    f.write(b"same bytes")
    f.close()

    fs.open("/same.txt").close()
    fs.open("/same.txt").close()

    assert store.count("put") == 1
    assert store.count("head") == 3


def test_changed_content_is_uploaded(fs, store):
    f = fs.create("/changed.txt")
    f.write(b"v1")
    f.close()

    f = fs.open("/changed.txt")
    f.write(b"v2")
    f.close()

    assert store.count("put") == 2
    assert store.objects["changed.txt"].data == b"v2"


def test_empty_file_is_uploaded(fs, store):
    fs.create("/empty").close()
    assert store.objects["empty"].data == b""


def test_close_of_unloaded_file_uploads_nothing(fs, store):
    store.seed("untouched.txt", b"remote")
    fs.load_remote()

    fs.open("/untouched.txt").close()
    assert store.count("head") == 0
    assert store.count("put") == 0


def test_upload_uses_mode_and_content_type(fs, store):
    with fs.create("/public/page.html", mode=0o644) as f:
        f.write_string("<html></html>")

    obj = store.objects["public/page.html"]
    assert obj.access_level is AccessLevel.PUBLIC_READ
    assert obj.content_type == "text/html"


def test_default_mode_is_private(fs, store):
    with fs.create("/secret.key") as f:
        f.write(b"k")
    assert fs.stat("/secret.key").mode == 0o600
    assert store.objects["secret.key"].access_level is AccessLevel.PRIVATE


def test_sync_is_a_noop(fs, store):
    f = fs.create("/sync.txt")
    f.write(b"data")
    f.sync()
    assert store.calls == []


def test_readdir_on_file_is_unsupported(fs):
    f = fs.create("/file.txt")
    with pytest.raises(UnsupportedError):
        f.readdir()
    with pytest.raises(UnsupportedError):
        f.readdirnames(3)


def test_append_to_remote_file_keeps_content(fs, store):
    store.seed("notes.txt", b"hello world")
    fs.load_remote()

    f = fs.open("/notes.txt")
    assert f.seek(0, os.SEEK_END) == 11
    f.write(b"!")
    f.close()

    assert store.count("get") == 1
    assert store.objects["notes.txt"].data == b"hello world!"


def test_write_at_into_remote_file_keeps_content(fs, store):
    store.seed("notes.txt", b"hello world")
    fs.load_remote()

    f = fs.open("/notes.txt")
    f.write_at(b"W", 6)
    f.close()

    assert store.objects["notes.txt"].data == b"hello World"


def test_close_propagates_head_failure_without_upload(fs, store):
    f = fs.create("/report.txt")
    f.write(b"data")
    store.fail("head")

    with pytest.raises(RemoteFailureError):
        f.close()

    assert store.count("put") == 0
    assert "report.txt" not in store.objects
