import pytest

from s3memfs.client.exceptions import NotFoundError, UnsupportedError
from s3memfs.fs.direct import S3Fs
from s3memfs.fs.stat import DIRECT_MODE


@pytest.fixture
def direct(store):
    return S3Fs(store)


def test_name(direct, store):
    assert direct.name == "S3Fs: direct s3 access"
    assert direct.create("/a/b.txt").name == "s3://test-bucket/a/b.txt"


def test_create_and_write(direct, store):
    f = direct.create("/notes.txt")
    assert f.write_string("hello") == 5
    assert store.objects["notes.txt"].data == b"hello"


def test_open_missing(direct):
    with pytest.raises(NotFoundError):
        direct.open("/missing.txt")
    with pytest.raises(NotFoundError):
        direct.stat("/missing.txt")


def test_sequential_read(direct, store):
    store.seed("data.bin", b"0123456789")
    with direct.open("/data.bin") as f:
        assert f.read(4) == b"0123"
        assert f.read() == b"456789"
        assert f.read() == b""
        assert f.read(0) == b""
        assert f.content_buffer.getvalue() == b"0123456789"
    assert store.count("get") == 1


def test_write_skips_unchanged_content(direct, store):
    store.seed("same.txt", b"same")
    f = direct.open("/same.txt")
    f.write(b"same")
    assert store.count("put") == 0

    f.write(b"different")
    assert store.count("put") == 1
    assert store.objects["same.txt"].data == b"different"


def test_stat(direct, store):
    store.seed("dir/file.txt", b"12345")
    info = direct.stat("/dir/file.txt")
    assert info.name == "file.txt"
    assert info.size == 5
    assert info.mode == DIRECT_MODE
    assert not info.is_dir
    assert info.mod_time == store.objects["dir/file.txt"].last_modified

    assert direct.open("dir/file.txt").stat() == info


def test_remove(direct, store):
    store.seed("gone.txt", b"x")
    direct.remove("/gone.txt")
    assert "gone.txt" not in store.objects
    direct.remove("/gone.txt")


def test_mkdir_is_a_noop(direct, store):
    direct.mkdir("/dir")
    direct.mkdir_all("/dir/sub")
    assert store.calls == []


@pytest.mark.parametrize("call", [
    lambda f: f.read_at(1, 0),
    lambda f: f.write_at(b"x", 0),
    lambda f: f.seek(0),
    lambda f: f.truncate(0),
    lambda f: f.readdir(),
    lambda f: f.readdirnames(),
])
def test_unsupported_operations(direct, call):
    f = direct.create("/f.txt")
    with pytest.raises(UnsupportedError):
        call(f)
