import stat
from datetime import datetime, timezone

from s3memfs.client.types import HeadObjectOutput
from s3memfs.fs.node import DIRECTORY_SIZE, DirectoryNode
from s3memfs.fs.stat import DIRECT_MODE, FileInfo


def test_from_directory_node():
    info = DirectoryNode("/photos/2024", 0o755).stat()
    assert info.name == "2024"
    assert info.is_dir
    assert info.size == DIRECTORY_SIZE
    assert info.st_mode == stat.S_IFDIR | 0o755


def test_root_name():
    assert DirectoryNode("/").stat().name == "/"


def test_from_file_node(fs):
    f = fs.create("/a/report.csv", 0o640)
    f.write(b"x,y\n")
    info = f.stat()
    assert info.name == "report.csv"
    assert info.size == 4
    assert not info.is_dir
    assert info.st_mode == stat.S_IFREG | 0o640


def test_from_head():
    modified = datetime(2024, 1, 1, tzinfo=timezone.utc)
    info = FileInfo.from_head("a/b/c.txt", HeadObjectOutput(etag='"e"', content_length=12,
                                                             last_modified=modified))
    assert info == FileInfo(name="c.txt", size=12, mod_time=modified, is_dir=False, mode=DIRECT_MODE)


def test_from_head_without_last_modified():
    info = FileInfo.from_head("k", HeadObjectOutput(etag="", content_length=0, last_modified=None))
    assert info.mod_time == datetime.fromtimestamp(0, timezone.utc)
