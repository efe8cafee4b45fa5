import subprocess

from s3memfs.fuse import mount_utils
from s3memfs.fuse.mount_utils import get_mount_options, unmount


def test_mount_options():
    options = get_mount_options()
    assert options['foreground'] is True
    assert options['rw'] is True
    assert 'allow_other' not in options
    assert get_mount_options(foreground=False, allow_other=True)['allow_other'] is True


def test_unmount_skips_unmounted_path(monkeypatch):
    calls = []

    def fake_run(cmd, check=False):
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, 1)

    monkeypatch.setattr(mount_utils.subprocess, "run", fake_run)
    unmount("/mnt/bucket/")
    assert calls == [["mountpoint", "-q", "/mnt/bucket"]]


def test_unmount_calls_fusermount(monkeypatch):
    calls = []

    def fake_run(cmd, check=False):
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, 0)

    monkeypatch.setattr(mount_utils.subprocess, "run", fake_run)
    unmount("/mnt/bucket")
    assert calls[-1] == ["fusermount", "-u", "/mnt/bucket"]


def test_unmount_survives_missing_tools(monkeypatch):
    def fake_run(cmd, check=False):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(mount_utils.subprocess, "run", fake_run)
    unmount("/mnt/bucket")
