import pytest

from s3memfs.client.types import AccessLevel
from s3memfs.fs.acl import acl_for_mode


@pytest.mark.parametrize("mode,expected", [
    (0o600, AccessLevel.PRIVATE),
    (0o700, AccessLevel.PRIVATE),
    (0o640, AccessLevel.BUCKET_OWNER_READ),
    (0o660, AccessLevel.BUCKET_OWNER_FULL_CONTROL),
    (0o644, AccessLevel.PUBLIC_READ),
    (0o664, AccessLevel.PUBLIC_READ),
    (0o666, AccessLevel.PUBLIC_READ_WRITE),
    (0o602, AccessLevel.PUBLIC_READ_WRITE),
    (0o777, AccessLevel.PUBLIC_READ_WRITE),
    (0o000, AccessLevel.PRIVATE),
])
def test_acl_for_mode(mode, expected):
    assert acl_for_mode(mode) is expected
