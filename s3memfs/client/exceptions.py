from enum import Enum


class ErrorKind(Enum):
    """Closed set of failure kinds raised by the filesystem and the adapter."""
    NOT_FOUND = "ERR_NOT_FOUND"
    ALREADY_EXISTS = "ERR_EXISTS"
    DESTINATION_EXISTS = "ERR_DEST_EXISTS"
    CLOSED_HANDLE = "ERR_CLOSED"
    OUT_OF_RANGE = "ERR_RANGE"
    UNSUPPORTED = "ERR_UNSUPPORTED"
    REMOTE_FAILURE = "ERR_REMOTE"
    CONFIGURATION = "ERR_CONFIG"


class S3FsError(Exception):
    """Base exception for s3memfs errors."""
    kind = None

    def __init__(self, message: str, code: str = "ERR_UNKNOWN", path: str = None):
        self.code = code
        self.message = message
        self.path = path
        super().__init__(f"{code}: {message}")


def _code(kind: ErrorKind, operation: str = None) -> str:
    if operation:
        return f"{kind.value}_{operation.upper()}"
    return kind.value


class NotFoundError(S3FsError):
    """Path or object does not exist."""
    kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str, path: str = None, operation: str = None):
        super().__init__(message, code=_code(self.kind, operation), path=path)


class AlreadyExistsError(S3FsError):
    """Create-class operation hit an occupied path."""
    kind = ErrorKind.ALREADY_EXISTS

    def __init__(self, message: str, path: str = None):
        super().__init__(message, code=_code(self.kind), path=path)


class DestinationExistsError(S3FsError):
    """Rename target is occupied."""
    kind = ErrorKind.DESTINATION_EXISTS

    def __init__(self, message: str, path: str = None):
        super().__init__(message, code=_code(self.kind), path=path)


class ClosedHandleError(S3FsError):
    """Operation on a closed file handle."""
    kind = ErrorKind.CLOSED_HANDLE

    def __init__(self, message: str, path: str = None):
        super().__init__(message, code=_code(self.kind), path=path)


class OutOfRangeError(S3FsError):
    """Invalid numeric argument, such as a negative size or offset."""
    kind = ErrorKind.OUT_OF_RANGE

    def __init__(self, message: str, path: str = None):
        super().__init__(message, code=_code(self.kind), path=path)


class UnsupportedError(S3FsError):
    """Operation intentionally not implemented by this variant."""
    kind = ErrorKind.UNSUPPORTED

    def __init__(self, message: str, path: str = None, operation: str = None):
        super().__init__(message, code=_code(self.kind, operation), path=path)


class RemoteFailureError(S3FsError):
    """The object store reported an error other than not-found."""
    kind = ErrorKind.REMOTE_FAILURE

    def __init__(self, message: str, path: str = None, operation: str = None):
        super().__init__(message, code=_code(self.kind, operation), path=path)


class ConfigurationError(S3FsError):
    """Configuration or credential error."""
    kind = ErrorKind.CONFIGURATION

    def __init__(self, message: str):
        super().__init__(message, code=_code(self.kind))
