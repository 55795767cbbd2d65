"""Error taxonomy for source calls.

These are raised inside adapters and converted into failed SourceResults at the
adapter boundary; they never reach the dispatcher or the caller.
"""

from src.contracts.discover_v1 import ErrorKind


class DiscoverError(Exception):
    """Base class for discover search errors."""

    kind: ErrorKind = ErrorKind.UNEXPECTED


class SourceTimeout(DiscoverError):
    kind = ErrorKind.TIMEOUT

    def __init__(self, source: str, timeout: float):
        self.source = source
        self.timeout = timeout
        super().__init__(f"{source}: no response within {timeout:.1f}s")


class SourceError(DiscoverError):
    """Backend answered with an error status or an explicit failure envelope."""

    kind = ErrorKind.HTTP_ERROR

    def __init__(self, source: str, message: str, status_code: int | None = None):
        self.source = source
        self.status_code = status_code
        prefix = f"{source}: HTTP {status_code}" if status_code else source
        super().__init__(f"{prefix}: {message}")


class InvalidSourceResponse(DiscoverError):
    kind = ErrorKind.INVALID_RESPONSE

    def __init__(self, source: str, detail: str):
        self.source = source
        super().__init__(f"{source}: invalid response: {detail}")
