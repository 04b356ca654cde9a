"""
Error types for network adapter enumeration.

Transient failures are retried by the snapshot provider; everything else
propagates to whoever asked for the snapshot.
"""

import errno
from typing import Optional


# Windows ERROR_NO_DATA: "The pipe is being closed."
WINERROR_PIPE_CLOSING = 232

TRANSIENT_ERRNOS = frozenset({
    errno.EPIPE,
    errno.EAGAIN,
    errno.EINTR,
    errno.EBUSY,
    errno.ENODEV,
})


class NetworkInventoryError(Exception):
    """Base class for all netinventory errors"""
    pass


class EnumerationError(NetworkInventoryError):
    """The OS could not list its network interfaces"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class TransientEnumerationError(EnumerationError):
    """
    Enumeration failed mid-call but is expected to succeed on retry.

    Typical trigger: the network stack is reconfigured while we enumerate
    (e.g. IPv4 disabled on an adapter, an interface torn down mid-scan).
    """
    pass


class ConfigurationError(NetworkInventoryError):
    """Invalid monitor configuration"""
    pass


def is_transient_os_error(exc: BaseException) -> bool:
    """Return True if an OSError belongs to the retryable class."""
    if isinstance(exc, FileNotFoundError):
        # Interface vanished between listing and reading its attributes
        return True
    if not isinstance(exc, OSError):
        return False
    if getattr(exc, "winerror", None) == WINERROR_PIPE_CLOSING:
        return True
    return exc.errno in TRANSIENT_ERRNOS
