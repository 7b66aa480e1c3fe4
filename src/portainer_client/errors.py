"""Exception hierarchy raised by the Portainer client."""

from __future__ import annotations


class PortainerClientError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(PortainerClientError, ValueError):
    """Client configuration is missing or malformed."""


class RequestConstructionError(PortainerClientError, ValueError):
    """A request could not be built from the supplied parameters.

    Signals a caller bug (bad method token, relative API path, unparseable URL),
    never a transient fault.
    """


class RequestExecutionError(PortainerClientError):
    """The HTTP transport failed before a response was received.

    The underlying ``httpx.RequestError`` is available as ``__cause__``.
    """

    def __init__(self, operation: str, url: str, cause: BaseException) -> None:
        self.operation = operation
        self.url = url
        super().__init__(f"failed to {operation} {url}: {cause}")


class APIResponseError(PortainerClientError):
    """The management API answered with an error status or an unexpected body."""

    def __init__(self, status_code: int, method: str, url: str, message: str | None = None) -> None:
        self.status_code = status_code
        self.method = method
        self.url = url
        self.message = message
        detail = f": {message}" if message else ""
        super().__init__(f"{method} {url} returned {status_code}{detail}")
