"""Error types for AlertDesk."""

from typing import Optional


class AlertDeskError(Exception):
    """Base class for all AlertDesk errors."""


class ValidationError(AlertDeskError):
    """A client-side precondition failed before any request was made."""


class ConfigError(AlertDeskError):
    """The configuration file could not be read."""


class RemoteError(AlertDeskError):
    """A call to the alert service failed."""


class TransportError(RemoteError):
    """The request never reached the service or no usable reply came back."""


class ApplicationError(RemoteError):
    """The service answered with a non-200 statusCode.

    Attributes:
        status_code: statusCode reported in the response envelope.
        message: Human-readable message from the service.
    """

    def __init__(self, status_code: Optional[int], message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def user_message(error: AlertDeskError, fallback: str) -> str:
    """Text to show the user for an error.

    Service and validation messages are shown as-is; anything else is
    prefixed with ``fallback``.
    """
    if isinstance(error, ApplicationError) and error.message:
        return error.message
    if isinstance(error, ValidationError):
        return str(error)
    return f"{fallback}: {error}"
