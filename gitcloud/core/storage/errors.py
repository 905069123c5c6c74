"""
Error taxonomy for the upload flow.

Each error maps to exactly one HTTP outcome in the upload route.
Nothing here is retried: a failure at any stage aborts the request.
"""

from typing import Any, Optional


class UploadError(Exception):
    """Base class for all upload failures."""
    pass


class ConfigurationError(UploadError):
    """Raised when the server is missing GitHub credentials."""
    pass


class ClientInputError(UploadError):
    """Raised when the request carries no usable file."""
    pass


class ExternalServiceError(UploadError):
    """
    Raised when a call to the repository host fails.

    Carries the HTTP status and the decoded response payload (when the
    host returned one) so the route can log them next to the message.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        data: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.data = data
