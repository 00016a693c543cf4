"""Exceptions for fluxos-http."""


class HTTPClientError(Exception):
    """Base exception for all fluxos-http errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """
        Initialize HTTPClientError.

        Args:
            message: Error message
            status_code: HTTP status code if applicable
        """
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class RequestBuildError(HTTPClientError):
    """Raised when a request could not be configured (bad URL, bad method, serialization)."""

    pass


class TransportError(HTTPClientError):
    """Raised when the underlying transport fails before a response is obtained."""

    pass


class BodyReadError(HTTPClientError):
    """Raised when the response body stream cannot be drained."""

    pass


class DecodeError(HTTPClientError):
    """Raised when a response body cannot be decoded into the requested type."""

    pass


class StatusError(HTTPClientError):
    """Raised when a response completes with a status other than 200."""

    def __init__(self, message: str, status_code: int, body: bytes = b"") -> None:
        """
        Initialize StatusError.

        Args:
            message: Status line followed by the raw body
            status_code: HTTP status code of the response
            body: Raw response body
        """
        self.body = body
        super().__init__(message, status_code=status_code)


class AuthenticationError(StatusError):
    """Raised for 401 responses."""

    pass


class PermissionDeniedError(StatusError):
    """Raised for 403 responses."""

    pass


class ResourceNotFoundError(StatusError):
    """Raised for 404 responses."""

    pass


class RateLimitError(StatusError):
    """Raised for 429 responses."""

    def __init__(
        self,
        message: str,
        status_code: int = 429,
        body: bytes = b"",
        retry_after_seconds: int = 0,
    ) -> None:
        """Initialize RateLimitError."""
        self.retry_after_seconds = retry_after_seconds
        super().__init__(message, status_code=status_code, body=body)


class ServiceUnavailableError(StatusError):
    """Raised for 503 responses."""

    pass


_STATUS_ERRORS: dict[int, type[StatusError]] = {
    401: AuthenticationError,
    403: PermissionDeniedError,
    404: ResourceNotFoundError,
    503: ServiceUnavailableError,
}


def status_error_for(
    status_code: int,
    message: str,
    body: bytes = b"",
    retry_after: str | None = None,
) -> StatusError:
    """
    Build the StatusError subclass matching a status code.

    Args:
        status_code: HTTP status code
        message: Error message
        body: Raw response body
        retry_after: Value of the Retry-After header, if any

    Returns:
        A StatusError (or subclass) instance, not raised
    """
    if status_code == 429:
        try:
            seconds = int(retry_after) if retry_after else 0
        except ValueError:
            seconds = 0
        return RateLimitError(message, body=body, retry_after_seconds=seconds)

    error_class = _STATUS_ERRORS.get(status_code, StatusError)
    return error_class(message, status_code=status_code, body=body)
