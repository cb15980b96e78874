# errors.py - exception hierarchy raised by APIClient


class APIClientError(Exception):
    """Base class for every failure surfaced by the client."""

    def __init__(self, message, url=None):
        super().__init__(message)
        self.url = url


class TransportError(APIClientError):
    """Connection refused, DNS failure, timeout or any other I/O failure."""


class DecodingError(APIClientError):
    """Response body is not JSON or does not fit the requested result shape."""

    def __init__(self, message, url=None, status_code=None, body=None):
        super().__init__(message, url=url)
        self.status_code = status_code
        self.body = body


class EncodingError(APIClientError):
    """Request body could not be serialized to JSON."""
