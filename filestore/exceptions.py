# filestore/exceptions.py
from typing import Optional


class FileClientError(Exception):
    """
    Base exception for all file service client failures.
    """

    pass


class InvalidRequest(FileClientError):
    """
    Raised when a request cannot be built (malformed URL, empty key).
    """

    pass


class FileReadError(FileClientError):
    """
    Raised when the local file to upload cannot be read.
    """

    def __init__(self, source: str, reason: str = ""):
        self.source = source
        message = f"Could not read file '{source}'"
        super().__init__(f"{message}: {reason}" if reason else message)


class TransportError(FileClientError):
    """
    Raised when the HTTP library reports a network-level failure.
    """

    pass


class BadServerResponse(FileClientError):
    """
    Raised when the transport returns something that is not a usable HTTP response.
    """

    pass


class ParseError(FileClientError):
    """
    Raised when a successful response body is not JSON or lacks the expected field.
    """

    def __init__(self, field: str, reason: str = ""):
        self.field = field
        message = f"Could not extract '{field}' from response"
        super().__init__(f"{message}: {reason}" if reason else message)


# --- HTTP status buckets ---

class HTTPStatusError(FileClientError):
    """Base for failures carrying a non-2xx HTTP status code."""

    kind = "HTTP error"

    def __init__(self, status_code: int, body: Optional[str] = None):
        self.status_code = status_code
        self.body = body
        super().__init__(f"{self.kind} ({status_code})")


class RedirectionError(HTTPStatusError):
    """3xx response."""
    kind = "Redirection"


class ClientError(HTTPStatusError):
    """4xx response."""
    kind = "Client error"


class ServerError(HTTPStatusError):
    """5xx response."""
    kind = "Server error"


class UnknownError(HTTPStatusError):
    """Status outside 200-599."""
    kind = "Unknown status"
