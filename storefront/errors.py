"""Closed failure taxonomy raised by the response classifier."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    NETWORK = "network"
    BODY_REUSED = "body_reused"
    UNEXPECTED_HTML = "unexpected_html"
    MALFORMED_ERROR_BODY = "malformed_error_body"
    API = "api"
    INVALID_SUCCESS_BODY = "invalid_success_body"


class FetchError(Exception):
    """Base class for every classified fetch failure.

    ``cause`` keeps the diagnostic payload: the raw body text, the parsed
    error structure, or the original exception. Exception causes are also
    chained through ``__cause__`` by the classifier.
    """

    kind: ErrorKind

    def __init__(
        self,
        message: str,
        *,
        url: str,
        cause: Any = None,
        status: int | None = None,
        status_text: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.url = url
        self.cause = cause
        self.status = status
        self.status_text = status_text

    @property
    def is_not_found(self) -> bool:
        return self.status == 404

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, status={self.status!r}, message={self.message!r})"


class NetworkFailure(FetchError):
    """Transport failed before a complete response was available."""

    kind = ErrorKind.NETWORK

    def __init__(self, url: str, cause: BaseException) -> None:
        super().__init__(
            f"Network connection to {url} failed. Check the backend server status.",
            url=url,
            cause=cause,
        )


class BodyReusedFailure(FetchError):
    kind = ErrorKind.BODY_REUSED

    def __init__(self, url: str, cause: BaseException) -> None:
        super().__init__(
            "Internal error while reading response data (body already read).",
            url=url,
            cause=cause,
        )


class UnexpectedHtmlFailure(FetchError):
    """An HTML document (usually a proxy error page) came back instead of JSON."""

    kind = ErrorKind.UNEXPECTED_HTML

    def __init__(self, url: str, status: int, status_text: str, text: str) -> None:
        super().__init__(
            f"HTTP Error: {status} - {status_text or 'Unexpected HTML response'}",
            url=url,
            cause=text,
            status=status,
            status_text=status_text,
        )


class MalformedErrorBodyFailure(FetchError):
    kind = ErrorKind.MALFORMED_ERROR_BODY

    def __init__(self, url: str, status: int, status_text: str, text: str) -> None:
        super().__init__(
            f"HTTP Error: {status} - {status_text or 'Invalid response format'}",
            url=url,
            cause=text,
            status=status,
            status_text=status_text,
        )


class ApiFailure(FetchError):
    """The backend answered with a structured error body."""

    kind = ErrorKind.API

    def __init__(
        self,
        url: str,
        status: int,
        status_text: str,
        detail: str | None,
        error_data: Any,
    ) -> None:
        super().__init__(
            f"API Error: {status} - {detail or 'Unknown error'}",
            url=url,
            cause=error_data,
            status=status,
            status_text=status_text,
        )
        self.detail = detail


class InvalidSuccessBodyFailure(FetchError):
    kind = ErrorKind.INVALID_SUCCESS_BODY

    def __init__(self, url: str, status: int, status_text: str, text: str) -> None:
        super().__init__(
            f"Invalid JSON response from {url}",
            url=url,
            cause=text,
            status=status,
            status_text=status_text,
        )
