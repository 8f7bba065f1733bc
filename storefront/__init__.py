"""Storefront API client: classified JSON fetches over httpx."""

from .config import Settings, build_client, load_settings
from .errors import (
    ApiFailure,
    BodyReusedFailure,
    ErrorKind,
    FetchError,
    InvalidSuccessBodyFailure,
    MalformedErrorBodyFailure,
    NetworkFailure,
    UnexpectedHtmlFailure,
)
from .fetch import enhanced_fetch, fetch_outcome
from .models import Failure, Outcome, RequestOptions, ResolvedPayload, Success

__all__ = [
    "ApiFailure",
    "BodyReusedFailure",
    "ErrorKind",
    "Failure",
    "FetchError",
    "InvalidSuccessBodyFailure",
    "MalformedErrorBodyFailure",
    "NetworkFailure",
    "Outcome",
    "RequestOptions",
    "ResolvedPayload",
    "Settings",
    "Success",
    "UnexpectedHtmlFailure",
    "build_client",
    "enhanced_fetch",
    "fetch_outcome",
    "load_settings",
]
