"""Response classifier wrapped around a single httpx call.

Every call issues exactly one request and buffers the body exactly once.
All inspection (HTML sniffing, JSON decoding) works on that buffer, and
failures are re-raised as one of the six :mod:`storefront.errors` kinds. Any
other exception propagates unchanged.

Usage::

    payload = await enhanced_fetch("/styles/42")
    style = payload.json()

    outcome = await fetch_outcome("/styles/42")
    if not outcome.ok and outcome.error.is_not_found:
        ...
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from .config import Settings, build_client, load_settings
from .errors import (
    ApiFailure,
    BodyReusedFailure,
    FetchError,
    InvalidSuccessBodyFailure,
    MalformedErrorBodyFailure,
    NetworkFailure,
    UnexpectedHtmlFailure,
)
from .models import Failure, Outcome, RequestOptions, ResolvedPayload, Success
from .parser import (
    DEFAULT_PREVIEW_CHARS,
    extract_error_message,
    is_html_document,
    parse_body,
    preview,
)

# httpx maps connect/read/write/protocol/timeout errors to TransportError;
# custom transports may surface the raw OS error instead.
NETWORK_ERRORS: tuple[type[BaseException], ...] = (httpx.TransportError, ConnectionError)
BODY_REUSED_ERRORS: tuple[type[BaseException], ...] = (httpx.StreamConsumed, httpx.StreamClosed)


async def _read_once(
    client: httpx.AsyncClient, url: str, options: RequestOptions
) -> httpx.Response:
    request = client.build_request(
        options.method,
        url,
        headers=dict(options.headers),
        content=options.body,
        json=options.json,
        extensions=options.transport_extensions(),
    )
    response = await client.send(request, stream=True)
    try:
        await response.aread()
    finally:
        await response.aclose()
    return response


def _classify_response(
    url: str, response: httpx.Response, log: logging.Logger, preview_chars: int
) -> ResolvedPayload:
    """Turn a fully buffered response into a payload or a classified failure.

    The HTML doctype check runs before the status branch, so a 2xx HTML page
    is an ``UnexpectedHtmlFailure``. HTML must be detected regardless of
    status; the older single-branch behaviour sent 2xx HTML to
    ``InvalidSuccessBodyFailure``. Keep this ordering.
    """
    status = response.status_code
    status_text = response.reason_phrase
    text = response.text
    extra = {"url": url, "status": status}
    log.debug("Received response for %s. Status: %s %s", url, status, status_text, extra=extra)
    log.debug(
        "Response body (first %s chars): %s",
        preview_chars,
        preview(text, preview_chars),
        extra=extra,
    )

    if is_html_document(text):
        log.error(
            "Received HTML instead of JSON from %s: %s",
            url,
            preview(text, preview_chars),
            extra=extra,
        )
        raise UnexpectedHtmlFailure(url, status, status_text, text)

    parsed = parse_body(text)

    if not response.is_success:
        log.error("Non-OK status %s detected for %s", status, url, extra=extra)
        if not parsed.ok:
            log.error(
                "Failed to parse error body from %s (%s): %s",
                url,
                parsed.error,
                preview(text, preview_chars),
                extra=extra,
            )
            raise MalformedErrorBodyFailure(url, status, status_text, text)
        log.error("Parsed error body from %s: %s", url, parsed.data, extra=extra)
        raise ApiFailure(
            url, status, status_text, extract_error_message(parsed.data), parsed.data
        )

    if not parsed.ok:
        log.error(
            "Received %s but failed to parse JSON from %s: %s",
            status,
            url,
            preview(text, preview_chars),
            extra=extra,
        )
        raise InvalidSuccessBodyFailure(url, status, status_text, text)

    log.debug("Successfully parsed JSON for %s", url, extra=extra)
    return ResolvedPayload(
        data=parsed.data,
        status_code=status,
        url=str(response.url),
        headers=dict(response.headers),
    )


async def _classify(
    client: httpx.AsyncClient,
    url: str,
    options: RequestOptions,
    log: logging.Logger,
    preview_chars: int,
) -> ResolvedPayload:
    extra = {"url": url}
    log.debug("Attempting to fetch from URL: %s", url, extra=extra)
    try:
        response = await _read_once(client, url, options)
    except asyncio.CancelledError as exc:
        log.error("Fetch cancelled for %s before the body was read", url, extra=extra)
        raise NetworkFailure(url, exc) from exc
    except NETWORK_ERRORS as exc:
        log.error("Network error for %s: %r", url, exc, extra=extra)
        raise NetworkFailure(url, exc) from exc
    except BODY_REUSED_ERRORS as exc:
        log.error(
            "Response body for %s was consumed more than once: %r", url, exc, extra=extra
        )
        raise BodyReusedFailure(url, exc) from exc
    except Exception as exc:
        log.error("Fetch operation failed for %s: %r", url, exc, extra=extra)
        raise
    return _classify_response(url, response, log, preview_chars)


async def enhanced_fetch(
    url: str,
    options: RequestOptions | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    logger: logging.Logger | None = None,
    settings: Settings | None = None,
) -> ResolvedPayload:
    """Fetch ``url`` and return the parsed JSON payload.

    Raises one of the :class:`storefront.errors.FetchError` subclasses for every
    recognized failure. When ``client`` is omitted a client is built from
    ``settings`` (or the environment) for this call only.
    """
    log = logger or logging.getLogger(__name__)
    options = options or RequestOptions()
    if client is not None:
        # The environment is only consulted when a client has to be built.
        preview_chars = settings.preview_chars if settings else DEFAULT_PREVIEW_CHARS
        return await _classify(client, url, options, log, preview_chars)
    settings = settings or load_settings()
    async with build_client(settings) as owned:
        return await _classify(owned, url, options, log, settings.preview_chars)


async def fetch_outcome(
    url: str,
    options: RequestOptions | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    logger: logging.Logger | None = None,
    settings: Settings | None = None,
) -> Outcome:
    """Like :func:`enhanced_fetch` but returns a ``Success``/``Failure`` value."""
    try:
        payload = await enhanced_fetch(
            url, options, client=client, logger=logger, settings=settings
        )
    except FetchError as exc:
        return Failure(exc)
    return Success(payload)
