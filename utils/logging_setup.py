"""Logging configuration for the storefront API client.

Classifier records carry ``url``, ``status`` and ``kind`` extras. The JSON
stream handler prints whatever is present; the CloudWatch handler ships only
records with fetch context and always emits those three keys so aggregation
queries can filter on them.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Any

import boto3
from pythonjsonlogger import jsonlogger

from storefront.errors import FetchError
from storefront.models import Outcome

_LOGGING_CONFIGURED = False
_FORMAT = "%(asctime)s %(levelname)s %(name)s %(service)s %(message)s"
DEFAULT_SERVICE = "storefront-client"
FETCH_FIELDS = ("url", "status", "kind")


class _ServiceFilter(logging.Filter):
    def __init__(self, service: str | None):
        super().__init__()
        self._service = service or DEFAULT_SERVICE

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "service"):
            record.service = self._service
        return True


def _fetch_context(record: logging.LogRecord) -> dict[str, Any]:
    """Collect fetch fields from record extras, falling back to a logged FetchError."""
    context = {name: getattr(record, name, None) for name in FETCH_FIELDS}
    exc = record.exc_info[1] if record.exc_info else None
    if isinstance(exc, FetchError):
        context["url"] = context["url"] or exc.url
        context["status"] = context["status"] if context["status"] is not None else exc.status
        context["kind"] = context["kind"] or exc.kind.value
    return context


class FetchEventFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that always emits the fetch context keys."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record.update(_fetch_context(record))


class CloudWatchHandler(logging.Handler):
    """Ship classified-fetch diagnostics to AWS CloudWatch Logs.

    Records without a ``url`` (or a logged ``FetchError``) are ignored; general
    application logging stays on the stream handler.
    """

    def __init__(
        self,
        log_group: str,
        log_stream: str,
        *,
        region_name: str | None = None,
        endpoint_url: str | None = None,
    ) -> None:
        super().__init__()
        self._log_group = log_group
        self._log_stream = log_stream
        self._client = boto3.client("logs", region_name=region_name, endpoint_url=endpoint_url)
        self._sequence_token: str | None = None
        self.setFormatter(FetchEventFormatter(_FORMAT))
        self._ensure_log_stream()

    def _ensure_log_stream(self) -> None:
        exists = self._client.exceptions.ResourceAlreadyExistsException
        try:
            self._client.create_log_group(logGroupName=self._log_group)
        except exists:
            pass
        try:
            self._client.create_log_stream(
                logGroupName=self._log_group,
                logStreamName=self._log_stream,
            )
        except exists:
            pass

    def filter(self, record: logging.LogRecord) -> bool:
        if not super().filter(record):
            return False
        return _fetch_context(record)["url"] is not None

    def emit(self, record: logging.LogRecord) -> None:
        try:
            event = {"timestamp": int(record.created * 1000), "message": self.format(record)}
            kwargs: dict[str, Any] = {
                "logGroupName": self._log_group,
                "logStreamName": self._log_stream,
                "logEvents": [event],
            }
            if self._sequence_token is not None:
                kwargs["sequenceToken"] = self._sequence_token
            response = self._client.put_log_events(**kwargs)
            self._sequence_token = response.get("nextSequenceToken")
        except Exception:
            self.handleError(record)


def _cloudwatch_handler(service_name: str | None) -> CloudWatchHandler | None:
    log_group = os.getenv("CLOUDWATCH_LOG_GROUP")
    if not log_group:
        return None
    log_stream = os.getenv(
        "CLOUDWATCH_LOG_STREAM",
        f"{service_name or DEFAULT_SERVICE}-{int(time.time())}",
    )
    return CloudWatchHandler(
        log_group,
        log_stream,
        region_name=os.getenv("AWS_REGION"),
        endpoint_url=os.getenv("CLOUDWATCH_ENDPOINT"),
    )


def configure_logging(service_name: str | None = None) -> None:
    """Install a JSON stream handler and, when configured, CloudWatch output."""
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    root = logging.getLogger()
    root.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    service_filter = _ServiceFilter(service_name)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(jsonlogger.JsonFormatter(_FORMAT))
    handlers: list[logging.Handler] = [stream_handler]
    cw_handler = _cloudwatch_handler(service_name)
    if cw_handler is not None:
        handlers.append(cw_handler)

    for handler in handlers:
        handler.addFilter(service_filter)
        root.addHandler(handler)
    _LOGGING_CONFIGURED = True


def reset_logging() -> None:
    """Reset logging configuration for tests."""
    global _LOGGING_CONFIGURED
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    _LOGGING_CONFIGURED = False


def log_outcome(
    logger: logging.Logger,
    outcome: Outcome,
    *,
    extra: dict[str, Any] | None = None,
) -> None:
    """Log a classified outcome at info (success) or warning (failure)."""
    fields = dict(extra or {})
    if outcome.ok:
        payload = outcome.unwrap()
        fields.update(url=payload.url, status=payload.status_code)
        logger.info("fetch succeeded", extra=fields)
        return
    error = outcome.error
    fields.update(url=error.url, status=error.status, kind=error.kind.value)
    logger.warning(error.message, extra=fields)
