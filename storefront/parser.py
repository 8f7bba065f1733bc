"""Inspect buffered response bodies without touching the network stream."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

HTML_DOCTYPE = "<!DOCTYPE html>"
DEFAULT_PREVIEW_CHARS = 500


@dataclass(frozen=True)
class ParseResult:
    """Normalized parse outcome for buffered body text."""

    ok: bool
    data: Any | None
    error: str | None


def is_html_document(text: str) -> bool:
    """Return True when the trimmed body starts with the HTML5 doctype.

    The match is the exact, case-sensitive literal; lowercase or XHTML
    doctypes are treated as ordinary non-JSON text.
    """
    return text.strip().startswith(HTML_DOCTYPE)


def parse_body(text: str) -> ParseResult:
    """Decode JSON text, reporting malformed input instead of raising."""
    if not text.strip():
        return ParseResult(ok=False, data=None, error="Empty response body.")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        return ParseResult(ok=False, data=None, error=f"Malformed JSON: {exc.msg}")
    return ParseResult(ok=True, data=data, error=None)


def extract_error_message(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    message = data.get("message")
    if isinstance(message, str):
        return message if message.strip() else None
    # Falsy scalars mean "no message"; anything else is shown as text.
    if message is None or message == 0:
        return None
    return str(message)


def preview(text: str, limit: int = DEFAULT_PREVIEW_CHARS) -> str:
    return text[:limit]
