"""Environment-driven settings for the storefront API client."""

from __future__ import annotations

import os
from dataclasses import dataclass

import httpx

from .parser import DEFAULT_PREVIEW_CHARS

DEFAULT_USER_AGENT = "storefront-client/0.1"


@dataclass(frozen=True)
class Settings:
    api_base_url: str = ""
    preview_chars: int = DEFAULT_PREVIEW_CHARS
    user_agent: str = DEFAULT_USER_AGENT


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def load_settings() -> Settings:
    """Read client settings from the environment."""
    return Settings(
        api_base_url=os.getenv("STOREFRONT_API_URL", "").strip(),
        preview_chars=_int_env("FETCH_PREVIEW_CHARS", DEFAULT_PREVIEW_CHARS),
        user_agent=os.getenv("STOREFRONT_USER_AGENT", DEFAULT_USER_AGENT),
    )


def build_client(settings: Settings | None = None, **kwargs) -> httpx.AsyncClient:
    """Return an ``httpx.AsyncClient`` for one classified call.

    No timeout is applied here; deadlines belong to the caller or transport.
    Redirects are followed so a moved resource resolves to its final payload.
    """
    settings = settings or load_settings()
    kwargs.setdefault("timeout", None)
    kwargs.setdefault("follow_redirects", True)
    kwargs.setdefault("headers", {"User-Agent": settings.user_agent})
    if settings.api_base_url:
        kwargs.setdefault("base_url", settings.api_base_url)
    return httpx.AsyncClient(**kwargs)
