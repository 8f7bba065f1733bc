"""Request descriptors and classified outcomes."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Union

from .errors import ErrorKind, FetchError


@dataclass(frozen=True)
class RequestOptions:
    """Options passed through to the transport unmodified.

    ``cache_tags`` are tag-based invalidation keys for caching layers that
    understand them; they travel as the ``cache_tags`` request extension
    alongside any other ``extensions``.
    """

    method: str = "GET"
    headers: Mapping[str, str] = field(default_factory=dict)
    body: str | bytes | None = None
    json: Any = None
    cache_tags: Sequence[str] = ()
    extensions: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.body is not None and self.json is not None:
            raise ValueError("RequestOptions accepts either body or json, not both")
        # Snapshot caller-owned containers so later mutation cannot leak in.
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))
        object.__setattr__(self, "extensions", MappingProxyType(dict(self.extensions)))
        object.__setattr__(self, "cache_tags", tuple(self.cache_tags))

    def transport_extensions(self) -> dict[str, Any]:
        extensions = dict(self.extensions)
        if self.cache_tags:
            extensions["cache_tags"] = list(self.cache_tags)
        return extensions


@dataclass(frozen=True)
class ResolvedPayload:
    """Parsed success body that still answers the response-style ``json()`` call."""

    data: Any
    status_code: int
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)

    def json(self) -> Any:
        # Already resolved; no stream access.
        return self.data


@dataclass(frozen=True)
class Success:
    payload: ResolvedPayload

    ok = True
    kind = None

    def unwrap(self) -> ResolvedPayload:
        return self.payload


@dataclass(frozen=True)
class Failure:
    error: FetchError

    ok = False

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind

    @property
    def status(self) -> int | None:
        return self.error.status

    def unwrap(self) -> ResolvedPayload:
        raise self.error


Outcome = Union[Success, Failure]
