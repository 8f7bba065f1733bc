"""Issue one classified request against the storefront API and report the outcome."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Ensure repository root is on sys.path for direct package imports.
sys.path.append(str(Path(__file__).resolve().parents[1]))

from storefront import RequestOptions, fetch_outcome  # noqa: E402
from utils.logging_setup import configure_logging, log_outcome  # noqa: E402

logger = logging.getLogger("probe_endpoint")


def _parse_header(raw: str) -> tuple[str, str]:
    name, sep, value = raw.partition(":")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"header must look like 'Name: value', got {raw!r}")
    return name.strip(), value.strip()


def build_options(args: argparse.Namespace) -> RequestOptions:
    return RequestOptions(
        method=args.method.upper(),
        headers=dict(args.header),
        body=args.data,
        cache_tags=tuple(args.tag),
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("url", help="Absolute URL, or a path relative to STOREFRONT_API_URL")
    parser.add_argument("--method", default="GET")
    parser.add_argument("--header", action="append", type=_parse_header, default=[])
    parser.add_argument("--data", default=None, help="Raw request body")
    parser.add_argument("--tag", action="append", default=[], help="Cache tag hint")
    args = parser.parse_args(argv)

    configure_logging("probe-endpoint")
    outcome = asyncio.run(fetch_outcome(args.url, build_options(args)))
    log_outcome(logger, outcome)
    if outcome.ok:
        print(json.dumps(outcome.unwrap().json(), indent=2, ensure_ascii=False))
        return 0
    print(f"{outcome.kind.value}: {outcome.error.message}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
