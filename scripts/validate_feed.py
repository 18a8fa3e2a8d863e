#!/usr/bin/env python3
"""Validate RSS feed files written by pagefeed."""

from __future__ import annotations

import argparse
import pathlib
import sys
from dataclasses import dataclass
from typing import List, Sequence

if __package__ in (None, ""):
    sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

from pagefeed.errors import FeedError
from pagefeed.feed import read_channel, validate_channel

DEFAULT_FEED = pathlib.Path("index.rss")


@dataclass
class FeedResult:
    path: pathlib.Path
    errors: List[str]


def validate_feed(path: pathlib.Path) -> FeedResult:
    try:
        channel = read_channel(path)
    except FeedError as exc:
        return FeedResult(path, [str(exc)])
    if channel is None:
        return FeedResult(path, [f"{path}: file not found"])

    errors = [f"{path}: {message}" for message in validate_channel(channel)]
    for index, item in enumerate(channel.items):
        if item.guid is None or not item.guid.value:
            errors.append(f"{path}: channel -> items[{index}]: missing guid")
    return FeedResult(path, errors)


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Validate RSS feed files.")
    parser.add_argument(
        "feeds",
        nargs="*",
        type=pathlib.Path,
        default=[DEFAULT_FEED],
        help="Feed files to check (default: index.rss)",
    )
    args = parser.parse_args(list(argv) if argv is not None else None)

    errors: List[str] = []
    for path in args.feeds:
        errors.extend(validate_feed(path).errors)

    if errors:
        for message in errors:
            print(message, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
