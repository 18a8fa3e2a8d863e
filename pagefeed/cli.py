#!/usr/bin/env python3
"""Read HTML pages and write or update an RSS feed file.

Run:
  pagefeed --title "Blog" --description "Notes" posts/*.html
Env knobs (optional):
  PAGEFEED_FEED, PAGEFEED_FAVICON, PAGEFEED_CNAME
"""

from __future__ import annotations

import argparse
import os
import pathlib
import sys
from typing import Sequence

from . import __version__
from .channel import DEFAULT_CNAME, DEFAULT_FAVICON, ChannelOverrides, read_base_hostname
from .errors import FeedError, ValidationError
from .feed import Channel, read_channel, validate_channel, write_channel
from .reconcile import reconcile
from .report import RunReport

FEED_PATH = pathlib.Path(os.getenv("PAGEFEED_FEED") or "index.rss")
FAVICON = os.getenv("PAGEFEED_FAVICON") or DEFAULT_FAVICON
CNAME_PATH = pathlib.Path(os.getenv("PAGEFEED_CNAME") or DEFAULT_CNAME)


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pagefeed",
        description="Read HTML pages and write/update an RSS feed file.",
    )
    parser.add_argument(
        "--feed",
        type=pathlib.Path,
        default=FEED_PATH,
        help="RSS file to read the current feed from and write the new feed to (default: index.rss)",
    )
    parser.add_argument("-t", "--title", help="Title of the feed as a whole")
    parser.add_argument("-d", "--description", help="Description of the feed as a whole")
    parser.add_argument(
        "-b",
        "--base-url",
        help="Public URL where the directory holding the RSS file is served",
    )
    parser.add_argument("--language", help="Overall language of the feed")
    parser.add_argument(
        "--favicon",
        default=FAVICON,
        help="Path to the favicon file, appended to the base URL (default: favicon.png)",
    )
    parser.add_argument(
        "--cname",
        type=pathlib.Path,
        default=CNAME_PATH,
        help="File holding the site hostname, used when no link is known (default: CNAME)",
    )
    parser.add_argument(
        "--report",
        type=pathlib.Path,
        help="Optional path for a JSON report of this run",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("pages", nargs="+", help="Pages to add to the feed or update in it")
    return parser


def run(args: argparse.Namespace, report: RunReport) -> int:
    channel = read_channel(args.feed)
    if channel is None:
        channel = Channel()

    overrides = ChannelOverrides(
        title=args.title,
        description=args.description,
        base_url=args.base_url,
        language=args.language,
        favicon=args.favicon,
    )
    channel = reconcile(
        channel,
        overrides,
        args.pages,
        base_hostname=lambda: read_base_hostname(args.cname),
        report=report,
    )

    errors = validate_channel(channel)
    if errors:
        raise ValidationError(errors)

    write_channel(channel, args.feed)
    print(
        f"Wrote {len(channel.items)} items to {args.feed} "
        f"({report.inserted} inserted, {report.updated} updated)"
    )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    report = RunReport(feed=str(args.feed))
    try:
        status = run(args, report)
    except ValidationError as exc:
        for message in exc.errors:
            print(f"ERROR: {message}", file=sys.stderr)
        print("ERROR: Channel failed validation; feed not written.", file=sys.stderr)
        return 1
    except FeedError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    if args.report is not None:
        try:
            report.write(args.report)
        except FeedError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1
    return status


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
