"""Run report: warnings and entry counts of one reconciliation run."""

from __future__ import annotations

import datetime as _dt
import json
import pathlib
import sys

from .errors import FeedError

__all__ = ["RunReport", "warn"]


def _utc_now_iso() -> str:
    """Return a second-precision UTC timestamp with a ``Z`` suffix."""

    return _dt.datetime.now(_dt.timezone.utc).replace(microsecond=0, tzinfo=None).isoformat() + "Z"


class RunReport:
    """Accumulate warnings and inserted/updated counts for one run."""

    def __init__(self, feed: str = "") -> None:
        self.feed = feed
        self.warnings: list[str] = []
        self.pages: list[str] = []
        self.inserted = 0
        self.updated = 0

    def record_warning(self, message: str) -> None:
        text = str(message or "").strip()
        if text:
            self.warnings.append(text)

    def record_page(self, page: str, *, inserted: bool) -> None:
        self.pages.append(page)
        if inserted:
            self.inserted += 1
        else:
            self.updated += 1

    def as_dict(self) -> dict:
        return {
            "feed": self.feed,
            "last_run": _utc_now_iso(),
            "pages": list(self.pages),
            "items_inserted": self.inserted,
            "items_updated": self.updated,
            "warnings": list(dict.fromkeys(self.warnings)),
        }

    def write(self, path: pathlib.Path | str) -> pathlib.Path:
        path = pathlib.Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(self.as_dict(), ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise FeedError(f"{path}: cannot write report ({exc})") from exc
        return path


def warn(message: str, report: RunReport | None = None) -> None:
    """Print a non-fatal warning to stderr and record it on ``report``."""

    print(f"[WARN] {message}", file=sys.stderr)
    if report is not None:
        report.record_warning(message)
