"""Exceptions raised while reconciling pages into a feed."""

from __future__ import annotations

from typing import Sequence


class FeedError(RuntimeError):
    """Base class for every fatal error of a run."""


class ExtractionError(FeedError):
    """A page is missing metadata, repeats it, or carries an unusable value."""

    def __init__(self, page: str, message: str) -> None:
        super().__init__(f"{page}: {message}")
        self.page = page


class MalformedFeedError(FeedError):
    """The existing feed file cannot be used as a reconciliation base."""


class ValidationError(FeedError):
    def __init__(self, errors: Sequence[str]) -> None:
        self.errors = list(errors)
        super().__init__("Channel failed validation: " + "; ".join(self.errors))
