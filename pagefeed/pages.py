"""Extract entry metadata from a rendered HTML page."""

from __future__ import annotations

import datetime as _dt
import pathlib
from dataclasses import dataclass

from bs4 import BeautifulSoup
from bs4.element import Tag

from .errors import ExtractionError, FeedError
from .feed import parse_rfc3339

TITLE_SELECTOR = 'meta[property="og:title"]'
DESCRIPTION_SELECTOR = 'meta[property="og:description"]'
URL_SELECTOR = 'meta[property="og:url"]'
PUBLISHED_SELECTOR = 'meta[property="article:published_time"]'
HEADING_SELECTOR = "h2"
MAIN_SELECTOR = "main"

__all__ = [
    "PageMetadata",
    "entry_body",
    "extract_page_metadata",
    "load_page_metadata",
    "read_page",
]


@dataclass
class PageMetadata:
    title: str
    description: str
    canonical_url: str
    published_at: _dt.datetime
    heading_markup: str
    body_markup: str

    @property
    def body(self) -> str:
        return entry_body(self.body_markup, self.heading_markup)


def entry_body(body_markup: str, heading_markup: str) -> str:
    """Drop the first literal occurrence of the heading from the body markup."""

    if not heading_markup:
        return body_markup
    return body_markup.replace(heading_markup, "", 1)


def _select_one(soup: BeautifulSoup, selector: str, page: str) -> Tag:
    matches = soup.select(selector)
    if len(matches) != 1:
        raise ExtractionError(
            page, f"expected exactly one '{selector}' element, found {len(matches)}"
        )
    return matches[0]


def _meta_content(soup: BeautifulSoup, selector: str, page: str) -> str:
    element = _select_one(soup, selector, page)
    content = element.get("content")
    if content is None:
        raise ExtractionError(page, f"'{selector}' element has no content attribute")
    return str(content)


def extract_page_metadata(html: str, page: str) -> PageMetadata:
    """Read the six required locations of ``html``.

    Each location must occur exactly once; anything else raises
    :class:`ExtractionError` naming ``page`` and the selector.
    """

    soup = BeautifulSoup(html, "html.parser")

    title = _meta_content(soup, TITLE_SELECTOR, page)
    description = _meta_content(soup, DESCRIPTION_SELECTOR, page)
    canonical_url = _meta_content(soup, URL_SELECTOR, page)
    raw_published = _meta_content(soup, PUBLISHED_SELECTOR, page)
    try:
        published_at = parse_rfc3339(raw_published)
    except ValueError as exc:
        raise ExtractionError(page, f"cannot parse published date ({exc})") from exc

    heading = _select_one(soup, HEADING_SELECTOR, page)
    main = _select_one(soup, MAIN_SELECTOR, page)

    return PageMetadata(
        title=title,
        description=description,
        canonical_url=canonical_url,
        published_at=published_at,
        heading_markup=str(heading),
        body_markup=main.decode_contents(),
    )


def read_page(path: pathlib.Path | str) -> str:
    path = pathlib.Path(path)
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FeedError(f"{path}: cannot read page ({exc})") from exc


def load_page_metadata(path: pathlib.Path | str) -> PageMetadata:
    return extract_page_metadata(read_page(path), str(path))
