"""Merge page entries into a channel, keyed by the page's canonical URL.

A page whose URL is already a guid in the feed replaces that item in place;
any other page is inserted at the front.  Pages are applied strictly in the
order given, so a later page sees the items inserted by earlier ones.
"""

from __future__ import annotations

import copy
import datetime as _dt
import pathlib
from typing import Callable, Iterable, List, Optional

from .channel import ChannelOverrides, configure_channel
from .errors import MalformedFeedError
from .feed import Channel, Guid, Item, format_rfc2822
from .pages import PageMetadata, load_page_metadata
from .report import RunReport

__all__ = ["add_item", "build_item", "find_item_index", "reconcile", "splice_item"]


def build_item(metadata: PageMetadata) -> Item:
    """Create a fresh feed item whose guid is the page's canonical URL."""

    return Item(
        title=metadata.title,
        link=metadata.canonical_url,
        description=metadata.description,
        guid=Guid(value=metadata.canonical_url, permalink=True),
        pub_date=format_rfc2822(metadata.published_at),
        content=metadata.body,
    )


def find_item_index(items: List[Item], identity: str) -> Optional[int]:
    """Return the position of the item whose guid equals ``identity``."""

    for index, item in enumerate(items):
        if item.guid is None or not item.guid.value:
            raise MalformedFeedError(
                f"channel -> items[{index}]: expected all channel items to have a guid for matching"
            )
        if item.guid.value == identity:
            return index
    return None


def splice_item(channel: Channel, item: Item) -> bool:
    """Replace the matching item or insert ``item`` first; True when inserted."""

    index = find_item_index(channel.items, item.guid.value)
    if index is None:
        channel.items.insert(0, item)
        return True
    channel.items[index] = item
    return False


def add_item(
    channel: Channel,
    page: pathlib.Path | str,
    *,
    report: RunReport | None = None,
) -> bool:
    """Extract ``page`` and splice it into ``channel``.

    Extraction and matching both finish before the item list is touched, so a
    failing page leaves ``channel`` unchanged.
    """

    metadata = load_page_metadata(page)
    inserted = splice_item(channel, build_item(metadata))
    if report is not None:
        report.record_page(str(page), inserted=inserted)
    return inserted


def reconcile(
    channel: Channel,
    overrides: ChannelOverrides,
    pages: Iterable[pathlib.Path | str],
    *,
    base_hostname: Callable[[], str | None] | None = None,
    now: _dt.datetime | None = None,
    report: RunReport | None = None,
) -> Channel:
    """Return a configured copy of ``channel`` with every page merged in."""

    working = copy.deepcopy(channel)
    configure_channel(
        working,
        overrides,
        base_hostname=base_hostname,
        now=now,
        report=report,
    )
    for page in pages:
        add_item(working, page, report=report)
    return working
