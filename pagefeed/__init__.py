"""Pagefeed: keep an RSS feed file in sync with a set of rendered pages."""

__version__ = "0.1.0"

from .channel import ChannelOverrides, configure_channel
from .feed import Channel, Guid, Image, Item, read_channel, validate_channel, write_channel
from .reconcile import add_item, reconcile

__all__ = [
    "Channel",
    "ChannelOverrides",
    "Guid",
    "Image",
    "Item",
    "add_item",
    "configure_channel",
    "read_channel",
    "reconcile",
    "validate_channel",
    "write_channel",
]
