"""Apply channel-level overrides and defaults to a feed document."""

from __future__ import annotations

import datetime as _dt
import pathlib
from dataclasses import dataclass
from typing import Callable, Optional

from .feed import Channel, Image, format_rfc2822
from .report import RunReport, warn

DEFAULT_CNAME = "CNAME"
DEFAULT_FAVICON = "favicon.png"

__all__ = ["ChannelOverrides", "configure_channel", "read_base_hostname"]


@dataclass
class ChannelOverrides:
    """Values supplied by the caller; ``None`` means "keep what is loaded"."""

    title: Optional[str] = None
    description: Optional[str] = None
    base_url: Optional[str] = None
    language: Optional[str] = None
    favicon: str = DEFAULT_FAVICON


def read_base_hostname(path: pathlib.Path | str = DEFAULT_CNAME) -> str | None:
    """Return the hostname recorded in a ``CNAME`` file, if there is one."""

    try:
        text = pathlib.Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    hostname = text.strip()
    return hostname or None


def configure_channel(
    channel: Channel,
    overrides: ChannelOverrides,
    *,
    base_hostname: Callable[[], str | None] | None = None,
    now: _dt.datetime | None = None,
    report: RunReport | None = None,
) -> Channel:
    """Set title, description, link, language, build date and icon in place.

    Missing title, description or link only produce warnings.  The build date
    and the icon are recomputed on every call.
    """

    if overrides.title is not None:
        channel.title = overrides.title
    if not channel.title:
        warn("Empty channel title.", report)

    if overrides.description is not None:
        channel.description = overrides.description
    if not channel.description:
        warn("Empty channel description.", report)

    if overrides.base_url is not None:
        channel.link = overrides.base_url
    elif not channel.link:
        hostname = (base_hostname or read_base_hostname)()
        if hostname:
            # Trailing slash: the link is the join base for the icon path.
            channel.link = f"https://{hostname}/"
        else:
            warn("Empty channel link.", report)

    if overrides.language is not None:
        channel.language = overrides.language

    moment = now or _dt.datetime.now(_dt.timezone.utc)
    channel.last_build_date = format_rfc2822(moment)

    channel.image = Image(
        url=f"{channel.link}{overrides.favicon}",
        title=channel.title,
        link=channel.link,
    )
    return channel
