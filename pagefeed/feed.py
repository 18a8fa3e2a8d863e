"""RSS 2.0 feed document: model, reader, pretty writer and validator.

The feed file is the only persistent state of a run.  It is read once into a
:class:`Channel`, mutated in memory and written back whole.  Elements this
module does not model are kept verbatim on ``extra`` so that hand-edited
feeds survive a round trip with minimal diffs.
"""

from __future__ import annotations

import copy
import io
import datetime as _dt
import os
import pathlib
import re
from dataclasses import dataclass, field
from email.utils import format_datetime, parsedate_to_datetime
from typing import Dict, Iterable, List, Optional
from urllib.parse import urlparse
from xml.etree import ElementTree as ET

from .errors import FeedError, MalformedFeedError

CONTENT_NS = "http://purl.org/rss/1.0/modules/content/"
CONTENT_TAG = f"{{{CONTENT_NS}}}encoded"

ET.register_namespace("content", CONTENT_NS)
ET.register_namespace("atom", "http://www.w3.org/2005/Atom")
ET.register_namespace("dc", "http://purl.org/dc/elements/1.1/")
ET.register_namespace("media", "http://search.yahoo.com/mrss/")

_RFC3339_RE = re.compile(
    r"^(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(\.\d+)?([Zz]|[+-]\d{2}:\d{2})$"
)
_GENERATED_PREFIX_RE = re.compile(r"ns\d+\Z")

__all__ = [
    "Channel",
    "Guid",
    "Image",
    "Item",
    "format_rfc2822",
    "parse_channel",
    "parse_rfc3339",
    "read_channel",
    "render_channel",
    "validate_channel",
    "write_channel",
]


@dataclass
class Guid:
    value: str = ""
    permalink: bool = True


@dataclass
class Image:
    url: str = ""
    title: str = ""
    link: str = ""


@dataclass
class Item:
    title: Optional[str] = None
    link: Optional[str] = None
    description: Optional[str] = None
    guid: Optional[Guid] = None
    pub_date: Optional[str] = None
    content: Optional[str] = None
    extra: List[ET.Element] = field(default_factory=list)


@dataclass
class Channel:
    title: str = ""
    link: str = ""
    description: str = ""
    language: Optional[str] = None
    last_build_date: Optional[str] = None
    image: Optional[Image] = None
    items: List[Item] = field(default_factory=list)
    extra: List[ET.Element] = field(default_factory=list)
    namespaces: Dict[str, str] = field(default_factory=dict)


# ------------------ timestamps ------------------
def format_rfc2822(moment: _dt.datetime) -> str:
    """Format ``moment`` the way RSS expects ``pubDate``/``lastBuildDate``."""

    return format_datetime(moment)


def parse_rfc3339(raw: str) -> _dt.datetime:
    """Parse a strict RFC 3339 date-time, keeping its UTC offset.

    A date and a time are both required, and so is the offset (``Z`` or
    ``+HH:MM``).  Fractions longer than microseconds are truncated and a
    leap second (``:60``) is read as ``:59``.
    """

    match = _RFC3339_RE.match(raw)
    if match is None:
        raise ValueError(f"not an RFC 3339 date-time: {raw!r}")
    date_part, time_part, fraction, offset = match.groups()
    if fraction:
        fraction = "." + (fraction[1:] + "000000")[:6]
    else:
        fraction = ""
    if offset in ("Z", "z"):
        offset = "+00:00"
    if time_part.endswith(":60"):
        # Leap second: clamp to the last representable second.
        time_part = time_part[:-2] + "59"
    try:
        return _dt.datetime.fromisoformat(f"{date_part}T{time_part}{fraction}{offset}")
    except ValueError as exc:
        raise ValueError(f"not an RFC 3339 date-time: {raw!r} ({exc})") from exc


def _is_rfc2822(value: str) -> bool:
    try:
        parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return False
    return True


def _is_absolute_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


# ------------------ reading ------------------
def _text(element: ET.Element) -> str:
    return element.text or ""


def _parse_guid(element: ET.Element) -> Guid:
    flag = element.attrib.get("isPermaLink", "true").strip().lower()
    return Guid(value=_text(element).strip(), permalink=flag != "false")


def _parse_image(element: ET.Element) -> Image:
    image = Image()
    for child in element:
        if child.tag == "url":
            image.url = _text(child).strip()
        elif child.tag == "title":
            image.title = _text(child)
        elif child.tag == "link":
            image.link = _text(child).strip()
    return image


def _parse_item(element: ET.Element) -> Item:
    item = Item()
    for child in element:
        tag = child.tag
        if tag == "title":
            item.title = _text(child)
        elif tag == "link":
            item.link = _text(child).strip()
        elif tag == "description":
            item.description = _text(child)
        elif tag == "guid":
            item.guid = _parse_guid(child)
        elif tag == "pubDate":
            item.pub_date = _text(child).strip()
        elif tag == CONTENT_TAG:
            item.content = _text(child)
        else:
            item.extra.append(child)
    return item


def _declared_namespaces(data: bytes | str) -> Dict[str, str]:
    """Return the prefix -> URI declarations of an already well-formed document."""

    source = io.BytesIO(data) if isinstance(data, bytes) else io.StringIO(data)
    namespaces: Dict[str, str] = {}
    for _event, (prefix, uri) in ET.iterparse(source, events=("start-ns",)):
        if prefix and not _GENERATED_PREFIX_RE.match(prefix):
            namespaces.setdefault(prefix, uri)
    return namespaces


def parse_channel(data: bytes | str, source: str = "<feed>") -> Channel:
    """Build a :class:`Channel` from serialized RSS 2.0."""

    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise MalformedFeedError(f"{source}: cannot parse feed ({exc})") from exc
    if root.tag != "rss":
        raise MalformedFeedError(f"{source}: expected an <rss> root element, got <{root.tag}>")
    element = root.find("channel")
    if element is None:
        raise MalformedFeedError(f"{source}: no <channel> element found")

    channel = Channel()
    channel.namespaces = _declared_namespaces(data)
    for child in element:
        tag = child.tag
        if tag == "title":
            channel.title = _text(child)
        elif tag == "link":
            channel.link = _text(child).strip()
        elif tag == "description":
            channel.description = _text(child)
        elif tag == "language":
            channel.language = _text(child).strip()
        elif tag == "lastBuildDate":
            channel.last_build_date = _text(child).strip()
        elif tag == "image":
            channel.image = _parse_image(child)
        elif tag == "item":
            channel.items.append(_parse_item(child))
        else:
            channel.extra.append(child)
    return channel


def read_channel(path: pathlib.Path | str) -> Channel | None:
    """Load the feed at ``path``; ``None`` when no file exists there yet."""

    path = pathlib.Path(path)
    try:
        data = path.read_bytes()
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise FeedError(f"{path}: cannot read feed ({exc})") from exc
    return parse_channel(data, source=str(path))


# ------------------ writing ------------------
def _sub(parent: ET.Element, tag: str, text: str, attrib: dict | None = None) -> ET.Element:
    element = ET.SubElement(parent, tag, attrib or {})
    element.text = text
    return element


def _extend(parent: ET.Element, extra: Iterable[ET.Element]) -> None:
    for element in extra:
        parent.append(copy.deepcopy(element))


def _item_element(item: Item) -> ET.Element:
    element = ET.Element("item")
    if item.title is not None:
        _sub(element, "title", item.title)
    if item.link is not None:
        _sub(element, "link", item.link)
    if item.description is not None:
        _sub(element, "description", item.description)
    if item.guid is not None:
        _sub(
            element,
            "guid",
            item.guid.value,
            {"isPermaLink": "true" if item.guid.permalink else "false"},
        )
    if item.pub_date is not None:
        _sub(element, "pubDate", item.pub_date)
    if item.content is not None:
        _sub(element, CONTENT_TAG, item.content)
    _extend(element, item.extra)
    return element


def render_channel(channel: Channel) -> bytes:
    """Serialize ``channel`` as indented RSS 2.0 with an XML declaration."""

    for prefix, uri in channel.namespaces.items():
        ET.register_namespace(prefix, uri)
    root = ET.Element("rss", {"version": "2.0"})
    element = ET.SubElement(root, "channel")
    _sub(element, "title", channel.title)
    _sub(element, "link", channel.link)
    _sub(element, "description", channel.description)
    if channel.language is not None:
        _sub(element, "language", channel.language)
    if channel.last_build_date is not None:
        _sub(element, "lastBuildDate", channel.last_build_date)
    if channel.image is not None:
        image = ET.SubElement(element, "image")
        _sub(image, "url", channel.image.url)
        _sub(image, "title", channel.image.title)
        _sub(image, "link", channel.image.link)
    _extend(element, channel.extra)
    for item in channel.items:
        element.append(_item_element(item))

    ET.indent(root, space="  ")
    return ET.tostring(root, encoding="utf-8", xml_declaration=True) + b"\n"


def write_channel(channel: Channel, path: pathlib.Path | str) -> pathlib.Path:
    """Write ``channel`` to ``path``, replacing any previous file atomically."""

    path = pathlib.Path(path)
    data = render_channel(channel)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        tmp_path.write_bytes(data)
        os.replace(tmp_path, path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise FeedError(f"{path}: cannot write feed ({exc})") from exc
    return path


# ------------------ validation ------------------
def validate_item(item: Item, item_label: str) -> List[str]:
    errors: List[str] = []
    if not item.title and not item.description:
        errors.append(f"{item_label}: item needs a title or a description")
    if item.link and not _is_absolute_url(item.link):
        errors.append(f"{item_label}: link is not an absolute URL: {item.link!r}")
    if item.pub_date and not _is_rfc2822(item.pub_date):
        errors.append(f"{item_label}: pubDate is not an RFC 2822 date: {item.pub_date!r}")
    if item.guid is not None:
        if not item.guid.value:
            errors.append(f"{item_label}: guid is empty")
        elif item.guid.permalink and not _is_absolute_url(item.guid.value):
            errors.append(f"{item_label}: permalink guid is not an absolute URL: {item.guid.value!r}")
    return errors


def validate_channel(channel: Channel) -> List[str]:
    """Return structural problems of ``channel``; an empty list means valid."""

    errors: List[str] = []
    if channel.link and not _is_absolute_url(channel.link):
        errors.append(f"channel: link is not an absolute URL: {channel.link!r}")
    if channel.last_build_date and not _is_rfc2822(channel.last_build_date):
        errors.append(
            f"channel: lastBuildDate is not an RFC 2822 date: {channel.last_build_date!r}"
        )
    if channel.image is not None:
        if not _is_absolute_url(channel.image.url):
            errors.append(f"channel -> image: url is not an absolute URL: {channel.image.url!r}")
        if not _is_absolute_url(channel.image.link):
            errors.append(f"channel -> image: link is not an absolute URL: {channel.image.link!r}")

    seen: set[str] = set()
    for index, item in enumerate(channel.items):
        item_label = f"channel -> items[{index}]"
        errors.extend(validate_item(item, item_label))
        if item.guid is not None and item.guid.value:
            if item.guid.value in seen:
                errors.append(f"{item_label}: duplicate guid {item.guid.value!r}")
            seen.add(item.guid.value)
    return errors
