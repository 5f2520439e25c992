# src/codec/temporal.py — v1
"""Recognised temporal text patterns.

Each pattern is a full-match regex used as a cheap predicate, paired with a
parser that may still reject the text (e.g. month 13). Order matters: a
date-time is tried before a date, a date before a time.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import date, datetime, time, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_OFFSET = r"(?:Z|[+-]\d{2}(?::?\d{2})?)"
_CLOCK = r"\d{2}:\d{2}(?::\d{2}(?:\.\d{1,9})?)?"

DATETIME_RE = re.compile(
    rf"(?P<base>\d{{4}}-\d{{2}}-\d{{2}}[T ]{_CLOCK}{_OFFSET}?)(?:\[(?P<zone>[A-Za-z0-9_+\-/]+)\])?"
)
DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
WEEK_DATE_RE = re.compile(r"\d{4}-?W\d{2}(?:-?[1-7])?")
ORDINAL_DATE_RE = re.compile(r"\d{4}-\d{3}")
TIME_RE = re.compile(rf"{_CLOCK}{_OFFSET}?")


def parse_datetime(text: str) -> datetime:
    """Parse an ISO date-time, optionally followed by a ``[Region/City]`` zone."""
    match = DATETIME_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"Not a date-time: {text!r}")
    value = datetime.fromisoformat(match.group("base"))
    zone_key = match.group("zone")
    if zone_key is None:
        return value
    try:
        zone = ZoneInfo(zone_key)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown time zone {zone_key!r}") from e
    if value.tzinfo is None:
        return value.replace(tzinfo=zone)
    return value.astimezone(zone)


def parse_ordinal_date(text: str) -> date:
    return datetime.strptime(text, "%Y-%j").date()


def zone_name(tz: tzinfo | None) -> str | None:
    """IANA name of *tz*: ``key`` for zoneinfo, ``zone`` for pytz (neo4j driver)."""
    if tz is None:
        return None
    name = getattr(tz, "key", None) or getattr(tz, "zone", None)
    return name if isinstance(name, str) else None


def format_datetime(value: datetime) -> str:
    """ISO text for *value*; named zones are kept as a ``[key]`` suffix."""
    text = value.isoformat()
    name = zone_name(value.tzinfo)
    if name:
        text = f"{text}[{name}]"
    return text


# (name, predicate, parser) in priority order.
TEMPORAL_PATTERNS: list[tuple[str, Callable[[str], Any], Callable[[str], Any]]] = [
    ("datetime", DATETIME_RE.fullmatch, parse_datetime),
    ("date", DATE_RE.fullmatch, date.fromisoformat),
    ("week_date", WEEK_DATE_RE.fullmatch, date.fromisoformat),
    ("ordinal_date", ORDINAL_DATE_RE.fullmatch, parse_ordinal_date),
    ("time", TIME_RE.fullmatch, time.fromisoformat),
]
