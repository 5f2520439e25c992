# src/codec/value_codec.py — v1
"""Property value <-> cell text conversion.

Encoding is lossless for int, float, bool, date, time, datetime and str.
Decoding has no schema to rely on, so it guesses: the first entry of
``DECODERS`` whose predicate accepts the text and whose parser does not
raise wins. Strings that look like numbers, booleans or dates come back
typed; that is the price of a schema-less format.

Priority: integer, float, boolean, temporal patterns, single character,
then plain string.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import date, datetime, time
from typing import Any

from tabgraph.codec.temporal import TEMPORAL_PATTERNS, format_datetime

logger = logging.getLogger(__name__)

INTEGER_RE = re.compile(r"[+-]?\d+")
# Non-finite values only in the spellings repr() produces.
FLOAT_RE = re.compile(r"[+-]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?|nan|-?inf")

# (name, predicate, parser) in priority order.
DECODERS: list[tuple[str, Callable[[str], Any], Callable[[str], Any]]] = [
    ("integer", INTEGER_RE.fullmatch, int),
    ("float", FLOAT_RE.fullmatch, float),
    ("boolean", lambda t: t.lower() in ("true", "false"), lambda t: t.lower() == "true"),
    *TEMPORAL_PATTERNS,
    # No char type in Python: a one-character cell stays a str, unquoted as-is.
    ("char", lambda t: len(t) == 1, str),
]


class ValueCodec:
    """Convert property values to cell text and back.

    Args:
        delimiter: Column delimiter of the tabular files. Cells containing it
            are quoted by the CSV writer; decode strips a second, defensive
            pair of quotes around such text.
        trim_values: Strip surrounding whitespace from strings on encode.
    """

    def __init__(self, delimiter: str = ";", trim_values: bool = False) -> None:
        self._delimiter = delimiter
        self._trim_values = trim_values

    def encode(self, value: Any) -> str:
        """Return the cell text for *value*; None encodes to an empty cell."""
        if value is None:
            return ""
        # bool before int, datetime before date: subclass order.
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float):
            return repr(value)
        if isinstance(value, datetime):
            return format_datetime(value)
        if isinstance(value, (date, time)):
            return value.isoformat()
        if isinstance(value, str):
            return value.strip() if self._trim_values else value
        logger.debug("No dedicated encoding for %s, using str()", type(value).__name__)
        return str(value)

    def decode(self, text: str) -> Any | None:
        """Return the inferred value of *text*, or None when the cell is empty."""
        if text == "":
            return None
        for _, predicate, parser in DECODERS:
            if not predicate(text):
                continue
            try:
                return parser(text)
            except ValueError:
                continue
        return self._strip_defensive_quotes(text)

    def _strip_defensive_quotes(self, text: str) -> str:
        if (
            len(text) >= 2
            and text[0] == '"'
            and text[-1] == '"'
            and self._delimiter in text[1:-1]
        ):
            return text[1:-1]
        return text
