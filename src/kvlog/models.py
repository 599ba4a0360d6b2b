"""Log record model.

A record is the data of one log line before it is encoded:
- Pinned built-in fields (timestamp, source location, level, component, message).
- A per-record context map that the encoder flattens next to the built-ins.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

# Wire-stable keys for the built-in fields.
TIMESTAMP_KEY = "_ts"
FILE_LINE_KEY = "_file:line"
LEVEL_KEY = "_level"
COMPONENT_KEY = "_component"
MESSAGE_KEY = "_message"
ERROR_KEY = "_error"

RESERVED_KEYS = frozenset({TIMESTAMP_KEY, FILE_LINE_KEY, LEVEL_KEY, COMPONENT_KEY, MESSAGE_KEY})

# Records at or above this verbosity include the source location.
DEVELOPER_VERBOSITY = 2

Verbosity: TypeAlias = int


def utc_timestamp() -> str:
    """Return the current UTC time in RFC 3339 format with nanoseconds.

    Trailing zeros of the fraction are trimmed and a zero fraction is omitted,
    e.g. ``2024-05-01T10:20:30.1234Z``.
    """
    return format_timestamp(time.time_ns())


def format_timestamp(ns: int) -> str:
    """Format nanoseconds since the epoch as an RFC 3339 UTC timestamp."""
    seconds, frac = divmod(ns, 1_000_000_000)
    base = datetime.fromtimestamp(seconds, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")
    if frac:
        base += "." + f"{frac:09d}".rstrip("0")
    return base + "Z"


class Record(BaseModel):
    """A single log line's data before encoding."""

    model_config = ConfigDict(frozen=True)

    timestamp: str = ""

    # "relative/path.py:123" of the call site.
    file_line: str = ""

    # The emitting sink's verbosity, kept as a decimal string on the wire.
    verbosity: str = "0"

    component: str = ""
    message: str = ""

    # Caller attributes; flattened into the top level of the encoded object.
    context: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_developer(self) -> bool:
        """True when the record's verbosity selects the developer line shape."""
        try:
            return int(self.verbosity) >= DEVELOPER_VERBOSITY
        except ValueError:
            return False

    def fields(self) -> dict[str, Any]:
        """Return the ordered top-level fields of the encoded line.

        Context keys that collide with a built-in key are dropped.
        """
        out: dict[str, Any] = {TIMESTAMP_KEY: self.timestamp}
        if self.is_developer:
            out[FILE_LINE_KEY] = self.file_line
        out[LEVEL_KEY] = self.verbosity
        out[COMPONENT_KEY] = self.component
        out[MESSAGE_KEY] = self.message
        for k, v in self.context.items():
            if k not in RESERVED_KEYS:
                out[k] = v
        return out
