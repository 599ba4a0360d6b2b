"""Record encoders.

An encoder turns a `Record` into output on a writer. The sink owns fallback
handling: encoders only report failures by raising `EncodeError`.
"""

from __future__ import annotations

import json
import threading
from collections.abc import Sequence
from typing import Any, Protocol

from kverrors.errors import json_default

from .models import Record


class Writer(Protocol):
    """Anything with a text `write` method (files, sys.stdout, io.StringIO)."""

    def write(self, s: str, /) -> Any: ...


class EncodeError(ValueError):
    """A record could not be serialised."""


class Encoder(Protocol):
    """Writes a single record to a writer."""

    def encode(self, writer: Writer, record: Record) -> None:
        """Encode `record` onto `writer`; raise `EncodeError` on failure."""


class JSONEncoder:
    """Encodes each record as one compact JSON object followed by a newline."""

    def dumps(self, record: Record) -> str:
        """Return the JSON document for `record` (without the newline)."""
        try:
            return json.dumps(record.fields(), separators=(",", ":"), allow_nan=False, default=json_default)
        except (TypeError, ValueError, RecursionError) as exc:
            raise EncodeError(f"json: {exc}") from exc

    def encode(self, writer: Writer, record: Record) -> None:
        """Write `record` to `writer` as a single line of JSON."""
        writer.write(self.dumps(record) + "\n")


class InMemoryEncoder:
    """Keeps encoded records in memory instead of writing them (for tests)."""

    def __init__(self) -> None:
        """Create an empty in-memory encoder."""
        self._lock = threading.Lock()
        self._records: list[Record] = []

    def encode(self, writer: Writer, record: Record) -> None:  # noqa: ARG002
        """Append a record to the in-memory list (thread-safe)."""
        with self._lock:
            self._records.append(record)

    def snapshot(self) -> Sequence[Record]:
        """Return a point-in-time copy of all recorded entries."""
        with self._lock:
            return list(self._records)

    def take_all(self) -> Sequence[Record]:
        """Return all recorded entries and clear the buffer."""
        with self._lock:
            records, self._records = self._records, []
            return records

    def reset(self) -> None:
        """Drop all recorded entries."""
        with self._lock:
            self._records.clear()
