"""Log sinks.

`LogSink` is the small contract loggers (and bridges to other logging
frameworks) depend on. `Sink` is the concrete implementation: it owns a
writer, a verbosity, a component name and inherited attributes, and hands
each record to an encoder.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import threading
from collections.abc import Callable
from typing import Any, NamedTuple, Protocol

from kverrors import KVError, new
from kverrors.kv import combine, to_map

from .encoder import EncodeError, Encoder, JSONEncoder, Writer
from .models import ERROR_KEY, Record, Verbosity, utc_timestamp

# Process-scoped clock used for every record; tests replace it.
timestamp_func: Callable[[], str] = utc_timestamp

# Frames from these directories are never reported as the call site.
_INTERNAL_DIRS = frozenset(
    {
        os.path.dirname(os.path.abspath(__file__)),
        os.path.dirname(os.path.abspath(logging.__file__)),
    }
)


class LogSink(Protocol):
    """The operations a logger needs from its sink."""

    def enabled(self, level: int) -> bool:
        """Return True when records at `level` would be written."""

    def info(self, level: int, msg: str, *keys_and_values: Any) -> None:
        """Record a non-error message when `level` is enabled."""

    def error(self, err: BaseException | None, msg: str, *keys_and_values: Any) -> None:
        """Record an error message; never filtered by verbosity."""

    def with_values(self, *keys_and_values: Any) -> LogSink:
        """Return a derived sink that adds the given attributes to every record."""

    def with_name(self, name: str) -> LogSink:
        """Return a derived sink with `name` appended to the component."""


class _State(NamedTuple):
    output: Writer
    verbosity: Verbosity
    encoder: Encoder
    context: dict[str, Any]


def _check_verbosity(v: int) -> None:
    if v < 0:
        raise ValueError(f"verbosity must be >= 0. Got: {v}")


class Sink:
    """Writes structured records to an output.

    Thread safety: the writer, verbosity and context are read as one snapshot
    per record. Encoding and writing happen outside the lock, so concurrent
    records are only line-atomic if the writer is.
    """

    def __init__(
        self,
        *keys_and_values: Any,
        name: str = "",
        output: Writer | None = None,
        verbosity: Verbosity = 0,
        encoder: Encoder | None = None,
    ) -> None:
        """Create a sink.

        Args:
            keys_and_values: Attributes added to every record.
            name: Component name written under ``_component``.
            output: Destination writer; defaults to ``sys.stdout``.
            verbosity: Highest level that `info` records.
            encoder: Record encoder; defaults to `JSONEncoder`.
        """
        _check_verbosity(verbosity)
        self._lock = threading.Lock()
        self._name = name
        self._output: Writer = output if output is not None else sys.stdout
        self._verbosity = verbosity
        self._encoder: Encoder = encoder if encoder is not None else JSONEncoder()
        self._context = to_map(*keys_and_values)

    @property
    def name(self) -> str:
        """The component name."""
        return self._name

    def enabled(self, level: int) -> bool:
        """Return True when `level` is at or below the sink's verbosity."""
        with self._lock:
            return self._verbosity >= level

    def info(self, level: int, msg: str, *keys_and_values: Any) -> None:
        """Record `msg` with the given attributes if `level` is enabled."""
        state = self._snapshot()
        if state.verbosity < level:
            return
        self._log(state, msg, combine(state.context, *keys_and_values))

    def error(self, err: BaseException | None, msg: str, *keys_and_values: Any) -> None:
        """Record `msg` together with `err` under ``_error``.

        Foreign exceptions are converted to a KVError holding their text so the
        ``_error`` field always has the same shape.
        """
        state = self._snapshot()
        context = combine(state.context, *keys_and_values)
        if err is not None:
            if not isinstance(err, KVError):
                err = new(str(err))
            context[ERROR_KEY] = err
        self._log(state, msg, context)

    def with_values(self, *keys_and_values: Any) -> Sink:
        """Return a copy of this sink whose context also holds the given pairs."""
        with self._lock:
            name, state = self._name, self._state()
        return self._derive(name, state, combine(state.context, *keys_and_values))

    def with_name(self, name: str) -> Sink:
        """Return a copy of this sink named ``<parent>_<name>`` (or `name` if unnamed)."""
        with self._lock:
            parent, state = self._name, self._state()
        new_name = f"{parent}_{name}" if parent else name
        return self._derive(new_name, state, dict(state.context))

    def set_output(self, output: Writer) -> None:
        """Replace the writer records are written to."""
        with self._lock:
            self._output = output

    def set_encoder(self, encoder: Encoder) -> None:
        """Replace the record encoder."""
        with self._lock:
            self._encoder = encoder

    def set_verbosity(self, verbosity: Verbosity) -> None:
        """Set the highest level that `info` records."""
        _check_verbosity(verbosity)
        with self._lock:
            self._verbosity = verbosity

    def get_verbosity(self) -> Verbosity:
        """Return the current verbosity."""
        with self._lock:
            return self._verbosity

    def _state(self) -> _State:
        return _State(self._output, self._verbosity, self._encoder, self._context)

    def _snapshot(self) -> _State:
        with self._lock:
            return self._state()

    @staticmethod
    def _derive(name: str, state: _State, context: dict[str, Any]) -> Sink:
        child = Sink(name=name, output=state.output, verbosity=state.verbosity, encoder=state.encoder)
        child._context = context
        return child

    def _log(self, state: _State, msg: str, context: dict[str, Any], *, file_line: str | None = None) -> None:
        """Build and encode a record. Callers are responsible for level checks."""
        record = Record(
            timestamp=str(timestamp_func()),
            file_line=file_line if file_line is not None else caller_location(),
            verbosity=str(state.verbosity),
            component=str(self._name),
            message=str(msg),
            context=context,
        )
        try:
            state.encoder.encode(state.output, record)
        except EncodeError as exc:
            _write_fallback(state, record, exc)
        except (OSError, ValueError):
            # Writer failures are dropped; logging must not fail the caller.
            pass


def _write_fallback(state: _State, record: Record, cause: Exception) -> None:
    encoder_type = f"{type(state.encoder).__module__}.{type(state.encoder).__qualname__}"
    line = '{"message","failed to encode message", "encoder":%s,"log":%s,"cause":%s}\n' % (
        json.dumps(encoder_type),
        json.dumps(repr(record)),
        json.dumps(str(cause)),
    )
    try:
        state.output.write(line)
    except (OSError, ValueError):
        pass


def caller_location() -> str:
    """Return ``path:line`` of the nearest frame outside this package and `logging`."""
    frame = sys._getframe(1)
    while frame is not None and os.path.dirname(os.path.abspath(frame.f_code.co_filename)) in _INTERNAL_DIRS:
        frame = frame.f_back
    if frame is None:
        return ""
    return f"{source_path(frame.f_code.co_filename)}:{frame.f_lineno}"


def source_path(file: str) -> str:
    """Render `file` relative to the working directory when it lies below it.

    Otherwise return the last directory plus the file name.
    """
    try:
        rel = os.path.relpath(file)
    except (OSError, ValueError):
        rel = ""
    if rel and rel != os.pardir and not rel.startswith(os.pardir + os.sep):
        return rel
    return os.path.join(os.path.basename(os.path.dirname(file)), os.path.basename(file))
