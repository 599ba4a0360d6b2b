"""Logger facade over a `LogSink`.

A `Logger` pairs a sink with a V-level. `info` records at that level (and is
filtered by the sink's verbosity); `error` is always recorded.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from kverrors import KVError

from .encoder import Encoder, Writer
from .sink import LogSink, Sink

Option = Callable[[Sink], None]


class UnknownSinkTypeError(KVError):
    """A logger's sink is not a `Sink`, so sink-only operations are unavailable."""

    def __init__(self, sink: object) -> None:
        super().__init__(
            "unknown log sink type",
            "sink_type",
            f"{type(sink).__module__}.{type(sink).__qualname__}",
            "expected_type",
            f"{Sink.__module__}.{Sink.__qualname__}",
        )


class Logger:
    """A handle for emitting records at a fixed V-level."""

    def __init__(self, sink: LogSink, level: int = 0) -> None:
        self._sink = sink
        self._level = max(level, 0)

    @property
    def sink(self) -> LogSink:
        return self._sink

    @property
    def level(self) -> int:
        return self._level

    def enabled(self) -> bool:
        """Return True when `info` on this logger would produce output."""
        return self._sink.enabled(self._level)

    def info(self, msg: str, *keys_and_values: Any) -> None:
        """Log a non-error message with alternating key/value attributes."""
        if self._sink.enabled(self._level):
            self._sink.info(self._level, msg, *keys_and_values)

    def error(self, err: BaseException | None, msg: str, *keys_and_values: Any) -> None:
        """Log `err` with a message and attributes, regardless of verbosity."""
        self._sink.error(err, msg, *keys_and_values)

    def v(self, level: int) -> Logger:
        """Return a logger for more verbose messages; negative levels count as 0."""
        return Logger(self._sink, self._level + max(level, 0))

    def with_values(self, *keys_and_values: Any) -> Logger:
        """Return a logger that adds the given attributes to every record."""
        return Logger(self._sink.with_values(*keys_and_values), self._level)

    def with_name(self, name: str) -> Logger:
        """Return a logger whose component is extended with `name`."""
        return Logger(self._sink.with_name(name), self._level)


def with_output(output: Writer) -> Option:
    """Option setting the writer of the logger's sink."""

    def _apply(sink: Sink) -> None:
        sink.set_output(output)

    return _apply


def with_verbosity(verbosity: int) -> Option:
    """Option setting the verbosity of the logger's sink."""

    def _apply(sink: Sink) -> None:
        sink.set_verbosity(verbosity)

    return _apply


def with_encoder(encoder: Encoder) -> Option:
    """Option replacing the encoder of the logger's sink."""

    def _apply(sink: Sink) -> None:
        sink.set_encoder(encoder)

    return _apply


def new_logger(component: str, *keys_and_values: Any, options: Iterable[Option] = ()) -> Logger:
    """Create a JSON logger for `component` writing to stdout at verbosity 0.

    `options` are applied in order, e.g. ``with_output(buf)``, ``with_verbosity(2)``.
    """
    sink = Sink(*keys_and_values, name=component)
    for opt in options:
        opt(sink)
    return Logger(sink)


def get_sink(logger: Logger) -> Sink:
    """Return the logger's concrete `Sink`.

    Raises:
        UnknownSinkTypeError: the logger was built around another sink type.
    """
    sink = logger.sink
    if not isinstance(sink, Sink):
        raise UnknownSinkTypeError(sink)
    return sink
