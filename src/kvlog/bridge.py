"""Route stdlib `logging` records into a `LogSink`.

Usage:
    >>> import logging
    >>> from kvlog import Sink
    >>> from kvlog.bridge import SinkHandler
    >>> logging.getLogger().addHandler(SinkHandler(Sink(name="app")))
    >>> logging.getLogger("db").info("connected", extra={"kv": {"host": "db1"}})

Attributes are taken from the ``kv`` mapping passed through ``extra``.
"""

from __future__ import annotations

import logging

from kverrors.kv import from_map

from .sink import LogSink

# Attribute on a LogRecord holding structured key/value pairs.
KV_ATTR = "kv"


def v_level(levelno: int) -> int:
    """Map a stdlib level number onto a V-level (INFO and above are V(0))."""
    if levelno >= logging.INFO:
        return 0
    if levelno >= logging.DEBUG:
        return 1
    return 2


class SinkHandler(logging.Handler):
    """A logging handler that writes every record through a sink.

    Records at ERROR and above use the sink's error path with the record's
    exception (if any); lower levels go through `info` at the mapped V-level.
    """

    def __init__(self, sink: LogSink, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.sink = sink

    def emit(self, record: logging.LogRecord) -> None:
        try:
            attrs = ["logger", record.name]
            kv = getattr(record, KV_ATTR, None)
            if isinstance(kv, dict):
                attrs.extend(from_map(kv))
            msg = record.getMessage()
            if record.levelno >= logging.ERROR:
                err = record.exc_info[1] if record.exc_info else None
                self.sink.error(err, msg, *attrs)
            else:
                self.sink.info(v_level(record.levelno), msg, *attrs)
        except Exception:  # noqa: BLE001 - stdlib handler contract
            self.handleError(record)
