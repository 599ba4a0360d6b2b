"""Structured JSON logging.

Each record becomes one JSON object with pinned built-in fields (``_ts``,
``_level``, ``_component``, ``_message`` and, in developer mode, ``_file:line``)
and the caller's attributes flattened beside them. Errors are logged under
``_error`` as structured KVErrors.

Example:
    >>> from kvlog import new_logger, with_verbosity
    >>> log = new_logger("api", options=[with_verbosity(1)])
    >>> log.info("started", "port", 8080)

Output:
    {"_ts":"...","_level":"1","_component":"api","_message":"started","port":8080}
"""

from .config import LogConfig, load_config, new_logger_from_config
from .encoder import EncodeError, Encoder, InMemoryEncoder, JSONEncoder, Writer
from .logger import (
    Logger,
    Option,
    UnknownSinkTypeError,
    get_sink,
    new_logger,
    with_encoder,
    with_output,
    with_verbosity,
)
from .models import (
    COMPONENT_KEY,
    ERROR_KEY,
    FILE_LINE_KEY,
    LEVEL_KEY,
    MESSAGE_KEY,
    TIMESTAMP_KEY,
    Record,
    Verbosity,
)
from .sink import LogSink, Sink

__all__ = [
    "COMPONENT_KEY",
    "ERROR_KEY",
    "FILE_LINE_KEY",
    "LEVEL_KEY",
    "MESSAGE_KEY",
    "TIMESTAMP_KEY",
    "EncodeError",
    "Encoder",
    "InMemoryEncoder",
    "JSONEncoder",
    "LogConfig",
    "LogSink",
    "Logger",
    "Option",
    "Record",
    "Sink",
    "UnknownSinkTypeError",
    "Verbosity",
    "Writer",
    "get_sink",
    "load_config",
    "new_logger",
    "new_logger_from_config",
    "with_encoder",
    "with_output",
    "with_verbosity",
]
