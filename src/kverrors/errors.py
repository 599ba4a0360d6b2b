"""Structured errors carrying key/value attributes.

A `KVError` is an exception whose payload is a small attribute map:

- ``msg``: the human-readable message (always present).
- ``cause``: an optional underlying exception, forming a chain.
- any number of caller-supplied attributes.

The free functions in this module accept any exception, so callers can inspect
chains that mix KVErrors with foreign exceptions.
"""

from __future__ import annotations

import base64
import json
from datetime import date, datetime
from typing import Any, TypeVar

from pydantic import BaseModel

from .kv import to_map

KEY_MESSAGE = "msg"
KEY_CAUSE = "cause"

_E = TypeVar("_E", bound=BaseException)


class KVError(Exception):
    """An exception that carries structured key/value attributes."""

    def __init__(self, msg: str, *keys_and_values: Any) -> None:
        """Create an error with message `msg` and the given attribute pairs.

        `msg` is applied last so an attribute named ``msg`` cannot replace it.
        """
        super().__init__(msg)
        kv: dict[str, Any] = {KEY_MESSAGE: msg}
        kv.update(to_map(*keys_and_values))
        kv[KEY_MESSAGE] = msg
        self._kv = kv
        self._sync_cause()

    def kvs(self) -> dict[str, Any]:
        """Return the attribute map.

        This is the live map, not a copy; treat it as read-only.
        """
        return self._kv

    def message(self) -> str:
        """Return the ``msg`` attribute, or an empty string when it is missing."""
        msg = self._kv.get(KEY_MESSAGE)
        if msg is None:
            return ""
        return str(msg)

    def unwrap(self) -> BaseException | None:
        """Return the exception stored under ``cause``, if any."""
        cause = self._kv.get(KEY_CAUSE)
        if isinstance(cause, BaseException):
            return cause
        return None

    def add(self, *keys_and_values: Any) -> KVError:
        """Merge attribute pairs into this error in place and return it.

        Collisions overwrite, including ``msg`` and ``cause``.
        """
        self._kv.update(to_map(*keys_and_values))
        self._sync_cause()
        return self

    def to_json(self) -> str:
        """Serialise the attribute map, nesting KVError causes recursively."""
        return json.dumps(self._kv, separators=(",", ":"), allow_nan=False, default=json_default)

    def log_fields(self) -> dict[str, Any]:
        """Return the attributes as log fields, keeping nested KVErrors structured."""
        fields: dict[str, Any] = {}
        for k, v in self._kv.items():
            if isinstance(v, KVError):
                fields[k] = v.log_fields()
            elif isinstance(v, BaseException):
                fields[k] = str(v)
            else:
                fields[k] = v
        return fields

    def _sync_cause(self) -> None:
        # Mirror the chain into __cause__ so tracebacks show it.
        self.__cause__ = self.unwrap()

    def __str__(self) -> str:
        base = self.unwrap()
        if base is not None:
            return f"{self.message()}: {base}"
        return self.message()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._kv!r})"


def json_default(obj: Any) -> Any:
    """Widen values the json module cannot encode directly.

    KVErrors become their attribute map, other exceptions their text. Anything
    without a dedicated rule is rendered with `str()`.
    """
    if isinstance(obj, KVError):
        return obj.kvs()
    if isinstance(obj, BaseException):
        return str(obj)
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    if isinstance(obj, (bytes, bytearray)):
        return base64.b64encode(bytes(obj)).decode("ascii")
    return str(obj)


def new(msg: str, *keys_and_values: Any) -> KVError:
    """Create a KVError with a message and key/value attributes."""
    return KVError(msg, *keys_and_values)


def wrap(err: BaseException | None, msg: str, *keys_and_values: Any) -> KVError | None:
    """Wrap `err` in a new KVError; returns None when `err` is None.

    The wrapped error is stored under ``cause`` and cannot be replaced by the
    supplied attributes.
    """
    if err is None:
        return None
    e = KVError(msg, *keys_and_values)
    e._kv.pop(KEY_CAUSE, None)
    e._kv[KEY_CAUSE] = err
    e._sync_cause()
    return e


def add(err: BaseException, *keys_and_values: Any) -> KVError:
    """Add attributes to `err`.

    A KVError is modified in place. Any other exception is converted into a new
    KVError whose message is the exception's text.
    """
    if isinstance(err, KVError):
        return err.add(*keys_and_values)
    return KVError(str(err), *keys_and_values)


def unwrap(err: BaseException | None) -> BaseException | None:
    """Return the next exception in the chain.

    KVErrors unwrap to their ``cause``; other exceptions to ``__cause__``.
    """
    if err is None:
        return None
    if isinstance(err, KVError):
        return err.unwrap()
    return err.__cause__


def _chain(err: BaseException | None):
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        yield err
        err = unwrap(err)


def is_(err: BaseException | None, target: BaseException | None) -> bool:
    """Report whether any exception in `err`'s chain matches `target`."""
    if err is None or target is None:
        return err is target
    return any(e is target or e == target for e in _chain(err))


def as_(err: BaseException | None, cls: type[_E]) -> _E | None:
    """Return the first exception in `err`'s chain that is an instance of `cls`."""
    for e in _chain(err):
        if isinstance(e, cls):
            return e
    return None


def root(err: BaseException | None) -> BaseException | None:
    """Unwrap `err` until the end of the chain and return the last exception."""
    last = None
    for e in _chain(err):
        last = e
    return last


def kvs(err: BaseException | None) -> dict[str, Any] | None:
    """Return the attribute map of a KVError, or None for any other value."""
    if isinstance(err, KVError):
        return err.kvs()
    return None


def message(err: BaseException) -> str:
    """Return a KVError's message, or the text of any other exception."""
    if isinstance(err, KVError):
        return err.message()
    return str(err)
