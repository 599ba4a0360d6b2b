"""Reusable attribute bags for building KVErrors."""

from __future__ import annotations

from typing import Any

from .errors import KVError, add, new, wrap
from .kv import from_map, to_map


class Context:
    """A prebuilt set of attributes shared by several errors.

    Errors created through a context carry its attributes followed by the
    call-site attributes; the call site wins on collision.
    """

    def __init__(self, *keys_and_values: Any) -> None:
        self._kv = to_map(*keys_and_values)

    def kvs(self) -> dict[str, Any]:
        """Return a copy of the context attributes."""
        return dict(self._kv)

    def new(self, msg: str, *keys_and_values: Any) -> KVError:
        """Create a KVError carrying this context's attributes."""
        return new(msg, *from_map(self._kv), *keys_and_values)

    def wrap(self, err: BaseException | None, msg: str, *keys_and_values: Any) -> KVError | None:
        """Wrap `err` in a KVError carrying this context's attributes."""
        return wrap(err, msg, *from_map(self._kv), *keys_and_values)

    def __repr__(self) -> str:
        return f"Context({self._kv!r})"


def new_context(*keys_and_values: Any) -> Context:
    """Create a context from alternating key/value pairs."""
    return Context(*keys_and_values)


def add_ctx(err: BaseException, ctx: Context) -> KVError:
    """Add all of `ctx`'s attributes to `err` (in place for a KVError)."""
    return add(err, *from_map(ctx._kv))
