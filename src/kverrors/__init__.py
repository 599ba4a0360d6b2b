"""Structured errors.

`KVError` carries a message, key/value attributes and an optional cause. The
helpers here build, extend and inspect error chains that may mix KVErrors with
ordinary exceptions.
"""

from .context import Context, add_ctx, new_context
from .errors import KEY_CAUSE, KEY_MESSAGE, KVError, add, as_, is_, kvs, message, new, root, unwrap, wrap

__all__ = [
    "KEY_CAUSE",
    "KEY_MESSAGE",
    "Context",
    "KVError",
    "add",
    "add_ctx",
    "as_",
    "is_",
    "kvs",
    "message",
    "new",
    "new_context",
    "root",
    "unwrap",
    "wrap",
]
