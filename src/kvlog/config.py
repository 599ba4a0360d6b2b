"""Logger configuration loading and validation.

This module is responsible for:

- Loading `.env` into the process environment (without overriding existing vars).
- Converting ``LOG_*`` environment variables into a typed Pydantic model.
- Building a logger from that model.
"""

from __future__ import annotations

import os
from typing import TypeVar

import dotenv
from pydantic import BaseModel, Field, field_validator

from .encoder import Writer
from .logger import Logger, new_logger, with_output, with_verbosity
from .models import DEVELOPER_VERBOSITY

_T = TypeVar("_T", int, float)


def _get_env_bool(name: str, default: bool) -> bool:
    """Read a boolean env var with a default."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    normalized = raw.strip().lower()
    if normalized in {"true", "1", "yes", "y", "on"}:
        return True
    if normalized in {"false", "0", "no", "n", "off"}:
        return False
    raise ValueError(f"{name} must be a boolean (true/false). Got: {raw!r}")


def _get_env_number(name: str, default: _T, cast: type[_T]) -> _T:
    """Read an int/float env var with a default."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a {cast.__name__}. Got: {raw!r}") from exc


class LogConfig(BaseModel):
    """Settings for a process's root logger."""

    component: str = Field(default="", description="Component name written under _component")
    verbosity: int = Field(default=0, description="Highest V-level that is written")
    dev: bool = Field(default=False, description="Developer mode (adds _file:line)")

    @field_validator("verbosity")
    def validate_verbosity(cls, v: int) -> int:
        """Reject negative verbosity levels."""
        if v < 0:
            raise ValueError(f"LOG_VERBOSITY must be >= 0. Got: {v}")
        return v

    @property
    def effective_verbosity(self) -> int:
        """Verbosity after applying developer mode."""
        if self.dev:
            return max(self.verbosity, DEVELOPER_VERBOSITY)
        return self.verbosity


def load_config() -> LogConfig:
    """Load logger configuration from environment variables.

    Notes:
    - Calls `dotenv.load_dotenv()` so local `.env` values are visible to the process.
    - Raises `ValueError` with actionable messages for malformed values.
    """
    dotenv.load_dotenv()

    return LogConfig(
        component=os.getenv("LOG_COMPONENT", "").strip(),
        verbosity=_get_env_number("LOG_VERBOSITY", 0, int),
        dev=_get_env_bool("LOG_DEV", False),
    )


def new_logger_from_config(cfg: LogConfig, output: Writer | None = None) -> Logger:
    """Create a logger configured by `cfg`, optionally writing to `output`."""
    options = [with_verbosity(cfg.effective_verbosity)]
    if output is not None:
        options.append(with_output(output))
    return new_logger(cfg.component, options=options)
