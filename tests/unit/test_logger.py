from __future__ import annotations

import io
import json
import math

import pytest

import kverrors
from kvlog import (
    InMemoryEncoder,
    Logger,
    Sink,
    UnknownSinkTypeError,
    get_sink,
    new_logger,
    with_encoder,
    with_output,
    with_verbosity,
)


def _observed_logger(component: str = "", verbosity: int = 0) -> tuple[InMemoryEncoder, Logger]:
    enc = InMemoryEncoder()
    logger = new_logger(component, options=[with_output(io.StringIO()), with_verbosity(verbosity), with_encoder(enc)])
    return enc, logger


def test_info_with_keys_and_values():
    obs, logger = _observed_logger()
    logger.info("hello, world", "city", "Athens")
    (record,) = obs.take_all()
    assert record.message == "hello, world"
    assert record.context == {"city": "Athens"}


def test_error_without_keys_and_values():
    obs, logger = _observed_logger()
    err = kverrors.new("an error")
    logger.error(err, "hello, world")
    (record,) = obs.take_all()
    assert record.message == "hello, world"
    assert record.context["_error"] is err


def test_error_with_keys_and_values():
    obs, logger = _observed_logger()
    logger.error(kverrors.new("an error"), "hello, world", "key", "value")
    (record,) = obs.take_all()
    assert record.context["key"] == "value"


def test_v_gates_info_but_not_error():
    obs, logger = _observed_logger(verbosity=0)
    verbose = logger.v(2)
    assert not verbose.enabled()
    verbose.info("Above current verbosity.")
    assert obs.snapshot() == []
    verbose.error(kverrors.new("an error"), "Error bypasses the enabled check.")
    assert len(obs.snapshot()) == 1


def test_v_levels_accumulate_and_ignore_negatives():
    _, logger = _observed_logger()
    assert logger.v(1).v(2).level == 3
    assert logger.v(-5).level == 0


def test_info_at_enabled_v_level():
    obs, logger = _observed_logger(verbosity=2)
    logger.v(1).info("detail")
    logger.v(3).info("too detailed")
    assert [r.message for r in obs.snapshot()] == ["detail"]


def test_with_values_and_with_name():
    obs, logger = _observed_logger(component="app")
    logger.with_name("db").with_values("hello", "world").info("m", "foo", "bar")
    (record,) = obs.take_all()
    assert record.component == "app_db"
    assert record.context == {"hello": "world", "foo": "bar"}


def test_derived_loggers_keep_v_level():
    _, logger = _observed_logger()
    assert logger.v(2).with_values("k", "v").level == 2
    assert logger.v(2).with_name("x").level == 2


def test_new_logger_writes_json_to_output():
    buf = io.StringIO()
    logger = new_logger("api", "version", "1.2", options=[with_output(buf), with_verbosity(1)])
    logger.info("started", "port", 8080)
    line = json.loads(buf.getvalue())
    assert line["_component"] == "api"
    assert line["_level"] == "1"
    assert line["_message"] == "started"
    assert line["version"] == "1.2"
    assert line["port"] == 8080


@pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
def test_unsupported_values_fall_back(value: float):
    buf = io.StringIO()
    logger = new_logger("", options=[with_output(buf)])
    logger.info("Test unsupported value", "value", value)
    logger.error(kverrors.new("an error"), "Test unsupported value", "key", value)
    lines = buf.getvalue().splitlines()
    assert len(lines) == 2
    assert all("failed to encode message" in line for line in lines)


def test_get_sink_returns_concrete_sink():
    _, logger = _observed_logger()
    sink = get_sink(logger)
    assert isinstance(sink, Sink)
    sink.set_verbosity(3)
    assert logger.v(3).enabled()


class _OtherSink:
    def enabled(self, level: int) -> bool:
        return True

    def info(self, level, msg, *keys_and_values) -> None:
        pass

    def error(self, err, msg, *keys_and_values) -> None:
        pass

    def with_values(self, *keys_and_values):
        return self

    def with_name(self, name: str):
        return self


def test_get_sink_rejects_unknown_sink_types():
    with pytest.raises(UnknownSinkTypeError) as exc_info:
        get_sink(Logger(_OtherSink()))
    err = exc_info.value
    assert err.message() == "unknown log sink type"
    assert kverrors.kvs(err)["sink_type"].endswith("_OtherSink")
    assert kverrors.kvs(err)["expected_type"] == "kvlog.sink.Sink"
