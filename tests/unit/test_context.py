from __future__ import annotations

import kverrors


def test_context_new_carries_context_and_call_attributes():
    ctx = kverrors.new_context("foo", "bar")
    err = ctx.new("a broken mess", "baz", "foo")
    assert kverrors.kvs(err) == {"msg": "a broken mess", "foo": "bar", "baz": "foo"}


def test_context_wrap_carries_cause():
    cause = BlockingIOError("no progress")
    ctx = kverrors.new_context("foo", "bar")
    err = ctx.wrap(cause, "a broken mess", "baz", "foo")
    errkvs = kverrors.kvs(err)
    assert errkvs["msg"] == "a broken mess"
    assert errkvs["foo"] == "bar"
    assert errkvs["baz"] == "foo"
    assert kverrors.unwrap(err) is cause


def test_context_wrap_of_none_is_none():
    assert kverrors.new_context("foo", "bar").wrap(None, "nothing") is None


def test_call_attributes_win_over_context():
    ctx = kverrors.new_context("foo", "bar")
    err = ctx.new("boom", "foo", "override")
    assert kverrors.kvs(err)["foo"] == "override"


def test_context_is_reusable():
    ctx = kverrors.new_context("request_id", "r1")
    first = ctx.new("first", "n", 1)
    second = ctx.new("second")
    assert "n" not in kverrors.kvs(second)
    assert kverrors.kvs(first)["request_id"] == kverrors.kvs(second)["request_id"] == "r1"


def test_add_ctx_merges_into_existing_error():
    ctx = kverrors.new_context("k1", "v1", "k2", "v2")
    err = kverrors.new("failed something or other")
    same = kverrors.add_ctx(err, ctx)
    assert same is err
    for k, v in ctx.kvs().items():
        assert kverrors.kvs(err)[k] == v
