# -*- coding: utf-8 -*-
from __future__ import annotations

import io
import json
import logging

import pytest

from namereg import logging as nlog
from namereg.errors import NotFound
from namereg.runtime import Host


@pytest.fixture
def stream():
    nlog.clear_context()
    buf = io.StringIO()
    yield buf
    nlog.clear_context()
    logger = logging.getLogger("namereg")
    for h in list(logger.handlers):
        logger.removeHandler(h)


def _lines(buf: io.StringIO):
    return [json.loads(line) for line in buf.getvalue().splitlines() if line.strip()]


def test_json_lines_carry_context_and_extras(stream):
    nlog.configure(json=True, level="DEBUG", stream=stream)
    log = nlog.get_logger("namereg.test")
    with nlog.trace_scope("t-1"):
        nlog.bind(component="test")
        log.info("hello", extra={"blob": b"\x01\x02"})
    rec = _lines(stream)[0]
    assert rec["msg"] == "hello"
    assert rec["level"] == "INFO"
    assert rec["trace_id"] == "t-1"
    assert rec["component"] == "test"
    assert rec["blob"] == "0x0102"
    # trace_scope restores the prior context
    assert "trace_id" not in nlog.context()


def test_text_format(stream):
    nlog.configure(json=False, level="INFO", stream=stream)
    nlog.bind(op="create")
    nlog.get_logger("namereg.test").warning("careful", extra={"code": "X"})
    line = stream.getvalue().strip()
    assert "WARNING" in line and "op=create" in line and "careful code=X" in line


def test_format_from_env(stream, monkeypatch):
    monkeypatch.setenv("NAMEREG_LOG_FORMAT", "json")
    nlog.configure(level="INFO", stream=stream)
    nlog.get_logger("namereg.test").info("x")
    assert _lines(stream)[0]["msg"] == "x"


def test_level_filters(stream):
    nlog.configure(json=True, level="WARNING", stream=stream)
    nlog.get_logger("namereg.test").info("quiet")
    assert stream.getvalue() == ""


def test_host_logs_reverts_and_events(stream, key_reg, owner):
    nlog.configure(json=True, level="DEBUG", stream=stream)
    key_reg.create(owner, "a.eth", b"\x01")
    with pytest.raises(NotFound):
        key_reg.remove(owner, "b.eth")

    recs = _lines(stream)
    emitted = [r for r in recs if r["msg"] == "event emitted"]
    assert emitted and emitted[0]["event"] == "Registered"
    reverted = [r for r in recs if r["msg"] == "call reverted"]
    assert reverted and reverted[0]["code"] == "NOT_FOUND"
    assert reverted[0]["op"] == "remove"


def test_unbind(stream):
    nlog.bind(a=1, b=2)
    nlog.unbind("a")
    assert nlog.context() == {"b": 2}
    assert len(nlog.short_uuid()) == 12
