# -*- coding: utf-8 -*-
"""
Host call boundary
- a failing call leaves neither storage writes nor events behind
- nested calls checkpoint independently
- events are published to subscribers only once the outermost call commits
"""
from __future__ import annotations

import threading

import pytest

from namereg.errors import NotFound
from namereg.runtime import CallContext, Host
from namereg.runtime.storage_api import MemoryBackend


def _write_and_emit(host: Host, key: bytes, fail: Exception = None):
    host.storage.set(key, b"\x01")
    host.events.emit(b"Touched", {"key": key})
    if fail is not None:
        raise fail
    return key


def test_successful_call_commits_to_backend():
    backend = MemoryBackend()
    host = Host(backend)
    assert host.call(None, "touch", _write_and_emit, host, b"k1") == b"k1"
    assert backend.get(b"k1") == b"\x01"
    assert [ev.name for ev in host.events.committed()] == [b"Touched"]
    assert host.storage.depth() == 0


def test_registry_error_reverts_everything():
    backend = MemoryBackend()
    host = Host(backend)
    with pytest.raises(NotFound):
        host.call(None, "touch", _write_and_emit, host, b"k1", NotFound())
    assert backend.get(b"k1") is None
    assert len(host.events) == 0
    assert host.storage.depth() == 0


def test_unexpected_error_reverts_and_propagates():
    host = Host()
    with pytest.raises(ZeroDivisionError):
        host.call(None, "touch", _write_and_emit, host, b"k1", ZeroDivisionError("boom"))
    assert not host.storage.exists(b"k1")
    assert len(host.events) == 0


def test_nested_inner_failure_keeps_outer_work():
    host = Host()

    def outer():
        host.storage.set(b"outer", b"\x01")
        with pytest.raises(NotFound):
            host.call(None, "inner", _write_and_emit, host, b"inner", NotFound())
        return host.call(None, "inner_ok", _write_and_emit, host, b"inner2")

    host.call(CallContext(b"\x01" * 20), "outer", outer)
    assert host.storage.get(b"outer") == b"\x01"
    assert host.storage.get(b"inner") is None
    assert host.storage.get(b"inner2") == b"\x01"
    assert [ev.args["key"] for ev in host.events.committed()] == [b"inner2"]


def test_events_invisible_until_outer_commit():
    host = Host()
    seen = []
    host.events.subscribe(seen.append)

    def outer():
        host.call(None, "inner", _write_and_emit, host, b"a")
        # inner committed into the outer checkpoint only
        assert seen == []
        assert len(host.events) == 0
        raise NotFound()

    with pytest.raises(NotFound):
        host.call(None, "outer", outer)
    assert seen == []
    assert len(host.events) == 0

    host.call(None, "touch", _write_and_emit, host, b"b")
    assert [ev.args["key"] for ev in seen] == [b"b"]


def test_unsubscribe():
    host = Host()
    seen = []
    off = host.events.subscribe(seen.append)
    host.call(None, "touch", _write_and_emit, host, b"a")
    off()
    host.call(None, "touch", _write_and_emit, host, b"b")
    assert len(seen) == 1


def test_calls_are_serialized(key_reg, owner):
    errors = []

    def worker(i: int):
        try:
            for j in range(20):
                key_reg.create(owner, f"t{i}-{j}.eth", b"\x01")
        except Exception as e:  # pragma: no cover - surfaced below
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert key_reg.count() == 80
    assert len(set(key_reg.list_all())) == 80
    assert [ev.seq for ev in key_reg.host.events.committed()] == list(range(80))


def test_failing_subscriber_does_not_fail_the_call(key_reg, owner):
    seen = []

    def boom(ev):
        raise RuntimeError("consumer down")

    key_reg.host.events.subscribe(boom)
    key_reg.host.events.subscribe(seen.append)

    assert key_reg.create(owner, "a.eth", b"\x01") is True
    assert key_reg.exists("a.eth")
    # later subscribers still receive the event
    assert [ev.name for ev in seen] == [b"Registered"]

    key_reg.update(owner, "a.eth", b"\x02")
    assert key_reg.get("a.eth") == b"\x02"
    assert len(seen) == 2
