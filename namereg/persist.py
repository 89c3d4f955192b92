"""
namereg.persist — JSON snapshots of a Host (committed storage + event log).

The registry core does no I/O; persistence belongs to whoever hosts it. This
module is what the CLI uses to keep one host alive across invocations.

Snapshot format (version 1):

    {
      "version": 1,
      "storage": {"<key hex>": "<value hex>", ...},      # sorted by key
      "events":  [{"name": "0x..", "args": [{"k", "t", "v"}, ...]}, ...],
      "digest":  "<sha3-256 hex over the canonical storage+events JSON>"
    }

Only committed state is captured; calling `dump_host` from inside a host call
raises.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Mapping, Union

from .errors import StorageError
from .runtime.events_api import EventSink, decode_event
from .runtime.hash_api import sha3_256
from .runtime.host import Host
from .runtime.storage_api import MemoryBackend

SNAPSHOT_VERSION = 1


def _digest(storage: Mapping[str, str], events: Any) -> str:
    body = json.dumps({"storage": storage, "events": events}, sort_keys=True, separators=(",", ":"))
    return sha3_256(body.encode("utf-8")).hex()


def dump_host(host: Host) -> Dict[str, Any]:
    with host.lock:
        if host.storage.depth():
            raise StorageError("cannot snapshot a host with an open call")
        storage = {k.hex(): v.hex() for k, v in host.storage.items()}
        events = [ev.to_dict() for ev in host.events.for_receipt()]
    return {
        "version": SNAPSHOT_VERSION,
        "storage": storage,
        "events": events,
        "digest": _digest(storage, events),
    }


def load_host(data: Mapping[str, Any]) -> Host:
    if data.get("version") != SNAPSHOT_VERSION:
        raise StorageError("unsupported snapshot version", data={"version": data.get("version")})
    storage = data.get("storage") or {}
    events = data.get("events") or []
    expected = data.get("digest")
    if expected is not None and expected != _digest(storage, events):
        raise StorageError("snapshot digest mismatch")
    try:
        initial = {bytes.fromhex(k): bytes.fromhex(v) for k, v in storage.items()}
    except (AttributeError, ValueError) as e:
        raise StorageError("malformed snapshot storage", data={"error": str(e)}) from e
    sink = EventSink([decode_event(ev, seq=i) for i, ev in enumerate(events)])
    return Host(MemoryBackend(initial), sink=sink)


def save(path: Union[str, Path], host: Host) -> Path:
    """Write the snapshot atomically (temp file + rename)."""
    p = Path(path).expanduser()
    p.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(dump_host(host), indent=2, sort_keys=True)
    fd, tmp = tempfile.mkstemp(prefix=p.name + ".", suffix=".tmp", dir=str(p.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(payload)
            fh.write("\n")
        os.replace(tmp, p)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise
    return p


def load(path: Union[str, Path]) -> Host:
    p = Path(path).expanduser()
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise StorageError("state file is not valid JSON", data={"path": str(p)}) from e
    if not isinstance(data, dict):
        raise StorageError("state file must hold a JSON object", data={"path": str(p)})
    return load_host(data)


__all__ = [
    "SNAPSHOT_VERSION",
    "dump_host",
    "load_host",
    "save",
    "load",
]
