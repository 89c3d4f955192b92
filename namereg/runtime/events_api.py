"""
namereg.runtime.events_api — the append-only audit log.

Every successful mutation appends exactly one event, in program order. Events
staged by a call that later fails are dropped together with its storage
writes, so consumers only ever observe events of committed calls.

Subscribers registered with `EventSink.subscribe` are invoked once per event
when it becomes durable (outermost checkpoint commit), which is also when the
event is logged. A subscriber that raises is logged and skipped; it never
changes the outcome of the call that produced the event.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from ..errors import EventError

log = logging.getLogger(__name__)

MAX_EVENT_NAME_BYTES = 64
MAX_KEY_LEN = 64
MAX_BYTES_LEN = 1 << 20
MAX_INT_BITS = 256

# Keys must be identifier-like: letters/underscore, then letters/digits/underscore.
_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

ArgValue = Any  # constrained at runtime


@dataclass(frozen=True)
class Event:
    """In-process representation of an emitted event."""

    name: bytes
    args: Dict[str, ArgValue]
    seq: int = 0

    def arg(self, key: str) -> ArgValue:
        return self.args[key]


@dataclass(frozen=True)
class CanonicalEvent:
    """
    Canonical event representation for receipts and persisted state:

        name: "0x" + hex-encoded event name bytes
        args: sequence of {"k", "t", "v"} dicts
              t="b" => bytes encoded as 0x-prefixed hex
              t="s" => text string
              t="i" => integer
              t="z" => boolean
    """

    name: str
    args: Sequence[Mapping[str, Any]]

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "args": [dict(a) for a in self.args]}


def _check_name(name: Any) -> bytes:
    if not isinstance(name, (bytes, bytearray)):
        raise EventError("event name must be bytes", data={"where": "name_type"})
    b = bytes(name)
    if len(b) == 0:
        raise EventError("event name must be non-empty", data={"where": "name_empty"})
    if len(b) > MAX_EVENT_NAME_BYTES:
        raise EventError("event name too long", data={"where": "name_length", "len": len(b)})
    return b


def _check_key(key: Any) -> str:
    if not isinstance(key, str) or not key:
        raise EventError("event key must be a non-empty str", data={"where": "key_type"})
    if len(key) > MAX_KEY_LEN:
        raise EventError("event key too long", data={"where": "key_length", "len": len(key)})
    if not _KEY_RE.match(key):
        raise EventError("event key has invalid characters", data={"where": "key_grammar", "key": key})
    return key


def _check_value(value: Any) -> ArgValue:
    if isinstance(value, (bytes, bytearray)):
        b = bytes(value)
        if len(b) > MAX_BYTES_LEN:
            raise EventError("event bytes arg too long", data={"where": "value_bytes_length", "len": len(b)})
        return b
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        # bool is a subclass of int, so check it before int.
        return value
    if isinstance(value, int):
        if value.bit_length() > MAX_INT_BITS:
            raise EventError("event int arg out of range", data={"where": "value_int_bits"})
        return int(value)
    raise EventError("unsupported event arg type", data={"where": "value_type", "py_type": type(value).__name__})


def encode_event(ev: Event) -> CanonicalEvent:
    enc_args: List[Dict[str, Any]] = []
    for k, v in ev.args.items():
        if isinstance(v, bytes):
            enc_args.append({"k": k, "t": "b", "v": "0x" + v.hex()})
        elif isinstance(v, str):
            enc_args.append({"k": k, "t": "s", "v": v})
        elif isinstance(v, bool):
            enc_args.append({"k": k, "t": "z", "v": v})
        else:
            enc_args.append({"k": k, "t": "i", "v": int(v)})
    return CanonicalEvent(name="0x" + ev.name.hex(), args=tuple(enc_args))


def decode_event(data: Mapping[str, Any], seq: int = 0) -> Event:
    """Inverse of `encode_event(...).to_dict()`."""
    try:
        name = bytes.fromhex(str(data["name"])[2:])
        args: Dict[str, ArgValue] = {}
        for a in data["args"]:
            t, v = a["t"], a["v"]
            if t == "b":
                args[a["k"]] = bytes.fromhex(v[2:])
            elif t == "s":
                args[a["k"]] = str(v)
            elif t == "z":
                args[a["k"]] = bool(v)
            elif t == "i":
                args[a["k"]] = int(v)
            else:
                raise EventError("unknown event arg tag", data={"t": t})
    except (KeyError, TypeError, ValueError) as e:
        raise EventError("malformed canonical event", data={"error": str(e)}) from e
    return Event(name=_check_name(name), args=args, seq=seq)


Subscriber = Callable[[Event], None]


class EventSink:
    """
    Append-only event log with checkpoints mirroring `JournaledStorage`.
    """

    def __init__(self, initial: Sequence[Event] = ()) -> None:
        self._events: List[Event] = []
        self._marks: List[int] = []
        self._subscribers: List[Subscriber] = []
        for ev in initial:
            self._events.append(Event(ev.name, dict(ev.args), seq=len(self._events)))

    # --- checkpointing ---

    def begin(self) -> int:
        self._marks.append(len(self._events))
        return len(self._marks)

    def commit(self) -> None:
        if not self._marks:
            raise EventError("commit without an open checkpoint")
        start = self._marks.pop()
        if self._marks:
            return
        for ev in self._events[start:]:
            log.info("event emitted", extra={"event": ev.name.decode("ascii", "replace"), "seq": ev.seq})
            for fn in list(self._subscribers):
                try:
                    fn(ev)
                except Exception:
                    # The call is already committed; a consumer cannot undo it.
                    log.exception("subscriber failed", extra={"event": ev.name.decode("ascii", "replace"), "seq": ev.seq})

    def revert(self) -> None:
        if not self._marks:
            raise EventError("revert without an open checkpoint")
        del self._events[self._marks.pop():]

    # --- core ---

    def emit(self, name: bytes, args: Mapping[Any, Any]) -> Event:
        bname = _check_name(name)
        if not isinstance(args, Mapping):
            raise EventError("event args must be a mapping", data={"where": "args_type"})
        checked: Dict[str, ArgValue] = {}
        for raw_k, raw_v in args.items():
            checked[_check_key(raw_k)] = _check_value(raw_v)
        ev = Event(bname, checked, seq=len(self._events))
        self._events.append(ev)
        return ev

    def subscribe(self, fn: Subscriber) -> Callable[[], None]:
        """Register `fn`; returns a callable that unsubscribes it."""
        self._subscribers.append(fn)

        def _unsubscribe() -> None:
            if fn in self._subscribers:
                self._subscribers.remove(fn)

        return _unsubscribe

    # --- views ---

    def committed(self) -> Tuple[Event, ...]:
        """Events of committed calls (excludes anything staged in open checkpoints)."""
        end = self._marks[0] if self._marks else len(self._events)
        return tuple(self._events[:end])

    def named(self, name: bytes) -> List[Event]:
        return [ev for ev in self.committed() if ev.name == name]

    def since(self, seq: int) -> List[Event]:
        return [ev for ev in self.committed() if ev.seq >= seq]

    def last(self) -> Optional[Event]:
        evs = self.committed()
        return evs[-1] if evs else None

    def for_receipt(self) -> List[CanonicalEvent]:
        return [encode_event(ev) for ev in self.committed()]

    def __len__(self) -> int:
        return len(self.committed())


__all__ = [
    "Event",
    "CanonicalEvent",
    "EventSink",
    "encode_event",
    "decode_event",
    "MAX_EVENT_NAME_BYTES",
    "MAX_KEY_LEN",
    "MAX_BYTES_LEN",
    "MAX_INT_BITS",
]
