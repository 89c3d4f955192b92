"""
namereg CLI
-----------

Drive a registry host persisted in a JSON state file. The CLI is the trusted
boundary for local use: `--caller` (or NAMEREG_CALLER) is taken as the
authenticated identity of the operator.

Examples
--------
# Create a state file owned by 0xaa..aa
namereg --state reg.json init --owner 0xaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa

# Variant A (domain → bytes), values as hex
namereg --state reg.json create waku.eth 0x02abcdef --caller 0xaaaa...
namereg --state reg.json get waku.eth
namereg --state reg.json list

# Variant B (keccak(domain) → string)
namereg --state reg.json create waku.eth 10.0.0.1 --variant hashed --caller 0xaaaa...
namereg --state reg.json canonicalize waku.eth

Exit codes:
  0 on success, 1 when the registry rejects the call, 2 on usage errors.
"""

from __future__ import annotations

import json
import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, NoReturn, Optional

import typer

from .. import persist
from ..access.ownable import Ownable
from ..config import load_config
from ..errors import InvalidIdentity, RegistryError
from ..logging import bind, configure
from ..registry import HashedRegistry, KeyRegistry, canonicalize
from ..runtime.events_api import encode_event
from ..runtime.host import Host
from ..runtime.identity import CallContext, to_hex, to_identity

log = logging.getLogger(__name__)

app = typer.Typer(
    name="namereg",
    add_completion=False,
    no_args_is_help=True,
    help="Access-controlled name registry (owner-gated, event-logged).",
)


class Variant(str, Enum):
    key = "key"
    hashed = "hashed"


# -------------------- utils --------------------


def _state(ctx: typer.Context) -> Dict[str, Any]:
    return ctx.ensure_object(dict)


def _emit(ctx: typer.Context, payload: Any, text: Optional[str] = None) -> None:
    if _state(ctx).get("json") or text is None:
        typer.echo(json.dumps(payload, sort_keys=True))
    else:
        typer.echo(text)


def _fail(err: RegistryError) -> NoReturn:
    typer.echo(json.dumps(err.to_dict(), sort_keys=True), err=True)
    raise typer.Exit(code=1)


def _parse_hex_value(raw: str) -> bytes:
    h = raw[2:] if raw.startswith(("0x", "0X")) else raw
    try:
        return bytes.fromhex(h)
    except ValueError as e:
        raise typer.BadParameter(f"value must be hex bytes, got {raw!r}") from e


def _identity_param(raw: str, flag: str) -> bytes:
    try:
        return to_identity(raw)
    except InvalidIdentity as e:
        raise typer.BadParameter(f"invalid identity {raw!r}", param_hint=flag) from e


def _caller(ctx: typer.Context, caller: Optional[str]) -> CallContext:
    raw = caller or load_config().default_caller
    if not raw:
        raise typer.BadParameter("--caller is required (or set NAMEREG_CALLER)")
    return CallContext(_identity_param(raw, "--caller"))


class _Session:
    """A host loaded from the state file plus both registries sharing one owner."""

    def __init__(self, path: Path, host: Host) -> None:
        self.path = path
        self.host = host
        self.ownable = Ownable(host)
        self.keys = KeyRegistry(ownable=self.ownable)
        self.hashed = HashedRegistry(ownable=self.ownable)

    def registry(self, variant: Variant):
        return self.keys if variant is Variant.key else self.hashed

    def save(self) -> None:
        persist.save(self.path, self.host)
        log.debug("state saved", extra={"path": str(self.path)})


def _open(ctx: typer.Context) -> _Session:
    path: Path = _state(ctx)["path"]
    if not path.is_file():
        typer.echo(f"state file {path} not found; run `namereg init --owner <hex>` first", err=True)
        raise typer.Exit(code=2)
    try:
        return _Session(path, persist.load(path))
    except RegistryError as e:
        _fail(e)


def _mutation(ctx: typer.Context, fn: Callable[[_Session], Any]) -> Any:
    sess = _open(ctx)
    try:
        out = fn(sess)
    except RegistryError as e:
        _fail(e)
    sess.save()
    return out


def _query(ctx: typer.Context, fn: Callable[[_Session], Any]) -> Any:
    sess = _open(ctx)
    try:
        return fn(sess)
    except RegistryError as e:
        _fail(e)


# -------------------- app --------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    state: Optional[Path] = typer.Option(None, "--state", help="State file (default: NAMEREG_STATE_PATH)."),
    json_out: bool = typer.Option(False, "--json", help="Machine-readable output."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level (default: NAMEREG_LOG_LEVEL)."),
) -> None:
    cfg = load_config()
    configure(json=None if cfg.log_format is None else cfg.log_format == "json", level=log_level or cfg.log_level)
    bind(component="cli")
    obj = _state(ctx)
    obj["path"] = (state or cfg.state_path).expanduser()
    obj["json"] = json_out


@app.command("init")
def cmd_init(
    ctx: typer.Context,
    owner: str = typer.Option(..., "--owner", help="Initial owner identity (hex)."),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing state file."),
) -> None:
    """Create a fresh state file owned by OWNER."""
    path: Path = _state(ctx)["path"]
    if path.exists() and not force:
        typer.echo(f"state file {path} already exists (use --force)", err=True)
        raise typer.Exit(code=2)
    who = _identity_param(owner, "--owner")
    host = Host()
    try:
        Ownable(host, who)
    except RegistryError as e:
        _fail(e)
    persist.save(path, host)
    _emit(ctx, {"path": str(path), "owner": to_hex(who)}, f"initialized {path}")


@app.command("create")
def cmd_create(
    ctx: typer.Context,
    domain: str = typer.Argument(..., help="Domain name."),
    value: str = typer.Argument(..., help="Hex bytes (key variant) or string (hashed variant)."),
    variant: Variant = typer.Option(Variant.key, "--variant"),
    caller: Optional[str] = typer.Option(None, "--caller", help="Caller identity (hex)."),
) -> None:
    """Register DOMAIN with VALUE."""
    who = _caller(ctx, caller)
    v: Any = _parse_hex_value(value) if variant is Variant.key else value
    _mutation(ctx, lambda s: s.registry(variant).create(who, domain, v))
    _emit(ctx, {"ok": True, "op": "create", "domain": domain}, "ok")


@app.command("update")
def cmd_update(
    ctx: typer.Context,
    domain: str = typer.Argument(...),
    value: str = typer.Argument(...),
    variant: Variant = typer.Option(Variant.key, "--variant"),
    caller: Optional[str] = typer.Option(None, "--caller"),
) -> None:
    """Replace the value of a registered DOMAIN."""
    who = _caller(ctx, caller)
    v: Any = _parse_hex_value(value) if variant is Variant.key else value
    _mutation(ctx, lambda s: s.registry(variant).update(who, domain, v))
    _emit(ctx, {"ok": True, "op": "update", "domain": domain}, "ok")


@app.command("remove")
def cmd_remove(
    ctx: typer.Context,
    domain: str = typer.Argument(...),
    variant: Variant = typer.Option(Variant.key, "--variant"),
    caller: Optional[str] = typer.Option(None, "--caller"),
) -> None:
    """Remove a registered DOMAIN."""
    who = _caller(ctx, caller)
    _mutation(ctx, lambda s: s.registry(variant).remove(who, domain))
    _emit(ctx, {"ok": True, "op": "remove", "domain": domain}, "ok")


@app.command("get")
def cmd_get(
    ctx: typer.Context,
    domain: str = typer.Argument(...),
    variant: Variant = typer.Option(Variant.key, "--variant"),
) -> None:
    """Print the value of DOMAIN."""
    value = _query(ctx, lambda s: s.registry(variant).get(domain))
    shown = to_hex(value) if variant is Variant.key else value
    _emit(ctx, {"domain": domain, "value": shown}, shown)


@app.command("exists")
def cmd_exists(
    ctx: typer.Context,
    domain: str = typer.Argument(...),
    variant: Variant = typer.Option(Variant.key, "--variant"),
) -> None:
    """Print whether DOMAIN is currently registered."""
    live = _query(ctx, lambda s: s.registry(variant).exists(domain))
    _emit(ctx, {"domain": domain, "exists": live}, "true" if live else "false")


@app.command("list")
def cmd_list(
    ctx: typer.Context,
    start: int = typer.Option(0, "--start", min=0),
    limit: Optional[int] = typer.Option(None, "--limit", min=0),
    live_only: bool = typer.Option(False, "--live-only", help="Skip removed domains."),
) -> None:
    """List every domain ever created (key variant), removed ones included."""
    sess = _open(ctx)
    if limit is None:
        names = sess.keys.list_all()[start:]
        cursor = sess.keys.count()
    else:
        names, cursor = sess.keys.list_page(start, limit)
    rows: List[Dict[str, Any]] = [{"domain": d, "exists": sess.keys.exists(d)} for d in names]
    if live_only:
        rows = [r for r in rows if r["exists"]]
    text = "\n".join(f"{r['domain']}{'' if r['exists'] else '  (removed)'}" for r in rows)
    _emit(ctx, {"entries": rows, "next": cursor}, text)


@app.command("canonicalize")
def cmd_canonicalize(ctx: typer.Context, domain: str = typer.Argument(...)) -> None:
    """Print the 32-byte canonical key of DOMAIN (hashed variant)."""
    try:
        h = canonicalize(domain)
    except RegistryError as e:
        _fail(e)
    _emit(ctx, {"domain": domain, "key": to_hex(h)}, to_hex(h))


@app.command("owner")
def cmd_owner(ctx: typer.Context) -> None:
    """Print the current owner identity."""
    owner = to_hex(_query(ctx, lambda s: s.ownable.owner()))
    _emit(ctx, {"owner": owner}, owner)


@app.command("transfer")
def cmd_transfer(
    ctx: typer.Context,
    new_owner: str = typer.Argument(..., help="New owner identity (hex)."),
    caller: Optional[str] = typer.Option(None, "--caller"),
) -> None:
    """Hand ownership to NEW_OWNER."""
    who = _caller(ctx, caller)
    nxt = _identity_param(new_owner, "NEW_OWNER")
    _mutation(ctx, lambda s: s.ownable.transfer(who, nxt))
    _emit(ctx, {"ok": True, "op": "transfer", "owner": to_hex(nxt)}, "ok")


@app.command("events")
def cmd_events(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", help="Only events with this name."),
) -> None:
    """Print the audit log."""
    sess = _open(ctx)
    evs = sess.host.events.committed()
    if name:
        evs = tuple(ev for ev in evs if ev.name == name.encode("utf-8"))
    rows = [dict(encode_event(ev).to_dict(), seq=ev.seq) for ev in evs]
    text = "\n".join(f"{ev.seq:>4} {ev.name.decode('utf-8', 'replace')} {_fmt_args(ev.args)}" for ev in evs)
    _emit(ctx, rows, text)


def _fmt_args(args: Dict[str, Any]) -> str:
    parts = []
    for k, v in args.items():
        parts.append(f"{k}={to_hex(v) if isinstance(v, bytes) else v}")
    return " ".join(parts)


def main() -> None:
    app()


if __name__ == "__main__":
    sys.exit(main())
