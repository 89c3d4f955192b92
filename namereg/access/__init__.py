"""
namereg.access
==============

Access control for registry components. Only single-owner control is
provided; every mutating registry operation calls `Ownable.require_owner`
with the caller supplied by the host boundary.
"""

from __future__ import annotations

from .ownable import EV_OWNERSHIP_TRANSFERRED, OWNER_KEY, Ownable

__all__ = ["Ownable", "OWNER_KEY", "EV_OWNERSHIP_TRANSFERRED"]
