"""namereg.version — the installed distribution version.

`__version__` comes from the package metadata of the `namereg` distribution;
a source checkout that was never installed reports BASE_VERSION + "+dev".
"""

from __future__ import annotations

from importlib import metadata as importlib_metadata

# Bump together with pyproject.toml when the storage layout or event shapes change.
BASE_VERSION = "0.1.0"


def _resolve() -> str:
    try:
        return importlib_metadata.version("namereg")
    except importlib_metadata.PackageNotFoundError:
        return f"{BASE_VERSION}+dev"


__version__ = _resolve()

__all__ = ["__version__", "BASE_VERSION"]
