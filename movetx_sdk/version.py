"""
Version information for the MoveTx SDK.

The installed distribution metadata wins; a source checkout reads the
version from ``pyproject.toml`` instead.
"""
import importlib.metadata
import pathlib

import tomli

DISTRIBUTION = "movetx-sdk"
DEFAULT_VERSION = "0.1.0"
PYPROJECT = pathlib.Path(__file__).parent.parent / "pyproject.toml"


def _resolve_version() -> str:
    try:
        return importlib.metadata.version(DISTRIBUTION)
    except importlib.metadata.PackageNotFoundError:
        pass
    try:
        with PYPROJECT.open("rb") as f:
            return tomli.load(f)["project"]["version"]
    except (FileNotFoundError, KeyError, tomli.TOMLDecodeError):
        return DEFAULT_VERSION


__version__ = _resolve_version()

# Sent on every outgoing request
USER_AGENT = f"{DISTRIBUTION}/{__version__}"
