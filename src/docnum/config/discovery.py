"""Locate and read ``docnum.toml``.

A workspace root is the nearest directory, walking up from the CWD, that
holds either ``docnum.toml`` or a ``.docnum/`` state directory. The
``DOCNUM_CONFIG`` env var and the ``--config`` flag bypass the walk.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import click

CONFIG_FILENAME = "docnum.toml"
CONFIG_ENV_VAR = "DOCNUM_CONFIG"
STATE_DIRNAME = ".docnum"


def _walk_up(start: Path | None) -> Iterator[Path]:
    current = (start or Path.cwd()).resolve()
    yield current
    yield from current.parents


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file in effect, or None.

    ``DOCNUM_CONFIG`` wins when set; a path that does not exist then means
    no config at all rather than falling back to the walk.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    for directory in _walk_up(start):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def find_state_root(start: Path | None = None) -> Path | None:
    """Nearest directory holding a ``.docnum/`` state directory."""
    for directory in _walk_up(start):
        if (directory / STATE_DIRNAME).is_dir():
            return directory
    return None


def read_toml(path: Path) -> dict[str, Any]:
    """Parse *path*, turning syntax errors into a CLI-friendly error."""
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc


DEFAULT_CONFIG_TEMPLATE = """\
# docnum configuration. Every key is optional; the values below are defaults.

[engine]
max_attempts = 1000
db_filename = "docnum.db"

[remote]
enabled = false
# base_url = "https://erp.example.com"
timeout_seconds = 5.0
probe_token = "sales_order"

# Per-type overrides of the built-in numbering table, for example:
# [types.invoice]
# prefix = "INV"
# pad_length = 8
"""


def write_default_config(root: Path) -> Path | None:
    """Write a commented docnum.toml into *root* unless one already exists.

    Returns the written path, or None if the file was already present.
    """
    path = root / CONFIG_FILENAME
    if path.exists():
        return None
    root.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG_TEMPLATE, encoding="utf-8")
    return path
