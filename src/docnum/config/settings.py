"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``DOCNUM_*`` prefix, ``__`` between nested keys
  3. TOML file    — ``docnum.toml`` discovered via walk-up
  4. Code defaults — baked into the section models
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

import click
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from docnum.config.discovery import find_config, find_state_root, read_toml
from docnum.config.models import EngineConfig, RemoteConfig, TypeOverride


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``docnum.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            self._data = read_toml(toml_path)

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class DocnumSettings(BaseSettings):
    """Unified settings for the docnum CLI and embedding applications.

    Attributes:
        root: Directory holding ``.docnum/`` (see :meth:`from_cli`).
        config_path: The TOML file in effect, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "DOCNUM_",
        "env_nested_delimiter": "__",
    }

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    no_interact: bool = False

    # --- TOML sections ---
    engine: EngineConfig = Field(default_factory=EngineConfig)
    remote: RemoteConfig = Field(default_factory=RemoteConfig)
    types: dict[str, TypeOverride] = Field(default_factory=dict)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    def type_overrides(self) -> dict[str, dict[str, Any]]:
        """``[types.*]`` sections as plain change dicts for the config store."""
        return {name: override.changes() for name, override in self.types.items()}

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        **cli_flags: Any,
    ) -> DocnumSettings:
        """Construct settings from a CLI invocation.

        Discovers ``docnum.toml`` via walk-up (or explicit *config_path*).
        *root* defaults to the config file's directory, then to the nearest
        directory with a ``.docnum/`` state dir, then to the CWD. CLI flags
        are merged as highest-priority overrides. A config that fails
        validation, such as an unknown ``date_format`` in a ``[types.*]``
        section, raises :class:`click.ClickException`.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if not p.is_file():
                msg = f"Config file not found: {config_path}"
                raise click.ClickException(msg)
            toml_path = p
        else:
            toml_path = find_config(root)

        resolved_root = root
        if resolved_root is None and toml_path is not None:
            resolved_root = toml_path.parent
        if resolved_root is None:
            resolved_root = find_state_root() or Path.cwd()

        _tls.toml_path = toml_path
        try:
            return cls(
                root=resolved_root,
                config_path=toml_path,
                **cli_flags,
            )
        except ValidationError as exc:
            source = f" in {toml_path}" if toml_path else ""
            msg = f"Invalid configuration{source}: {exc}"
            raise click.ClickException(msg) from exc
        finally:
            _tls.toml_path = None
