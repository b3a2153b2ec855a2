"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, docnum.toml only contains overrides.
An empty or missing docnum.toml runs the engine locally with the built-in
type table.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from docnum.domain.types import NumberFormat, ResetFrequency, check_date_format

# --- docnum.toml sections ---


class EngineConfig(BaseModel):
    """[engine] section."""

    model_config = {"frozen": True}

    max_attempts: int = Field(default=1000, ge=1)
    db_filename: str = "docnum.db"


class RemoteConfig(BaseModel):
    """[remote] section."""

    model_config = {"frozen": True}

    enabled: bool = False
    base_url: str | None = None
    timeout_seconds: float = Field(default=5.0, gt=0)
    api_token: str | None = None
    probe_token: str = "sales_order"

    @property
    def usable(self) -> bool:
        return self.enabled and bool(self.base_url)


class TypeOverride(BaseModel):
    """[types.<name>] section: partial SequenceConfig."""

    model_config = {"frozen": True, "extra": "forbid"}

    prefix: str | None = None
    starting_number: int | None = Field(default=None, ge=1)
    pad_length: int | None = Field(default=None, ge=0)
    format: NumberFormat | None = None
    date_format: str | None = None
    custom_pattern: str | None = None
    reset_frequency: ResetFrequency | None = None

    @field_validator("date_format")
    @classmethod
    def _known_date_format(cls, value: str | None) -> str | None:
        return check_date_format(value)

    def changes(self) -> dict[str, Any]:
        """Only the fields set in the TOML section."""
        return self.model_dump(exclude_none=True)
