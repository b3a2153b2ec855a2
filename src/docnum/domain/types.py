"""Numbering configuration and counter models.

One SequenceConfig and one CounterState exist per number type. Both are
frozen; every mutation produces a new instance that the stores persist.

Persisted JSON uses camelCase keys (``startingNumber``, ``lastNumber``, ...)
so state written by earlier releases stays readable.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


class NumberFormat(StrEnum):
    """How the sequence integer is rendered."""

    SEQUENTIAL = "sequential"
    DATE_BASED = "date_based"
    CUSTOM = "custom"


class ResetFrequency(StrEnum):
    """Calendar boundary at which a counter rewinds to its starting number."""

    NEVER = "never"
    YEARLY = "yearly"
    MONTHLY = "monthly"
    DAILY = "daily"


SUPPORTED_DATE_FORMATS: tuple[str, ...] = (
    "YYYY",
    "YY",
    "MM",
    "DD",
    "YYYYMM",
    "YYYYMMDD",
    "YYMMDD",
    "MMYY",
)


def check_date_format(value: str | None) -> str | None:
    """Validator body shared by every model with a ``date_format`` field."""
    if value is not None and value not in SUPPORTED_DATE_FORMATS:
        msg = f"Unsupported date format {value!r}; expected one of {list(SUPPORTED_DATE_FORMATS)}"
        raise ValueError(msg)
    return value


class _CamelModel(BaseModel):
    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class SequenceConfig(_CamelModel):
    """Per-type numbering configuration.

    Attributes:
        prefix: Literal text placed before the date/sequence parts.
        starting_number: First sequence integer issued after init or reset.
        pad_length: Minimum digit width of the sequence part (never truncates).
        format: Rendering strategy.
        date_format: Date token for ``date_based``/``custom`` (default ``YYYY``).
        custom_pattern: Template with ``{prefix}``, ``{date}``, ``{sequence}``.
        reset_frequency: When the counter rewinds.
    """

    prefix: str = ""
    starting_number: int = Field(default=1, ge=1)
    pad_length: int = Field(default=6, ge=0)
    format: NumberFormat = NumberFormat.SEQUENTIAL
    date_format: str | None = None
    custom_pattern: str | None = None
    reset_frequency: ResetFrequency = ResetFrequency.NEVER

    @field_validator("date_format")
    @classmethod
    def _known_date_format(cls, value: str | None) -> str | None:
        return check_date_format(value)

    def to_record(self) -> dict[str, object]:
        """Serialize for persistence (camelCase keys, JSON-safe values)."""
        return self.model_dump(mode="json", by_alias=True)


class CounterState(_CamelModel):
    """Last-issued sequence integer and reset bookkeeping for one type.

    INVARIANT: ``last_number >= starting_number - 1`` for the owning config.
    """

    last_number: int = Field(default=0, ge=0)
    last_reset_date: datetime | None = None
    reset_frequency: ResetFrequency = ResetFrequency.NEVER

    @classmethod
    def initial(cls, config: SequenceConfig) -> CounterState:
        """Counter positioned just before the config's starting number."""
        return cls(
            last_number=config.starting_number - 1,
            reset_frequency=config.reset_frequency,
        )

    def to_record(self) -> dict[str, object]:
        """Serialize for persistence (camelCase keys, ISO timestamps)."""
        return self.model_dump(mode="json", by_alias=True)
