"""Number rendering and shape validation.

Three formats:
- sequential:  ``{prefix}{sequence}``         e.g. ``INV00000001``
- date_based:  ``{prefix}{date}{sequence}``   e.g. ``MOV20240600000001``
- custom:      ``custom_pattern`` with ``{prefix}``, ``{date}``, ``{sequence}``

INVARIANT: padding never truncates. A sequence wider than ``pad_length``
is emitted in full.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import datetime

from docnum.domain.errors import ConfigurationError
from docnum.domain.types import NumberFormat, SequenceConfig

DEFAULT_DATE_FORMAT = "YYYY"

_DATE_TOKENS: dict[str, Callable[[datetime], str]] = {
    "YYYY": lambda d: f"{d.year:04d}",
    "YY": lambda d: f"{d.year:04d}"[-2:],
    "MM": lambda d: f"{d.month:02d}",
    "DD": lambda d: f"{d.day:02d}",
    "YYYYMM": lambda d: f"{d.year:04d}{d.month:02d}",
    "YYYYMMDD": lambda d: f"{d.year:04d}{d.month:02d}{d.day:02d}",
    "YYMMDD": lambda d: f"{d.year:04d}"[-2:] + f"{d.month:02d}{d.day:02d}",
    "MMYY": lambda d: f"{d.month:02d}" + f"{d.year:04d}"[-2:],
}

_PLACEHOLDER_RE = re.compile(r"\{(prefix|date|sequence)\}")


def zero_pad(sequence: int, pad_length: int) -> str:
    """Left-pad *sequence* with zeros to at least *pad_length* digits."""
    return str(sequence).zfill(pad_length)


def date_token(now: datetime, pattern: str | None) -> str:
    """Render the date part of a number.

    Unrecognized patterns render the four-digit year.

    Examples:
        >>> from datetime import datetime
        >>> date_token(datetime(2024, 6, 9), "YYMMDD")
        '240609'
        >>> date_token(datetime(2024, 6, 9), "MMYY")
        '0624'
    """
    render = _DATE_TOKENS.get(pattern or DEFAULT_DATE_FORMAT, _DATE_TOKENS["YYYY"])
    return render(now)


def _require_pattern(config: SequenceConfig) -> str:
    if not config.custom_pattern:
        msg = "Custom pattern is required for custom format"
        raise ConfigurationError(msg)
    return config.custom_pattern


def format_number(config: SequenceConfig, sequence: int, now: datetime) -> str:
    """Render *sequence* according to *config* at time *now*.

    Raises:
        ConfigurationError: ``format`` is custom but no pattern is set.
    """
    padded = zero_pad(sequence, config.pad_length)

    if config.format == NumberFormat.DATE_BASED:
        return f"{config.prefix}{date_token(now, config.date_format)}{padded}"

    if config.format == NumberFormat.CUSTOM:
        pattern = _require_pattern(config)
        parts = {
            "prefix": config.prefix,
            "date": date_token(now, config.date_format),
            "sequence": padded,
        }
        return _PLACEHOLDER_RE.sub(lambda m: parts[m.group(1)], pattern)

    return f"{config.prefix}{padded}"


def number_shape(config: SequenceConfig, now: datetime) -> re.Pattern[str]:
    """Compile a regex accepting numbers shaped like *config* would render them.

    Only the date token *length* is checked, so historical numbers from
    earlier periods remain acceptable.
    """
    prefix = re.escape(config.prefix)
    date_len = len(date_token(now, config.date_format))
    min_digits = max(config.pad_length, 1)

    if config.format == NumberFormat.DATE_BASED:
        return re.compile(rf"^{prefix}\d{{{date_len + min_digits},}}$")

    if config.format == NumberFormat.CUSTOM:
        pattern = _require_pattern(config)
        pieces = {
            "prefix": prefix,
            "date": rf"\d{{{date_len}}}",
            "sequence": rf"\d{{{min_digits},}}",
        }
        regex: list[str] = []
        pos = 0
        for match in _PLACEHOLDER_RE.finditer(pattern):
            regex.append(re.escape(pattern[pos : match.start()]))
            regex.append(pieces[match.group(1)])
            pos = match.end()
        regex.append(re.escape(pattern[pos:]))
        return re.compile("^" + "".join(regex) + "$")

    return re.compile(rf"^{prefix}\d{{{min_digits},}}$")


def matches_shape(config: SequenceConfig, value: str, now: datetime) -> bool:
    """Whether *value* has the shape *config* produces."""
    return number_shape(config, now).match(value) is not None
