"""Built-in default configuration per number type.

Configs are seeded lazily from this table on first use. Types missing
from the table get a derived sequential default (see :func:`default_config`).
Settings may override any field per type (``[types.<name>]`` in docnum.toml).
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from docnum.domain.errors import ConfigurationError
from docnum.domain.types import NumberFormat, ResetFrequency, SequenceConfig


def _sequential(prefix: str, pad_length: int) -> SequenceConfig:
    return SequenceConfig(prefix=prefix, pad_length=pad_length)


def _monthly(prefix: str, pad_length: int) -> SequenceConfig:
    return SequenceConfig(
        prefix=prefix,
        pad_length=pad_length,
        format=NumberFormat.DATE_BASED,
        date_format="YYYYMM",
        reset_frequency=ResetFrequency.MONTHLY,
    )


def _document(prefix: str) -> SequenceConfig:
    """``PREFIX-YYYY-NNNN`` documents that restart every year."""
    return SequenceConfig(
        prefix=prefix,
        pad_length=4,
        format=NumberFormat.CUSTOM,
        date_format="YYYY",
        custom_pattern="{prefix}-{date}-{sequence}",
        reset_frequency=ResetFrequency.YEARLY,
    )


DEFAULT_CONFIGS: dict[str, SequenceConfig] = {
    # --- Financial ---
    "invoice": _sequential("INV", 8),
    "bill": _sequential("BIL", 8),
    "journal": _sequential("JRNL", 8),
    "payment": _sequential("PMT", 8),
    # --- Inventory ---
    "product": _sequential("PROD", 6),
    "sku": _sequential("SKU", 8),
    "barcode": _sequential("200", 10),
    "movement": _monthly("MOV", 8),
    "transfer": _monthly("TRF", 6),
    "adjustment": _monthly("ADJ", 6),
    "count": _monthly("CNT", 6),
    "serial": _sequential("SN", 10),
    "batch": SequenceConfig(
        prefix="BTH",
        pad_length=8,
        format=NumberFormat.DATE_BASED,
        date_format="YYYYMMDD",
        reset_frequency=ResetFrequency.DAILY,
    ),
    # --- Parties ---
    "customer": _sequential("CUST", 6),
    "vendor": _sequential("VEND", 6),
    "supplier": _sequential("SUP", 6),
    # --- Documents (tokens shared with the remote authority) ---
    "purchase_order": _document("PO"),
    "goods_receiving": _document("GRV"),
    "sales_order": _document("SO"),
    "quotation": _document("QUO"),
    "receipt": _document("RCP"),
    "payment_receipt": _document("PAY"),
    "delivery_note": _document("DN"),
    "credit_note": _document("CN"),
    "debit_note": _document("DB"),
    "customer_return": _document("CR"),
    "purchase_return": _document("PR"),
    "stock_adjustment": _document("SA"),
    "stock_transfer": _document("ST"),
    "work_order": _document("WO"),
    "service_order": _document("SRV"),
    "expense_claim": _document("EXP"),
    "petty_cash": _document("PC"),
    "journal_entry": _document("JE"),
}

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


def derived_prefix(number_type: str) -> str:
    """Three-letter uppercase prefix derived from an unknown type key."""
    letters = _NON_ALNUM.sub("", number_type).upper()
    return letters[:3] or "DOC"


def default_config(
    number_type: str,
    overrides: Mapping[str, Mapping[str, Any]] | None = None,
) -> SequenceConfig:
    """Default config for *number_type* with optional per-type overrides applied.

    Raises:
        ConfigurationError: The overrides do not form a valid config.
    """
    base = DEFAULT_CONFIGS.get(number_type)
    if base is None:
        base = _sequential(derived_prefix(number_type), 6)

    changes = (overrides or {}).get(number_type)
    if not changes:
        return base
    try:
        return SequenceConfig.model_validate({**base.model_dump(), **changes})
    except ValidationError as exc:
        msg = f"Invalid {number_type} override: {exc}"
        raise ConfigurationError(msg) from exc


def known_default_types() -> list[str]:
    """Number types that have a built-in default, in table order."""
    return list(DEFAULT_CONFIGS)
