"""TieredDispatcher — remote authority first, local generator as fallback.

The first remote failure demotes the dispatcher to local mode for every
later call and every number type. The demotion is sticky until
:meth:`TieredDispatcher.enable_remote` or a successful
:meth:`TieredDispatcher.check_remote_availability`.

A category resolves to two keys: the local number type, and the token the
remote authority is asked for. The authority only knows
:data:`REMOTE_TOKENS`, so entity categories borrow a document token there
while keeping their own local sequence.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from docnum.infrastructure.remote import RemoteFailure, RemoteIssued

if TYPE_CHECKING:
    from docnum.infrastructure.remote import NumberingAuthority
    from docnum.services.generator import SequenceGenerator

logger = logging.getLogger(__name__)

# Document category (as used by calling screens) -> local number type.
CATEGORY_TYPES: dict[str, str] = {
    "purchase-order": "purchase_order",
    "sales-order": "sales_order",
    "invoice": "invoice",
    "quote": "quotation",
    "quotation": "quotation",
    "delivery-note": "delivery_note",
    "goods-receiving-voucher": "goods_receiving",
    "goods-return": "purchase_return",
    "customer-return": "customer_return",
    "payment-receipt": "payment_receipt",
    "receipt": "receipt",
    "financial-report": "invoice",
    "credit-note": "credit_note",
    "debit-note": "debit_note",
    "payment": "payment_receipt",
    "stock-adjustment": "stock_adjustment",
    "stock-transfer": "stock_transfer",
    "work-order": "work_order",
    "service-order": "service_order",
    "expense-claim": "expense_claim",
    "petty-cash": "petty_cash",
    "journal-entry": "journal_entry",
    "customer": "customer",
    "vendor": "vendor",
    "supplier": "supplier",
    "product": "product",
}

# Document-type tokens the remote authority issues numbers for.
REMOTE_TOKENS: frozenset[str] = frozenset(
    {
        "customer_return",
        "purchase_order",
        "vendor",
        "goods_receiving",
        "sales_order",
        "quotation",
        "invoice",
        "receipt",
        "payment_receipt",
        "delivery_note",
        "credit_note",
        "debit_note",
        "purchase_return",
        "stock_adjustment",
        "stock_transfer",
        "work_order",
        "service_order",
        "expense_claim",
        "petty_cash",
        "journal_entry",
    }
)

# Categories whose local type is not a remote token.
ENTITY_TOKENS: dict[str, str] = {
    "customer": "sales_order",
    "product": "sales_order",
    "supplier": "vendor",
    "lead": "quotation",
}

DEFAULT_REMOTE_TOKEN = "sales_order"
DEFAULT_PROBE_TOKEN = DEFAULT_REMOTE_TOKEN


def _normalize(category: str) -> str:
    return category.strip().lower()


def resolve_number_type(category: str) -> str:
    """Map a document category to its number type.

    Examples:
        >>> resolve_number_type("quote")
        'quotation'
        >>> resolve_number_type("Cash Sale")
        'cash_sale'
    """
    key = _normalize(category)
    mapped = CATEGORY_TYPES.get(key)
    if mapped is not None:
        return mapped
    return key.replace("-", "_").replace(" ", "_")


def resolve_remote_token(category: str) -> str:
    """Map a document category to the token sent to the remote authority.

    Anything the authority does not know goes out as ``sales_order``.

    Examples:
        >>> resolve_remote_token("quote")
        'quotation'
        >>> resolve_remote_token("supplier")
        'vendor'
        >>> resolve_remote_token("gift-voucher")
        'sales_order'
    """
    entity = ENTITY_TOKENS.get(_normalize(category))
    if entity is not None:
        return entity
    number_type = resolve_number_type(category)
    return number_type if number_type in REMOTE_TOKENS else DEFAULT_REMOTE_TOKEN


class DispatchMode(StrEnum):
    REMOTE = "remote"
    LOCAL = "local"


@dataclass(frozen=True)
class IssuedNumber:
    number: str
    number_type: str
    source: DispatchMode


class TieredDispatcher:
    """Route number requests to the remote authority or the local generator.

    Args:
        local: Generator used in local mode and after any remote failure.
        remote: The remote authority; ``None`` means local-only.
        remote_enabled: Start in remote mode (ignored without *remote*).
    """

    def __init__(
        self,
        local: SequenceGenerator,
        remote: NumberingAuthority | None = None,
        *,
        remote_enabled: bool = True,
    ) -> None:
        self.local = local
        self.remote = remote
        self._use_remote = remote is not None and remote_enabled
        self._flag_lock = threading.Lock()

    @property
    def mode(self) -> DispatchMode:
        with self._flag_lock:
            return DispatchMode.REMOTE if self._use_remote else DispatchMode.LOCAL

    def force_local(self) -> None:
        with self._flag_lock:
            self._use_remote = False

    def enable_remote(self) -> None:
        """Clear the demotion. No effect when no remote authority is configured."""
        with self._flag_lock:
            self._use_remote = self.remote is not None

    def _demote(self, reason: str) -> None:
        with self._flag_lock:
            was_remote = self._use_remote
            self._use_remote = False
        if was_remote:
            logger.warning("Remote numbering failed, falling back to local: %s", reason)

    def dispatch(self, category: str) -> IssuedNumber:
        """Issue a number for *category*, remote first when not demoted."""
        number_type = resolve_number_type(category)

        if self.remote is not None and self.mode == DispatchMode.REMOTE:
            token = resolve_remote_token(category)
            outcome = self.remote.request_number(token)
            match outcome:
                case RemoteIssued(number=number):
                    logger.debug(
                        "Remote issued %s number %s as %s", number_type, number, token
                    )
                    return IssuedNumber(number, number_type, DispatchMode.REMOTE)
                case RemoteFailure(reason=reason):
                    self._demote(reason)

        number = self.local.generate_next_number(number_type)
        return IssuedNumber(number, number_type, DispatchMode.LOCAL)

    def generate(self, category: str) -> str:
        return self.dispatch(category).number

    def check_remote_availability(self, probe_token: str = DEFAULT_PROBE_TOKEN) -> bool:
        """Probe the authority and set the mode from the outcome.

        *probe_token* is resolved like a category, so anything the authority
        does not know is sent as ``sales_order``. The probe issues a real
        number on success.
        """
        if self.remote is None:
            return False
        outcome = self.remote.request_number(resolve_remote_token(probe_token))
        available = isinstance(outcome, RemoteIssued)
        with self._flag_lock:
            self._use_remote = available
        if not available:
            logger.warning("Remote numbering unavailable, using local generation")
        return available
