"""BaseService — foundation for docnum services.

Every service receives a :class:`Workspace` at construction time and
converts :class:`NumberingError` into a failed :class:`ServiceResult`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from docnum.domain.errors import NumberingError
from docnum.services.result import ServiceResult

if TYPE_CHECKING:
    from docnum.services.workspace import Workspace

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class NumberingService(BaseService):
            def next_number(self, number_type: str) -> ServiceResult:
                try:
                    number = self._workspace.generator.generate_next_number(number_type)
                except NumberingError as exc:
                    return self._error("next_number", exc, number_type=number_type)
                return ServiceResult.success("next_number", {"number": number})
    """

    def __init__(self, workspace: Workspace) -> None:
        self._workspace = workspace

    @staticmethod
    def _error(op: str, exc: NumberingError, **detail: Any) -> ServiceResult:
        logger.debug("%s failed: %s", op, exc, exc_info=True)
        return ServiceResult.from_exception(op, exc, **detail)
