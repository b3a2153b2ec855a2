"""ServiceResult and ServiceError — what every NumberingService method returns.

Engine exceptions stop at the service boundary; callers branch on
``result.ok`` and read ``result.error.code`` (one of the
:class:`~docnum.domain.errors.NumberingError` codes) instead of catching.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from docnum.domain.errors import NumberingError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one numbering operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"next_number"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues (already-used reservations, skipped imports).
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @classmethod
    def success(
        cls, op: str, data: dict[str, Any], warnings: list[str] | None = None
    ) -> ServiceResult:
        return cls(ok=True, op=op, data=data, warnings=warnings or [])

    @classmethod
    def failure(
        cls,
        op: str,
        code: str,
        message: str,
        detail: dict[str, Any] | None = None,
    ) -> ServiceResult:
        return cls(
            ok=False,
            op=op,
            error=ServiceError(code=code, message=message, detail=detail or {}),
        )

    @classmethod
    def from_exception(cls, op: str, exc: NumberingError, **detail: Any) -> ServiceResult:
        """Failed result carrying the exception's code and message."""
        return cls.failure(op, exc.code, str(exc), detail)

    @property
    def issued_numbers(self) -> list[str]:
        """Every number string in the payload: one issued, previewed, or exported."""
        if "number" in self.data:
            return [str(self.data["number"])]
        if "numbers" in self.data:
            return [str(n) for n in self.data["numbers"]]
        used: dict[str, list[str]] = self.data.get("used", {})
        return [n for numbers in used.values() for n in numbers]
