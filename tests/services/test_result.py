"""Tests for ServiceResult and ServiceError."""

import json

import pytest
from pydantic import ValidationError

from docnum.domain.errors import ExhaustedSequenceError
from docnum.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_success_construction(self) -> None:
        result = ServiceResult.success("next_number", {"number": "INV00000001"})
        assert result.ok is True
        assert result.op == "next_number"
        assert result.data == {"number": "INV00000001"}
        assert result.warnings == []
        assert result.error is None

    def test_failure_construction(self) -> None:
        result = ServiceResult.failure("reserve", "CONFIGURATION_ERROR", "bad", {"value": "x"})
        assert result.ok is False
        assert result.error == ServiceError(
            code="CONFIGURATION_ERROR", message="bad", detail={"value": "x"}
        )
        assert result.data == {}

    def test_json_serialization(self) -> None:
        result = ServiceResult.success("preview", {"numbers": ["A", "B"]}, ["heads up"])
        parsed = json.loads(result.model_dump_json())
        assert parsed["ok"] is True
        assert parsed["data"]["numbers"] == ["A", "B"]
        assert parsed["warnings"] == ["heads up"]

    def test_from_exception(self) -> None:
        exc = ExhaustedSequenceError("invoice", 1000)
        result = ServiceResult.from_exception("next_number", exc, number_type="invoice")
        assert result.ok is False
        assert result.error is not None
        assert result.error.code == "SEQUENCE_EXHAUSTED"
        assert "after 1000 attempts" in result.error.message
        assert result.error.detail == {"number_type": "invoice"}

    def test_frozen(self) -> None:
        result = ServiceResult.success("next_number", {})
        with pytest.raises(ValidationError):
            result.ok = False  # type: ignore[misc]


class TestIssuedNumbers:
    @pytest.mark.parametrize(
        "data,expected",
        [
            ({"number": "INV00000001"}, ["INV00000001"]),
            ({"numbers": ["A", "B"]}, ["A", "B"]),
            ({"used": {"invoice": ["I1"], "bill": ["B1", "B2"]}}, ["I1", "B1", "B2"]),
            ({"reserved": ["X"]}, []),
        ],
    )
    def test_collects_numbers(self, data: dict[str, object], expected: list[str]) -> None:
        assert ServiceResult.success("op", data).issued_numbers == expected
