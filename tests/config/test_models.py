"""Tests for the docnum.toml section models."""

import pytest
from pydantic import ValidationError

from docnum.config.models import EngineConfig, RemoteConfig, TypeOverride
from docnum.domain.types import ResetFrequency


class TestDefaults:
    def test_engine(self) -> None:
        assert EngineConfig().max_attempts == 1000

    def test_remote_disabled(self) -> None:
        remote = RemoteConfig()
        assert remote.enabled is False
        assert remote.usable is False
        assert remote.probe_token == "sales_order"


class TestValidation:
    @pytest.mark.parametrize(
        "model,kwargs",
        [
            (EngineConfig, {"max_attempts": 0}),
            (RemoteConfig, {"timeout_seconds": 0}),
            (TypeOverride, {"starting_number": 0}),
            (TypeOverride, {"unknown_key": 1}),
            (TypeOverride, {"date_format": "YYYY-MM"}),
        ],
    )
    def test_rejects(self, model: type, kwargs: dict[str, object]) -> None:
        with pytest.raises(ValidationError):
            model(**kwargs)

    def test_usable_needs_url(self) -> None:
        assert not RemoteConfig(enabled=True).usable
        assert RemoteConfig(enabled=True, base_url="http://x").usable


def test_type_override_changes_only_set_fields() -> None:
    override = TypeOverride(prefix="X", reset_frequency=ResetFrequency.DAILY)
    assert override.changes() == {"prefix": "X", "reset_frequency": ResetFrequency.DAILY}
