"""Tests for DocnumSettings — unified settings with TOML source."""

from pathlib import Path

import click
from pydantic import ValidationError
import pytest

from docnum.config.settings import DocnumSettings


class TestDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = DocnumSettings.from_cli(root=tmp_path)
        assert settings.root == tmp_path
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.engine.max_attempts == 1000
        assert settings.remote.enabled is False
        assert settings.type_overrides() == {}

    def test_frozen(self, tmp_path: Path) -> None:
        settings = DocnumSettings.from_cli(root=tmp_path)
        with pytest.raises(ValidationError):
            settings.quiet = True  # type: ignore[misc]


class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        (tmp_path / "docnum.toml").write_text(
            "[engine]\nmax_attempts = 25\n[types.batch]\nprefix = \"LOT\"\n"
        )
        settings = DocnumSettings.from_cli(root=tmp_path)
        assert settings.engine.max_attempts == 25
        assert settings.engine.db_filename == "docnum.db"
        assert settings.type_overrides() == {"batch": {"prefix": "LOT"}}

    def test_root_from_config_location(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "docnum.toml").write_text("")
        child = tmp_path / "sub"
        child.mkdir()
        monkeypatch.chdir(child)
        settings = DocnumSettings.from_cli()
        assert settings.root == tmp_path.resolve()
        assert settings.config_path == tmp_path.resolve() / "docnum.toml"

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom" / "my.toml"
        custom.parent.mkdir(parents=True)
        custom.write_text("[remote]\nenabled = true\nbase_url = \"http://erp\"\n")
        settings = DocnumSettings.from_cli(config_path=str(custom), root=tmp_path)
        assert settings.remote.usable
        assert settings.config_path == custom

    def test_missing_explicit_config(self, tmp_path: Path) -> None:
        with pytest.raises(click.ClickException, match="not found"):
            DocnumSettings.from_cli(config_path=str(tmp_path / "nope.toml"), root=tmp_path)

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "docnum.toml").write_text("[engine\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            DocnumSettings.from_cli(root=tmp_path)

    def test_invalid_type_override(self, tmp_path: Path) -> None:
        (tmp_path / "docnum.toml").write_text('[types.invoice]\ndate_format = "YYYY-MM"\n')
        with pytest.raises(click.ClickException, match="Invalid configuration in") as exc_info:
            DocnumSettings.from_cli(root=tmp_path)
        assert "YYYY-MM" in exc_info.value.message


class TestPriority:
    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "docnum.toml").write_text("[engine]\nmax_attempts = 25\n")
        monkeypatch.setenv("DOCNUM_ENGINE__MAX_ATTEMPTS", "40")
        settings = DocnumSettings.from_cli(root=tmp_path)
        assert settings.engine.max_attempts == 40

    def test_cli_flags_override_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DOCNUM_QUIET", "true")
        settings = DocnumSettings.from_cli(root=tmp_path, quiet=False)
        assert settings.quiet is False

    def test_env_without_flag(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DOCNUM_REMOTE__BASE_URL", "http://from-env")
        settings = DocnumSettings.from_cli(root=tmp_path)
        assert settings.remote.base_url == "http://from-env"


class TestRootResolution:
    def test_state_dir_marks_root(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / ".docnum").mkdir()
        child = tmp_path / "nested"
        child.mkdir()
        monkeypatch.chdir(child)
        settings = DocnumSettings.from_cli()
        assert settings.root == tmp_path.resolve()
        assert settings.config_path is None

    def test_falls_back_to_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert DocnumSettings.from_cli().root == Path.cwd()
