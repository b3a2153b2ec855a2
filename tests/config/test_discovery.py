"""Tests for config discovery and loading."""

from pathlib import Path

import click
import pytest

from docnum.config.discovery import (
    CONFIG_FILENAME,
    STATE_DIRNAME,
    find_config,
    find_state_root,
    read_toml,
    write_default_config,
)


class TestFindConfig:
    def test_finds_in_current_dir(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("[engine]\nmax_attempts = 10\n")
        assert find_config(tmp_path) == config_file.resolve()

    def test_walks_up(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("")
        child = tmp_path / "a" / "b" / "c"
        child.mkdir(parents=True)
        assert find_config(child) == config_file.resolve()

    def test_returns_none_when_not_found(self, tmp_path: Path) -> None:
        child = tmp_path / "empty"
        child.mkdir()
        assert find_config(child) is None

    def test_env_var_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "custom.toml"
        config_file.write_text("")
        monkeypatch.setenv("DOCNUM_CONFIG", str(config_file))
        assert find_config(tmp_path / "elsewhere") == config_file

    def test_env_var_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        monkeypatch.setenv("DOCNUM_CONFIG", str(tmp_path / "missing.toml"))
        assert find_config(tmp_path) is None


class TestFindStateRoot:
    def test_finds_state_dir_above(self, tmp_path: Path) -> None:
        (tmp_path / STATE_DIRNAME).mkdir()
        child = tmp_path / "reports" / "2024"
        child.mkdir(parents=True)
        assert find_state_root(child) == tmp_path.resolve()

    def test_ignores_plain_file(self, tmp_path: Path) -> None:
        (tmp_path / STATE_DIRNAME).write_text("")
        assert find_state_root(tmp_path) != tmp_path.resolve()


class TestReadToml:
    def test_parses_sections(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILENAME
        path.write_text('[types.invoice]\nprefix = "FAC"\npad_length = 5\n')
        assert read_toml(path) == {"types": {"invoice": {"prefix": "FAC", "pad_length": 5}}}

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILENAME
        path.write_text("[engine\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            read_toml(path)


class TestWriteDefaultConfig:
    def test_writes_parseable_template(self, tmp_path: Path) -> None:
        path = write_default_config(tmp_path)
        assert path == tmp_path / CONFIG_FILENAME
        data = read_toml(path)
        assert data["engine"]["max_attempts"] == 1000
        assert data["remote"]["enabled"] is False
        assert "types" not in data

    def test_leaves_existing_file(self, tmp_path: Path) -> None:
        existing = tmp_path / CONFIG_FILENAME
        existing.write_text("[engine]\nmax_attempts = 3\n")
        assert write_default_config(tmp_path) is None
        assert "max_attempts = 3" in existing.read_text()
