"""Tests for the stats, reset and init commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from docnum.cli import cli


@pytest.mark.usefixtures("_isolated_root")
class TestStats:
    def test_single_type(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["-q", "next", "invoice"])
        result = cli_runner.invoke(cli, ["--json", "stats", "invoice"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["last_number"] == 1
        assert data["total_generated"] == 1
        assert data["used_count"] == 1
        assert data["next_preview"] == "INV00000002"
        assert data["config"]["prefix"] == "INV"

    def test_all_types_table(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["stats"])
        assert result.exit_code == 0
        assert "Numbering statistics" in result.stdout
        assert "invoice" in result.stdout
        assert "mode: local" in result.stdout

    def test_all_types_quiet_lists_names(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "stats"])
        names = result.stdout.split()
        assert names[0] == "invoice"
        assert "purchase_order" in names


@pytest.mark.usefixtures("_isolated_root")
class TestReset:
    def test_reset_with_yes(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["-q", "next", "invoice"])
        result = cli_runner.invoke(cli, ["reset", "invoice", "--yes"])
        assert result.exit_code == 0, result.output
        issued = cli_runner.invoke(cli, ["-q", "next", "invoice"])
        assert issued.stdout.strip() == "INV00000001"

    def test_reset_restores_default_config(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["config", "set", "invoice", "--prefix", "FAC"])
        cli_runner.invoke(cli, ["reset", "invoice", "--yes"])
        result = cli_runner.invoke(cli, ["--json", "config", "show", "invoice"])
        assert json.loads(result.stdout)["data"]["config"]["prefix"] == "INV"

    def test_keep_config(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["config", "set", "invoice", "--prefix", "FAC"])
        cli_runner.invoke(cli, ["reset", "invoice", "--keep-config", "--yes"])
        issued = cli_runner.invoke(cli, ["-q", "next", "invoice"])
        assert issued.stdout.strip() == "FAC00000001"

    def test_reset_all(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["-q", "next", "invoice"])
        cli_runner.invoke(cli, ["-q", "next", "bill"])
        result = cli_runner.invoke(cli, ["--json", "reset", "--all", "--yes"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert "invoice" in data["types"]
        assert data["count"] == len(data["types"])

    def test_refuses_without_yes_when_non_interactive(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["-q", "next", "invoice"])
        result = cli_runner.invoke(cli, ["--no-interact", "reset", "invoice"])
        assert result.exit_code == 1
        assert "Refusing to reset" in result.stderr
        issued = cli_runner.invoke(cli, ["-q", "next", "invoice"])
        assert issued.stdout.strip() == "INV00000002"

    def test_prompt_declined_aborts(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["-q", "next", "invoice"])
        result = cli_runner.invoke(cli, ["reset", "invoice"], input="n\n")
        assert result.exit_code == 1
        issued = cli_runner.invoke(cli, ["-q", "next", "invoice"])
        assert issued.stdout.strip() == "INV00000002"

    def test_prompt_confirmed(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["-q", "next", "invoice"])
        result = cli_runner.invoke(cli, ["reset", "invoice"], input="y\n")
        assert result.exit_code == 0

    @pytest.mark.parametrize("args", [["reset"], ["reset", "invoice", "--all"]])
    def test_type_xor_all(self, cli_runner: CliRunner, args: list[str]) -> None:
        result = cli_runner.invoke(cli, [*args, "--yes"])
        assert result.exit_code == 2
        assert "either NUMBER_TYPE or --all" in result.output


@pytest.mark.usefixtures("_isolated_root")
class TestInit:
    def test_init_seeds_and_writes_config(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "init"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)["data"]
        assert (tmp_path / "docnum.toml").is_file()
        assert data["config_path"] == str(tmp_path / "docnum.toml")
        assert "invoice" in data["types"]

    def test_init_twice_warns(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["init"])
        result = cli_runner.invoke(cli, ["init"])
        assert result.exit_code == 0
        assert "already exists" in result.stderr

    def test_no_config(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        result = cli_runner.invoke(cli, ["init", "--no-config"])
        assert result.exit_code == 0
        assert not (tmp_path / "docnum.toml").exists()
        assert (tmp_path / ".docnum").is_dir()


@pytest.mark.usefixtures("_isolated_root")
class TestPing:
    def test_without_remote(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["ping"])
        assert result.exit_code == 0
        assert "remote: not configured" in result.stdout
        assert "No remote numbering authority configured" in result.stderr

    def test_unreachable_remote(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "docnum.toml").write_text(
            '[remote]\nenabled = true\nbase_url = "http://127.0.0.1:9"\n'
            'timeout_seconds = 0.5\nprobe_token = "ping"\n'
        )
        result = cli_runner.invoke(cli, ["--json", "ping"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data == {"configured": True, "available": False, "mode": "local"}
