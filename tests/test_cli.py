"""Tests for the root workforce CLI."""

import pytest
from click.testing import CliRunner

from workforce import __version__
from workforce.cli import cli


def test_cli_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "workforce" in result.output
    for command in ("init", "leave", "events"):
        assert command in result.output


def test_cli_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


@pytest.mark.usefixtures("_isolated_root")
def test_cli_no_args(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "Usage" in result.output


# --- Global flags ---


@pytest.mark.parametrize("flag", ["--json", "-v", "--log-json", "--sync"])
def test_global_flag_accepted(cli_runner: CliRunner, flag: str) -> None:
    result = cli_runner.invoke(cli, [flag, "--version"])
    assert result.exit_code == 0


def test_config_option_accepted(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["-c", "/tmp/workforce-test.toml", "--version"])
    assert result.exit_code == 0


@pytest.mark.usefixtures("_isolated_root")
@pytest.mark.parametrize("group", ["leave", "events"])
def test_group_examples(cli_runner: CliRunner, group: str) -> None:
    result = cli_runner.invoke(cli, [group, "--examples"])
    assert result.exit_code == 0
    assert "Examples for" in result.output
    assert f"workforce {group}" in result.output


@pytest.mark.usefixtures("_isolated_root")
def test_help_points_at_examples(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["leave", "accrue", "--help"])
    assert result.exit_code == 0
    assert "--examples" in result.output
    assert "Run with --examples" in result.output
