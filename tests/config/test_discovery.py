"""Tests for workforce.toml discovery and the default template."""

from pathlib import Path

import pytest

from workforce.config.discovery import (
    CONFIG_ENV_VAR,
    find_config,
    write_default_config,
)
from workforce.config.settings import WorkforceSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


class TestFindConfig:
    def test_walks_up(self, tmp_path: Path) -> None:
        config = tmp_path / "workforce.toml"
        config.write_text("")
        nested = tmp_path / "x" / "y"
        nested.mkdir(parents=True)
        assert find_config(nested) == config.resolve()

    def test_env_var_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "workforce.toml").write_text("")
        elsewhere = tmp_path / "other.toml"
        elsewhere.write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(elsewhere))
        assert find_config(tmp_path) == elsewhere

    def test_env_var_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "nope.toml"))
        assert find_config(tmp_path) is None


class TestSettingsFromDiscoveredFile:
    def test_defaults_without_file(self, tmp_path: Path) -> None:
        settings = WorkforceSettings.from_cli(root=tmp_path)
        assert settings.config_path is None
        assert settings.store.db_name == "workforce.db"

    def test_reads_overrides(self, tmp_path: Path) -> None:
        path = tmp_path / "workforce.toml"
        path.write_text('[store]\ndb_name = "hr.db"\n[plugins]\naudit = false\n')
        settings = WorkforceSettings.from_cli(root=tmp_path)
        assert settings.config_path == path
        assert settings.store.db_name == "hr.db"
        assert settings.plugins.audit is False
        assert settings.plugins.offboarding is True


class TestWriteDefaultConfig:
    def test_creates_once(self, tmp_path: Path) -> None:
        path, created = write_default_config(tmp_path)
        assert created is True
        assert path == tmp_path / "workforce.toml"
        path.write_text("[team]\ndefault_max_size = 3\n")

        again, created_again = write_default_config(tmp_path)
        assert again == path
        assert created_again is False
        assert "default_max_size = 3" in path.read_text()

    def test_template_parses_to_defaults(self, tmp_path: Path) -> None:
        write_default_config(tmp_path)
        config = WorkforceSettings.from_cli(root=tmp_path)
        assert config.leave.cancellation_window_hours == 24
        assert config.team.default_max_size is None
