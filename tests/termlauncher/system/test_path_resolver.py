"""Tests for PathResolver."""

from pathlib import Path

import pytest

from termlauncher.system.path_resolver import PathResolver


class TestPathResolver:
    """Test PathResolver functionality."""

    @pytest.fixture
    def home(self, tmp_path, monkeypatch):
        """Point the home directory at a temporary path."""
        monkeypatch.setattr(Path, "home", lambda: tmp_path)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.delenv("APPDATA", raising=False)
        return tmp_path

    @pytest.mark.parametrize(
        "platform,relative",
        [
            pytest.param("darwin", "Library/Application Support/TermLauncher", id="macos"),
            pytest.param("linux", ".config/TermLauncher", id="linux"),
            pytest.param("win32", "AppData/Roaming/TermLauncher", id="windows"),
        ],
    )
    def test_default_data_dir(self, home, platform, relative):
        """Should use the per-platform user data directory."""
        resolver = PathResolver(platform)

        assert resolver.get_data_dir() == home / relative
        assert resolver.get_config_path() == home / relative / "config.json"

    def test_xdg_config_home(self, home, monkeypatch, tmp_path):
        """Should honour XDG_CONFIG_HOME on Linux."""
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))

        assert PathResolver("linux").get_data_dir() == tmp_path / "xdg" / "TermLauncher"

    def test_appdata(self, home, monkeypatch, tmp_path):
        """Should honour APPDATA on Windows."""
        monkeypatch.setenv("APPDATA", str(tmp_path / "roaming"))

        assert PathResolver("win32").get_data_dir() == tmp_path / "roaming" / "TermLauncher"

    def test_data_dir_from_environment(self, home, monkeypatch, tmp_path):
        """Should prefer TERMLAUNCHER_DATA over the platform default."""
        monkeypatch.setenv("TERMLAUNCHER_DATA", str(tmp_path / "custom"))

        resolver = PathResolver("linux")

        assert resolver.get_data_dir() == tmp_path / "custom"
        assert resolver.get_config_path() == tmp_path / "custom" / "config.json"

    def test_config_path_precedence(self, home, monkeypatch, tmp_path):
        """Should prefer an explicit path, then TERMLAUNCHER_CONFIG."""
        monkeypatch.setenv("TERMLAUNCHER_CONFIG", str(tmp_path / "env.json"))

        assert PathResolver("linux").get_config_path() == tmp_path / "env.json"
        explicit = PathResolver("linux", config_path=tmp_path / "explicit.json")
        assert explicit.get_config_path() == tmp_path / "explicit.json"

    def test_corrupted_backup_path(self, path_resolver):
        """Should place the backup beside the config file with a timestamp suffix."""
        backup = path_resolver.get_corrupted_backup_path(1700000000000)

        assert backup.parent == path_resolver.get_config_path().parent
        assert backup.name == "config.json.backup.1700000000000"
