import os
import sys
from pathlib import Path


class PathResolver:
    """Central authority for file path resolution in TermLauncher.

    Uses environment variables for configuration with per-platform defaults
    matching the desktop application's user-data directory.
    """

    APP_NAME = "TermLauncher"

    def __init__(self, platform: str | None = None, config_path: Path | None = None) -> None:
        """Initialize PathResolver with environment-based configuration.

        Args:
            platform: A ``sys.platform`` style identifier. Defaults to the running platform.
            config_path: Explicit configuration document path, overriding the environment.
        """
        self.platform = platform or sys.platform
        self.config_path = Path(config_path) if config_path else None
        data_dir = os.getenv("TERMLAUNCHER_DATA")
        self.data_dir = Path(data_dir) if data_dir else self._default_data_dir()

    def _default_data_dir(self) -> Path:
        home = Path.home()
        if self.platform == "darwin":
            return home / "Library" / "Application Support" / self.APP_NAME
        if self.platform.startswith("linux"):
            config_home = os.getenv("XDG_CONFIG_HOME")
            base = Path(config_home) if config_home else home / ".config"
            return base / self.APP_NAME
        appdata = os.getenv("APPDATA")
        base = Path(appdata) if appdata else home / "AppData" / "Roaming"
        return base / self.APP_NAME

    def get_data_dir(self) -> Path:
        """Get the directory holding all persisted user data."""
        return self.data_dir

    def get_config_path(self) -> Path:
        """Get the path to the configuration document.

        Uses the explicit path if one was given, then the TERMLAUNCHER_CONFIG environment
        variable, then falls back to default.
        """
        if self.config_path:
            return self.config_path

        config_path = os.getenv("TERMLAUNCHER_CONFIG")
        if config_path:
            return Path(config_path)

        return self.data_dir / "config.json"

    def get_corrupted_backup_path(self, timestamp_ms: int) -> Path:
        """Get the path a corrupted configuration document is copied to."""
        config_path = self.get_config_path()
        return config_path.with_name(f"{config_path.name}.backup.{timestamp_ms}")
