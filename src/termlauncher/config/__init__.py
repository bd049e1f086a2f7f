"""TermLauncher configuration package.

This package provides centralized configuration management with:
- Migration of documents written by earlier releases
- Platform-specific defaults for terminals, groups and settings
- JSON persistence with corrupted-file recovery
- Export and import between installations
"""

from .defaults import MigrationDefaults
from .manager import ConfigManager
from .migration import MigrationResult, migrate_config
from .models import LauncherDocument

__all__ = [
    "ConfigManager",
    "LauncherDocument",
    "MigrationDefaults",
    "MigrationResult",
    "migrate_config",
]
