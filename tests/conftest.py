import copy
from pathlib import Path
from typing import Any

import pytest

from termlauncher.config.defaults import MigrationDefaults
from termlauncher.config.migration import migrate_config
from termlauncher.system.path_resolver import PathResolver


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep the developer's own TermLauncher environment out of every test."""
    for name in ("TERMLAUNCHER_DATA", "TERMLAUNCHER_CONFIG", "TERMLAUNCHER_ENV"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def path_resolver(tmp_path: Path) -> PathResolver:
    """Provide a PathResolver whose writable paths all live under tmp_path.

    The Linux layout is used so paths are stable whatever platform runs the
    tests; the config file itself is not created.
    """
    data_dir = tmp_path / "data"
    data_dir.mkdir(parents=True)

    resolver = PathResolver("linux", config_path=data_dir / "config.json")
    resolver.data_dir = data_dir
    return resolver


@pytest.fixture
def linux_defaults() -> MigrationDefaults:
    """Build defaults for Linux: file-manager and default-terminal."""
    return MigrationDefaults.for_platform("linux")


@pytest.fixture
def windows_defaults() -> MigrationDefaults:
    """Build defaults for Windows, which include the wsl-ubuntu and powershell terminals."""
    return MigrationDefaults.for_platform("win32")


@pytest.fixture
def legacy_document() -> dict[str, Any]:
    """Build a document as written by the first releases.

    Groups are bare names, directories use the ``type`` enum, and favorites
    and settings are absent.
    """
    return {
        "terminals": [],
        "groups": ["預設", "Work"],
        "directories": [
            {"id": 1, "name": "proj", "path": "/home/u/proj", "type": "wsl", "group": "Work"},
            {"id": 2, "name": "ps", "path": "C:\\code", "type": "powershell", "group": "預設"},
        ],
    }


@pytest.fixture
def canonical_document(windows_defaults, legacy_document) -> dict[str, Any]:
    """Build the migrated form of legacy_document on Windows."""
    return migrate_config(copy.deepcopy(legacy_document), windows_defaults).document
