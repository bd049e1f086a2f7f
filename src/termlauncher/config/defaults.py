"""Default terminals, groups and settings shipped with each build.

Built-in terminals depend on the platform the launcher runs on. Every default
value used by the migration is declared in this module exactly once.
"""

import sys
from dataclasses import dataclass, field
from typing import Any

from termlauncher.config.models import Directory, Group, LauncherDocument, Settings, Terminal

DEFAULT_ICON = "📁"
DEFAULT_GROUP_ID = "default"
DEFAULT_GROUP_NAME = "預設"
# Names early releases used for the fallback group
DEFAULT_GROUP_NAMES = (DEFAULT_GROUP_NAME, "Default")

# Legacy directory "type" values and the built-in terminal that replaced them
LEGACY_TYPE_TERMINALS = {
    "wsl": "wsl-ubuntu",
    "powershell": "powershell",
}


def _platform_family(platform: str | None) -> str:
    platform = platform or sys.platform
    if platform == "darwin":
        return "darwin"
    if platform.startswith("linux"):
        return "linux"
    return "windows"


def file_manager_terminal(platform: str | None = None) -> Terminal:
    """Return the built-in file manager entry for the platform."""
    family = _platform_family(platform)
    base = {"id": "file-manager", "icon": "📂", "is_builtin": True, "hidden": False, "order": 0}

    if family == "darwin":
        return Terminal(**base, name="Finder", command="open {path}", path_format="unix")
    if family == "linux":
        return Terminal(**base, name="File Manager", command="xdg-open {path}", path_format="unix")
    return Terminal(
        **base, name="File Explorer", command="explorer.exe {path}", path_format="windows"
    )


def default_terminals(platform: str | None = None) -> list[Terminal]:
    """Return the built-in terminals for the platform, in display order.

    Args:
        platform: A ``sys.platform`` style identifier. Defaults to the running platform.

    Returns:
        list[Terminal]: Built-in terminals, the file manager always first
    """
    family = _platform_family(platform)
    terminals = [file_manager_terminal(platform)]

    if family == "darwin":
        terminals.append(
            Terminal(
                id="terminal-app",
                name="Terminal",
                icon="🖥️",
                command="open -a Terminal {path}",
                path_format="unix",
                is_builtin=True,
            )
        )
    elif family == "linux":
        terminals.append(
            Terminal(
                id="default-terminal",
                name="Terminal",
                icon="🖥️",
                command="x-terminal-emulator --working-directory={path}",
                path_format="unix",
                is_builtin=True,
            )
        )
    else:
        terminals.extend(
            [
                Terminal(
                    id="wsl-ubuntu",
                    name="WSL Ubuntu",
                    icon="🐧",
                    command="wt.exe -w 0 new-tab wsl.exe -d Ubuntu --cd {path}",
                    path_format="unix",
                    is_builtin=True,
                ),
                Terminal(
                    id="git-bash",
                    name="Git Bash",
                    icon="🐱",
                    command='"C:\\Program Files\\Git\\git-bash.exe" "--cd={path}"',
                    path_format="windows",
                    is_builtin=True,
                ),
                Terminal(
                    id="powershell",
                    name="PowerShell",
                    icon="⚡",
                    command='wt.exe -w 0 new-tab -p "Windows PowerShell" -d {path}',
                    path_format="windows",
                    is_builtin=True,
                ),
            ]
        )

    for order, terminal in enumerate(terminals):
        terminal.order = order
    return terminals


def default_terminal_id(platform: str | None = None) -> str:
    """Return the id of the terminal new directories open with by default."""
    family = _platform_family(platform)
    if family == "darwin":
        return "terminal-app"
    if family == "linux":
        return "default-terminal"
    return "wsl-ubuntu"


def default_user_path(platform: str | None = None) -> str:
    """Return the root of the users' home directories on the platform."""
    family = _platform_family(platform)
    if family == "darwin":
        return "/Users"
    if family == "linux":
        return "/home"
    return "C:\\Users"


DEFAULT_GROUPS = (
    Group(id=DEFAULT_GROUP_ID, name=DEFAULT_GROUP_NAME, icon=DEFAULT_ICON, is_default=True),
)

DEFAULT_SETTINGS = Settings()


def default_document(platform: str | None = None) -> LauncherDocument:
    """Build the document used when no configuration file exists yet."""
    sample = Directory(
        id=1,
        name="範例專案",
        icon=DEFAULT_ICON,
        path=default_user_path(platform),
        terminal_id=default_terminal_id(platform),
        group=DEFAULT_GROUP_ID,
        last_used=None,
        order=0,
    )
    return LauncherDocument(
        terminals=default_terminals(platform),
        groups=[group.model_copy() for group in DEFAULT_GROUPS],
        directories=[sample],
        favorites=[],
        settings=DEFAULT_SETTINGS.model_copy(deep=True),
    )


@dataclass(frozen=True)
class MigrationDefaults:
    """Current build defaults handed to the migration, as plain documents."""

    terminals: list[dict[str, Any]] = field(default_factory=list)
    groups: list[dict[str, Any]] = field(default_factory=list)
    settings: dict[str, Any] = field(default_factory=dict)
    terminal_id: str | None = None  # Given to directories that name no terminal

    @classmethod
    def for_platform(cls, platform: str | None = None) -> "MigrationDefaults":
        """Collect the defaults shipped for a platform."""
        return cls(
            terminals=[terminal.to_document() for terminal in default_terminals(platform)],
            groups=[group.to_document() for group in DEFAULT_GROUPS],
            settings=DEFAULT_SETTINGS.to_document(),
            terminal_id=default_terminal_id(platform),
        )
