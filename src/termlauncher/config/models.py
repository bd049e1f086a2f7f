"""Configuration models for TermLauncher.

The persisted document uses camelCase keys, so every model exposes camelCase
aliases while keeping snake_case attributes for Python callers.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, PositiveInt
from pydantic.alias_generators import to_camel


class DocumentModel(BaseModel):
    """Base for every persisted record.

    Unknown keys are kept so a round trip never loses data written by a newer
    release.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_document(self) -> dict:
        """Dump the model using the persisted (camelCase) key names."""
        return self.model_dump(by_alias=True)


class Terminal(DocumentModel):
    """A launchable terminal or file manager."""

    id: str
    name: str
    icon: str = "🖥️"
    command: str  # Template containing a "{path}" placeholder
    path_format: Literal["unix", "windows"] = "unix"
    is_builtin: bool = False
    hidden: bool = False
    order: int | float = 0


class Group(DocumentModel):
    """A tab grouping directory shortcuts."""

    id: str
    name: str
    icon: str = "📁"
    is_default: bool = False
    order: int | float = 0


class Directory(DocumentModel):
    """A directory shortcut opened with one of the terminals."""

    id: int | str
    name: str = ""
    path: str = Field(min_length=1)
    terminal_id: str | None = None  # None when a legacy type had no mapping
    group: str = "default"
    icon: str = "📁"
    order: int | float = 0
    last_used: int | float | str | None = None


class McpSettings(DocumentModel):
    """Local MCP server settings."""

    enabled: bool = True
    port: PositiveInt = 23549


class Settings(DocumentModel):
    """Application settings."""

    auto_launch: bool = False
    start_minimized: bool = False
    minimize_to_tray: bool = True
    global_shortcut: str = "Alt+Space"
    theme: Literal["dark", "light"] = "dark"
    language: str = "zh-TW"
    show_tab_text: bool = True
    recent_limit: PositiveInt = 10
    mcp: McpSettings = Field(default_factory=McpSettings)


class LauncherDocument(DocumentModel):
    """The whole persisted configuration document."""

    terminals: list[Terminal] = Field(default_factory=list)
    groups: list[Group] = Field(default_factory=list)
    directories: list[Directory] = Field(default_factory=list)
    favorites: list[int | str] = Field(default_factory=list)
    settings: Settings = Field(default_factory=Settings)


class LoggingConfig(BaseModel):
    """Structlog-based logging configuration."""

    level: str = "INFO"
    json_logs: bool | None = None  # None = auto-detect based on environment
    include_caller: bool = False  # Include file:line info (useful for debugging)
    extra_fields: dict[str, str] = Field(default_factory=lambda: {"service": "termlauncher"})
