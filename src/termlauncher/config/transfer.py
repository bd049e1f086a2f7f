"""Export and import of configuration documents between installations."""

import copy
import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from termlauncher.config.defaults import (
    DEFAULT_GROUP_ID,
    MigrationDefaults,
    default_terminal_id,
)
from termlauncher.config.migration import migrate_config
from termlauncher.releases.version import get_package_version

logger = logging.getLogger(__name__)

EXPORT_FORMAT_VERSION = "2.0"


@dataclass(frozen=True)
class ImportResult:
    """Outcome of merging an exported document into the current one.

    ``errors`` lists references that could not be resolved and were replaced
    by defaults; they do not make the import fail.
    """

    success: bool
    document: dict[str, Any] | None = None
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ExportPreview:
    """Counts shown before exporting."""

    terminals_count: int
    groups_count: int
    directories_count: int
    favorites_count: int
    has_settings: bool


def _option(options: dict[str, Any] | None, name: str) -> bool:
    return bool((options or {}).get(name, True))


def _path_exists(path: Any) -> bool:
    try:
        return isinstance(path, str) and Path(path).exists()
    except (OSError, ValueError):
        return False


def export_config(
    document: dict[str, Any],
    options: dict[str, Any] | None = None,
    app_version: str | None = None,
) -> dict[str, Any]:
    """Build an export of the selected sections of a document.

    Args:
        document: Canonical configuration document
        options: ``include*`` flags (see ``validate_export_options``); every
            section is included unless its flag is False
        app_version: Version recorded in the export. Defaults to the installed version.

    Returns:
        dict: Export document ready to be serialized
    """
    export_data: dict[str, Any] = {
        "version": EXPORT_FORMAT_VERSION,
        "exportedAt": datetime.now(UTC).isoformat(),
        "appVersion": app_version or get_package_version(),
    }

    if _option(options, "includeTerminals"):
        # Built-ins are exported too so their hidden/order state travels
        export_data["terminals"] = copy.deepcopy(document.get("terminals") or [])

    if _option(options, "includeGroups"):
        export_data["groups"] = [
            copy.deepcopy(group)
            for group in document.get("groups") or []
            if not group.get("isDefault")
        ]

    if _option(options, "includeDirectories"):
        export_data["directories"] = copy.deepcopy(document.get("directories") or [])

    if _option(options, "includeSettings"):
        export_data["settings"] = copy.deepcopy(document.get("settings") or {})

    if _option(options, "includeFavorites"):
        existing_ids = {
            directory.get("id")
            for directory in document.get("directories") or []
            if _path_exists(directory.get("path"))
        }
        export_data["favorites"] = [
            favorite for favorite in document.get("favorites") or [] if favorite in existing_ids
        ]

    return export_data


def export_preview(document: dict[str, Any]) -> ExportPreview:
    """Summarize what an export of ``document`` would contain."""
    return ExportPreview(
        terminals_count=len(document.get("terminals") or []),
        groups_count=sum(1 for group in document.get("groups") or [] if not group.get("isDefault")),
        directories_count=len(document.get("directories") or []),
        favorites_count=len(document.get("favorites") or []),
        has_settings=bool(document.get("settings")),
    )


def _imported_id() -> str:
    return f"imported-{uuid.uuid4().hex[:12]}"


def _records(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [copy.deepcopy(entry) for entry in value if isinstance(entry, dict)]


class _Importer:
    """Merges one export into a copy of the current document."""

    def __init__(
        self, current: dict[str, Any], options: dict[str, Any] | None, platform: str | None
    ):
        self.document = copy.deepcopy(current)
        self.options = options
        self.platform = platform
        self.errors: list[str] = []
        self.terminal_ids: dict[Any, Any] = {}
        self.group_ids: dict[Any, Any] = {}
        self.directory_ids: dict[Any, Any] = {}

    def import_terminals(self, imported: list[dict[str, Any]]) -> None:
        terminals = self.document.setdefault("terminals", [])
        builtins = [terminal for terminal in imported if terminal.get("isBuiltin")]
        customs = [terminal for terminal in imported if not terminal.get("isBuiltin")]

        for terminal in builtins:
            existing = next(
                (t for t in terminals if t.get("id") == terminal.get("id") and t.get("isBuiltin")),
                None,
            )
            if existing is None:
                continue
            for key in ("hidden", "order"):
                if key in terminal:
                    existing[key] = terminal[key]

        if not _option(self.options, "mergeTerminals"):
            self.document["terminals"] = [t for t in terminals if t.get("isBuiltin")] + customs
            return

        for terminal in customs:
            same_name = next(
                (
                    t
                    for t in terminals
                    if not t.get("isBuiltin") and t.get("name") == terminal.get("name")
                ),
                None,
            )
            if same_name is not None:
                self.terminal_ids[terminal.get("id")] = same_name["id"]
                logger.info("Terminal %r already exists, skipped", terminal.get("name"))
                continue
            if any(t.get("id") == terminal.get("id") for t in terminals):
                new_id = _imported_id()
                self.terminal_ids[terminal.get("id")] = new_id
                terminal["id"] = new_id
            terminals.append(terminal)

    def import_groups(self, imported: list[dict[str, Any]]) -> None:
        groups = self.document.setdefault("groups", [])

        if not _option(self.options, "mergeGroups"):
            kept = [group for group in groups if group.get("isDefault")]
            kept_ids = {group.get("id") for group in kept}
            self.document["groups"] = kept + [
                group
                for group in imported
                if not group.get("isDefault") and group.get("id") not in kept_ids
            ]
            return

        for group in imported:
            same_name = next((g for g in groups if g.get("name") == group.get("name")), None)
            if same_name is not None:
                self.group_ids[group.get("id")] = same_name["id"]
                logger.info("Group %r already exists, skipped", group.get("name"))
                continue
            if any(g.get("id") == group.get("id") for g in groups):
                new_id = _imported_id()
                self.group_ids[group.get("id")] = new_id
                group["id"] = new_id
            group["isDefault"] = False
            group["order"] = len(groups)
            groups.append(group)

    def import_directories(self, imported: list[dict[str, Any]]) -> None:
        if not _option(self.options, "mergeDirectories"):
            self.document["directories"] = imported
            return

        directories = self.document.setdefault("directories", [])
        terminal_ids = {terminal.get("id") for terminal in self.document.get("terminals") or []}
        group_ids = {group.get("id") for group in self.document.get("groups") or []}
        integer_ids = [
            d.get("id")
            for d in directories
            if isinstance(d.get("id"), int) and not isinstance(d.get("id"), bool)
        ]
        next_id = max(integer_ids, default=0) + 1

        for directory in imported:
            same_path = next(
                (d for d in directories if d.get("path") == directory.get("path")), None
            )
            if same_path is not None:
                self.directory_ids[directory.get("id")] = same_path["id"]
                logger.info("Directory %r already exists, skipped", directory.get("path"))
                continue

            self.directory_ids[directory.get("id")] = next_id
            directory["id"] = next_id
            next_id += 1

            terminal_id = directory.get("terminalId")
            terminal_id = self.terminal_ids.get(terminal_id, terminal_id)
            if terminal_id and terminal_id not in terminal_ids:
                self.errors.append(
                    f'Terminal "{terminal_id}" not found for directory '
                    f'"{directory.get("name")}", using default'
                )
                terminal_id = default_terminal_id(self.platform)
            if terminal_id:
                directory["terminalId"] = terminal_id

            group_id = directory.get("group")
            group_id = self.group_ids.get(group_id, group_id)
            if group_id and group_id not in group_ids:
                self.errors.append(
                    f'Group "{group_id}" not found for directory '
                    f'"{directory.get("name")}", using default'
                )
                group_id = DEFAULT_GROUP_ID
            if group_id:
                directory["group"] = group_id

            directories.append(directory)

    def import_settings(self, imported: dict[str, Any]) -> None:
        if _option(self.options, "mergeSettings"):
            current = self.document.get("settings")
            merged = dict(current) if isinstance(current, dict) else {}
            merged.update(imported)
            self.document["settings"] = merged
        else:
            self.document["settings"] = imported

    def import_favorites(self, imported: list[Any]) -> None:
        if not _option(self.options, "mergeFavorites"):
            self.document["favorites"] = imported
            return

        favorites = self.document.setdefault("favorites", [])
        for favorite in imported:
            mapped = self.directory_ids.get(favorite, favorite)
            if mapped not in favorites:
                favorites.append(mapped)


def import_config(
    current: dict[str, Any],
    import_data: Any,
    options: dict[str, Any] | None = None,
    platform: str | None = None,
) -> ImportResult:
    """Merge an exported document into the current document.

    The current document is not modified. The merged document is migrated
    again so every invariant of a canonical document holds.

    Args:
        current: Canonical configuration document
        import_data: Document produced by ``export_config``
        options: ``merge*`` flags (see ``validate_import_options``); a False
            flag replaces that section instead of merging it
        platform: A ``sys.platform`` style identifier selecting the built-in terminals

    Returns:
        ImportResult: Merged document and any reference problems found
    """
    if not isinstance(import_data, dict):
        return ImportResult(success=False, errors=["Invalid import data format"])

    importer = _Importer(current, options, platform)

    # Order matters: directories are remapped onto imported terminals and groups
    if "terminals" in import_data:
        importer.import_terminals(_records(import_data["terminals"]))
    if "groups" in import_data:
        importer.import_groups(_records(import_data["groups"]))
    if "directories" in import_data:
        importer.import_directories(_records(import_data["directories"]))
    if isinstance(import_data.get("settings"), dict):
        importer.import_settings(copy.deepcopy(import_data["settings"]))
    if isinstance(import_data.get("favorites"), list):
        importer.import_favorites(list(import_data["favorites"]))

    result = migrate_config(importer.document, MigrationDefaults.for_platform(platform))
    return ImportResult(success=True, document=result.document, errors=importer.errors)
