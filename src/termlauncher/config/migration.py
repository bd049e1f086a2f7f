"""Configuration document migration.

Brings a persisted document of any earlier shape up to the current canonical
form. Each step fills or reshapes one section of the document and reports
whether it changed anything, so callers know when the result has to be
written back.
"""

import copy
import logging
import math
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from termlauncher.config.defaults import (
    DEFAULT_GROUP_ID,
    DEFAULT_GROUP_NAME,
    DEFAULT_GROUP_NAMES,
    DEFAULT_ICON,
    LEGACY_TYPE_TERMINALS,
    MigrationDefaults,
)

logger = logging.getLogger(__name__)

# Fields of a built-in terminal owned by the build rather than by the user
BUILTIN_DEFINITION_FIELDS = ("name", "icon", "command", "pathFormat", "isBuiltin")


@dataclass(frozen=True)
class MigrationResult:
    """Outcome of a migration run."""

    document: dict[str, Any]
    needs_save: bool


@dataclass(frozen=True)
class LegacyGroupName:
    """A group persisted as its bare name."""

    name: str


@dataclass(frozen=True)
class LegacyTerminalType:
    """A directory terminal persisted as a ``type`` enum instead of a ``terminalId``."""

    type: Any

    @property
    def terminal_id(self) -> str | None:
        """Terminal replacing the legacy type, or None when there is no mapping."""
        if not isinstance(self.type, str):
            return None
        return LEGACY_TYPE_TERMINALS.get(self.type)


def migrate_config(raw: Any, defaults: MigrationDefaults | None = None) -> MigrationResult:
    """Migrate a raw persisted document to the current canonical form.

    The input is never modified. Running the migration on its own output with
    the same defaults yields ``needs_save=False`` and an equal document.

    Args:
        raw: Document as parsed from storage; anything that is not a mapping
            is treated as an empty document
        defaults: Current build defaults. If None, uses the running platform's.

    Returns:
        MigrationResult: Canonical document and whether it differs from ``raw``
    """
    defaults = defaults or MigrationDefaults.for_platform()

    if isinstance(raw, Mapping):
        document = copy.deepcopy(dict(raw))
        changed = False
    else:
        logger.warning("Configuration root is not a mapping, starting from an empty document")
        document = {}
        changed = True

    changed |= migrate_terminals(document, defaults)
    changed |= migrate_groups(document, defaults)
    changed |= migrate_directories(document, defaults)
    changed |= migrate_favorites(document)
    changed |= migrate_settings(document, defaults)

    if changed:
        logger.info("Configuration migrated to the current format")
    return MigrationResult(document=document, needs_save=changed)


def migrate_terminals(document: dict[str, Any], defaults: MigrationDefaults) -> bool:
    """Ensure every built-in terminal exists and every terminal is complete."""
    terminals, changed = _records(document.get("terminals"), "terminals")

    builtins = {terminal["id"]: terminal for terminal in defaults.terminals}

    # A built-in may appear only once; later copies are dropped
    seen_builtins: set[str] = set()
    unique = []
    for terminal in terminals:
        terminal_id = terminal.get("id")
        if _is_id(terminal_id) and terminal_id in builtins:
            if terminal_id in seen_builtins:
                changed = True
                continue
            seen_builtins.add(terminal_id)
        unique.append(terminal)
    terminals = unique

    changed |= _ensure_unique_ids(terminals, _suffixed_id("terminal"))

    # Refresh built-in definitions, keeping the user's hidden/order overrides
    for terminal in terminals:
        default = builtins.get(terminal["id"])
        if default is None:
            continue
        for key in BUILTIN_DEFINITION_FIELDS:
            if key in default and terminal.get(key) != default[key]:
                terminal[key] = copy.deepcopy(default[key])
                changed = True

    for terminal in terminals:
        if "hidden" not in terminal:
            terminal["hidden"] = False
            changed = True
        changed |= _fill_order(terminal, terminals)

    for terminal_id, default in builtins.items():
        if terminal_id not in seen_builtins:
            terminal = copy.deepcopy(default)
            terminal.setdefault("hidden", False)
            terminal["order"] = _next_order(terminals)
            terminals.append(terminal)
            logger.info("Added missing built-in terminal %s", terminal_id)
            changed = True

    terminals, reordered = _sorted_by_order(terminals)
    document["terminals"] = terminals
    return changed or reordered


def migrate_groups(document: dict[str, Any], defaults: MigrationDefaults) -> bool:
    """Convert legacy group names to records and keep exactly one default group."""
    raw_groups = document.get("groups")
    entries = []
    if isinstance(raw_groups, list):
        entries = [_read_group_entry(entry) for entry in raw_groups]
    changed = not entries or None in entries
    entries = [entry for entry in entries if entry is not None]

    if not entries:
        entries = copy.deepcopy(defaults.groups) or [_synthesized_default_group()]
        logger.info("No groups found, using the default groups")

    taken = {
        entry["id"] for entry in entries if isinstance(entry, dict) and _is_id(entry.get("id"))
    }
    groups = []
    for position, entry in enumerate(entries):
        if not isinstance(entry, LegacyGroupName):
            groups.append(entry)
            continue
        if position == 0:
            group_id = DEFAULT_GROUP_ID
        else:
            group_id = _group_id_from_name(entry.name, position)
            if group_id in taken:
                group_id = _suffixed_id("group")(group_id, taken)
        taken.add(group_id)
        groups.append(
            {
                "id": group_id,
                "name": entry.name,
                "icon": DEFAULT_ICON,
                "isDefault": position == 0,
                "order": position,
            }
        )
        changed = True

    legacy_count = sum(isinstance(entry, LegacyGroupName) for entry in entries)
    if legacy_count:
        logger.info("Converted %d groups from the legacy name list", legacy_count)

    for position, group in enumerate(groups):
        if not _is_id(group.get("id")):
            name = group.get("name")
            if name in DEFAULT_GROUP_NAMES:
                group["id"] = DEFAULT_GROUP_ID
            else:
                group["id"] = _group_id_from_name(name, position)
            changed = True
        if "icon" not in group:
            group["icon"] = DEFAULT_ICON
            changed = True
        if "isDefault" not in group:
            group["isDefault"] = group["id"] == DEFAULT_GROUP_ID
            changed = True
        changed |= _fill_order(group, groups)

    changed |= _ensure_unique_ids(groups, _suffixed_id("group"))
    changed |= _ensure_single_default(groups)

    groups, reordered = _sorted_by_order(groups)
    document["groups"] = groups
    return changed or reordered


def migrate_directories(document: dict[str, Any], defaults: MigrationDefaults) -> bool:
    """Resolve terminal and group references on every directory.

    A directory naming no terminal gets the platform default terminal. One
    whose legacy type has no mapping keeps an explicit null ``terminalId``.

    Must run after ``migrate_groups`` so group references resolve against the
    final group ids.
    """
    directories, changed = _records(document.get("directories"), "directories")
    groups = document["groups"]

    group_ids = {group["id"] for group in groups}
    default_group_id = next(group["id"] for group in groups if group.get("isDefault") is True)

    changed |= _ensure_unique_ids(directories, _next_integer_id)

    for directory in directories:
        reference = _read_terminal_reference(directory)
        if isinstance(reference, LegacyTerminalType):
            terminal_id = reference.terminal_id
            if terminal_id is None:
                logger.warning(
                    "Directory %s has unknown legacy type %r, leaving terminal unset",
                    directory["id"],
                    reference.type,
                )
                directory["terminalId"] = None
            else:
                directory["terminalId"] = terminal_id
            del directory["type"]
            changed = True
        elif reference is None and directory.get("terminalId", "") == "" and defaults.terminal_id:
            directory["terminalId"] = defaults.terminal_id
            directory.pop("type", None)
            changed = True

        group = directory.get("group")
        if not (_is_id(group) and group in group_ids):
            directory["group"] = _group_id_by_name(groups, group) or default_group_id
            changed = True

        if "icon" not in directory:
            directory["icon"] = DEFAULT_ICON
            changed = True
        if "lastUsed" not in directory:
            directory["lastUsed"] = None
            changed = True
        changed |= _fill_order(directory, directories)

    directories, reordered = _sorted_by_order(directories)
    document["directories"] = directories
    return changed or reordered


def migrate_favorites(document: dict[str, Any]) -> bool:
    """Add the favorites list introduced after the first releases."""
    if document.get("favorites") is None:
        document["favorites"] = []
        return True
    return False


def migrate_settings(document: dict[str, Any], defaults: MigrationDefaults) -> bool:
    """Fill every missing settings key, at any depth, from the defaults."""
    settings = document.get("settings")
    if not isinstance(settings, dict):
        document["settings"] = copy.deepcopy(defaults.settings)
        return True
    return fill_missing(settings, defaults.settings)


def fill_missing(target: dict[str, Any], defaults: Mapping[str, Any]) -> bool:
    """Recursively copy keys absent from ``target`` out of ``defaults``.

    Present keys are never overwritten, whatever their value.
    """
    changed = False
    for key, default in defaults.items():
        if key not in target:
            target[key] = copy.deepcopy(default)
            changed = True
        elif isinstance(target[key], dict) and isinstance(default, Mapping):
            changed |= fill_missing(target[key], default)
    return changed


def _records(value: Any, section: str) -> tuple[list[dict[str, Any]], bool]:
    """Return the mapping entries of a section and whether anything was discarded."""
    if not isinstance(value, list):
        return [], True
    records = [entry for entry in value if isinstance(entry, dict)]
    if len(records) != len(value):
        logger.warning("Dropped %d malformed %s entries", len(value) - len(records), section)
        return records, True
    return records, False


def _read_group_entry(entry: Any) -> LegacyGroupName | dict[str, Any] | None:
    if isinstance(entry, str):
        return LegacyGroupName(entry)
    if isinstance(entry, dict):
        return entry
    return None


def _synthesized_default_group() -> dict[str, Any]:
    return {
        "id": DEFAULT_GROUP_ID,
        "name": DEFAULT_GROUP_NAME,
        "icon": DEFAULT_ICON,
        "isDefault": True,
        "order": 0,
    }


def _read_terminal_reference(directory: dict[str, Any]) -> LegacyTerminalType | str | None:
    terminal_id = directory.get("terminalId")
    if terminal_id:
        return terminal_id
    if directory.get("type"):
        return LegacyTerminalType(directory["type"])
    return None


def _is_id(value: Any) -> bool:
    return isinstance(value, str | int) and not isinstance(value, bool) and value != ""


def _is_order(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return math.isfinite(value)


def _next_order(records: list[dict[str, Any]]) -> int | float:
    orders = [record["order"] for record in records if _is_order(record.get("order"))]
    return max(orders) + 1 if orders else 0


def _fill_order(record: dict[str, Any], records: list[dict[str, Any]]) -> bool:
    if _is_order(record.get("order")):
        return False
    record["order"] = _next_order(records)
    return True


def _sorted_by_order(records: list[dict[str, Any]]) -> tuple[list[dict[str, Any]], bool]:
    ordered = sorted(records, key=lambda record: record["order"])
    return ordered, any(a is not b for a, b in zip(ordered, records, strict=True))


def _group_id_from_name(name: Any, position: int) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", str(name or "").lower()).strip("-")
    return f"group-{slug}" if slug else f"group-{position}"


def _group_id_by_name(groups: list[dict[str, Any]], name: Any) -> str | None:
    if not isinstance(name, str):
        return None
    return next((group["id"] for group in groups if group.get("name") == name), None)


def _suffixed_id(prefix: str) -> Callable[[Any, set], str]:
    def make(previous: Any, taken: set) -> str:
        base = str(previous) if _is_id(previous) else prefix
        suffix = 2
        while f"{base}-{suffix}" in taken:
            suffix += 1
        return f"{base}-{suffix}"

    return make


def _next_integer_id(previous: Any, taken: set) -> int:
    numbers = [value for value in taken if isinstance(value, int) and not isinstance(value, bool)]
    return max(numbers, default=0) + 1


def _ensure_unique_ids(records: list[dict[str, Any]], make_id: Callable[[Any, set], Any]) -> bool:
    """Give every record with a missing or repeated id a fresh one."""
    taken = {record["id"] for record in records if _is_id(record.get("id"))}
    seen: set = set()
    changed = False
    for record in records:
        record_id = record.get("id")
        if _is_id(record_id) and record_id not in seen:
            seen.add(record_id)
            continue
        new_id = make_id(record_id, taken)
        record["id"] = new_id
        taken.add(new_id)
        seen.add(new_id)
        changed = True
    return changed


def _ensure_single_default(groups: list[dict[str, Any]]) -> bool:
    """Leave exactly one group flagged as default, preferring the lowest order."""
    flagged = [group for group in groups if group.get("isDefault") is True]
    candidates = flagged or groups
    keeper = min(candidates, key=lambda group: group["order"])

    changed = False
    for group in groups:
        is_default = group is keeper
        if group.get("isDefault") is not is_default:
            group["isDefault"] = is_default
            changed = True
    return changed
