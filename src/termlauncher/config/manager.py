"""Configuration document loading, migration and saving."""

import json
import logging
import os
import shutil
import tempfile
import time
from typing import Any

from termlauncher.config.defaults import MigrationDefaults, default_document
from termlauncher.config.migration import migrate_config
from termlauncher.config.models import LauncherDocument
from termlauncher.system.path_resolver import PathResolver
from termlauncher.validation import validate_document

logger = logging.getLogger(__name__)


class ConfigManager:
    """Owns the configuration document for the lifetime of the application.

    The document is loaded and migrated once, then held in memory; every
    reader and writer goes through this object rather than a module-level
    variable.
    """

    def __init__(self, path_resolver: PathResolver | None = None, platform: str | None = None):
        """Initialize ConfigManager.

        Args:
            path_resolver: Optional PathResolver instance. If None, creates a new one.
            platform: A ``sys.platform`` style identifier selecting the built-in
                terminals. Defaults to the running platform.
        """
        self.platform = platform
        self.path_resolver = path_resolver or PathResolver(platform)
        self.defaults = MigrationDefaults.for_platform(platform)
        self.config_path = self.path_resolver.get_config_path()
        self._document: dict[str, Any] | None = None
        self._was_corrupted = False

    @property
    def document(self) -> dict[str, Any]:
        """The in-memory configuration document, loaded on first access."""
        if self._document is None:
            return self.load()
        return self._document

    def load(self) -> dict[str, Any]:
        """Load the configuration document, migrating it if needed.

        A missing file yields the default document. An unreadable file is
        backed up and replaced in memory by the default document; the
        condition is reported once through ``was_corrupted()``.

        Returns:
            dict: Canonical configuration document
        """
        if not self.config_path.exists():
            logger.info("No configuration at %s, using defaults", self.config_path)
            self._document = self._default_document()
            return self._document

        try:
            raw = self.read_raw()
        except ValueError:
            logger.error("Config file corrupted (JSON parse error): %s", self.config_path)
            self._backup_corrupted()
            self._was_corrupted = True
            self._document = self._default_document()
            return self._document
        except OSError as e:
            logger.error("Failed to load config: %s", e)
            self._document = self._default_document()
            return self._document

        result = migrate_config(raw, self.defaults)
        self._document = result.document
        if result.needs_save:
            self.save(result.document)
        return self._document

    def read_raw(self) -> Any:
        """Parse the configuration file as stored, without migrating it.

        Raises:
            ValueError: If the file is not valid JSON
            OSError: If the file cannot be read
        """
        return json.loads(self.config_path.read_text(encoding="utf-8"))

    def reload(self) -> dict[str, Any]:
        """Reload configuration from disk.

        Returns:
            dict: Freshly loaded configuration document
        """
        return self.load()

    def save(self, document: dict[str, Any]) -> bool:
        """Write a configuration document and make it the held document.

        Args:
            document: Configuration document to persist

        Returns:
            bool: True if the document was written
        """
        result = validate_document(document)
        if not result:
            logger.error("Refusing to save invalid configuration: %s", result.error)
            return False

        content = json.dumps(document, indent=2, ensure_ascii=False)
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            self._write_atomic(content)
        except OSError as e:
            logger.error("Failed to save config: %s", e)
            return False

        self._document = document
        logger.info("Configuration saved to %s", self.config_path)
        return True

    def was_corrupted(self) -> bool:
        """Report whether the last load found a corrupted file, then reset the flag."""
        was_corrupted = self._was_corrupted
        self._was_corrupted = False
        return was_corrupted

    def typed_document(self) -> LauncherDocument:
        """Return the held document as a validated model.

        Raises:
            pydantic.ValidationError: If the document holds values the models reject
        """
        return LauncherDocument.model_validate(self.document)

    def touch_directory(self, directory_id: int | str, timestamp_ms: int | None = None) -> bool:
        """Record that a directory was just opened.

        Args:
            directory_id: Id of the directory
            timestamp_ms: Unix time in milliseconds. Defaults to now.

        Returns:
            bool: True if the directory exists and the document was saved
        """
        document = self.document
        for directory in document["directories"]:
            if directory.get("id") == directory_id:
                directory["lastUsed"] = timestamp_ms or int(time.time() * 1000)
                return self.save(document)
        return False

    def _default_document(self) -> dict[str, Any]:
        return default_document(self.platform).to_document()

    def _write_atomic(self, content: str) -> None:
        fd, temp_name = tempfile.mkstemp(
            dir=self.config_path.parent, prefix=f".{self.config_path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(temp_name, self.config_path)
        except OSError:
            os.unlink(temp_name)
            raise

    def _backup_corrupted(self) -> None:
        backup_path = self.path_resolver.get_corrupted_backup_path(int(time.time() * 1000))
        try:
            shutil.copy2(self.config_path, backup_path)
            logger.info("Corrupted config backed up to %s", backup_path)
        except OSError as e:
            logger.error("Failed to back up corrupted config: %s", e)
