"""Releases domain: version comparison and update checks."""

from termlauncher.releases.update_checker import UpdateStatus, check_for_updates
from termlauncher.releases.version import is_newer

__all__ = ["UpdateStatus", "check_for_updates", "is_newer"]
