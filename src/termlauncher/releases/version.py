"""Release version comparison."""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as metadata_version
from typing import Any


def parse_version(version: Any) -> list[int]:
    """Split a dotted version string into integer segments.

    One leading ``v``/``V`` is ignored. Segments that are not plain decimal
    numbers count as 0, so any input yields a best-effort result.
    """
    text = "" if version is None else str(version).strip()
    if text[:1] in ("v", "V"):
        text = text[1:]

    segments = []
    for segment in text.split("."):
        segment = segment.strip()
        segments.append(int(segment) if segment.isdecimal() else 0)
    return segments


def is_newer(current: Any, candidate: Any) -> bool:
    """Check whether ``candidate`` is a strictly newer release than ``current``.

    Args:
        current: Version of the running build (e.g., "2.3.0")
        candidate: Version of a published release (e.g., "v2.4.0")

    Returns:
        bool: True only if candidate is greater; equal versions are not newer
    """
    current_parts = parse_version(current)
    candidate_parts = parse_version(candidate)

    length = max(len(current_parts), len(candidate_parts))
    current_parts += [0] * (length - len(current_parts))
    candidate_parts += [0] * (length - len(candidate_parts))

    for current_part, candidate_part in zip(current_parts, candidate_parts, strict=True):
        if candidate_part > current_part:
            return True
        if candidate_part < current_part:
            return False
    return False


def get_package_version() -> str:
    """Get the installed TermLauncher version, or "unknown" when not installed."""
    try:
        return metadata_version("termlauncher")
    except PackageNotFoundError:
        return "unknown"
