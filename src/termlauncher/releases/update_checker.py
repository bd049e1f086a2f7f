"""Check GitHub for a newer TermLauncher release."""

import logging
from dataclasses import asdict, dataclass
from typing import Any

import httpx

from termlauncher.releases.version import is_newer

logger = logging.getLogger(__name__)

DEFAULT_GITHUB_REPO = "xjin9612/TermLauncher"
DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class UpdateStatus:
    """Result of an update check.

    ``error`` is one of "api-error", "timeout" or "network-error" when the
    check could not be completed.
    """

    has_update: bool
    current_version: str
    latest_version: str | None = None
    release_url: str = ""
    release_notes: str = ""
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the status as a plain dictionary."""
        return asdict(self)


def check_for_updates(
    current_version: str,
    github_repo: str = DEFAULT_GITHUB_REPO,
    timeout: float = DEFAULT_TIMEOUT,
) -> UpdateStatus:
    """Compare the running version with the latest GitHub release.

    Network and API failures are reported through ``UpdateStatus.error``
    instead of being raised.

    Args:
        current_version: Version of the running build
        github_repo: Repository in "owner/name" form
        timeout: Request timeout in seconds

    Returns:
        UpdateStatus: Whether a newer release is available
    """
    api_url = f"https://api.github.com/repos/{github_repo}/releases/latest"
    headers = {
        "Accept": "application/vnd.github.v3+json",
        "User-Agent": f"TermLauncher/{current_version}",
    }

    try:
        with httpx.Client(timeout=timeout) as client:
            response = client.get(api_url, headers=headers)
    except httpx.TimeoutException:
        logger.warning("Update check timed out")
        return UpdateStatus(has_update=False, current_version=current_version, error="timeout")
    except httpx.HTTPError as e:
        logger.warning("Update check failed: %s", e)
        return UpdateStatus(
            has_update=False, current_version=current_version, error="network-error"
        )

    if not response.is_success:
        logger.warning("GitHub API returned %s", response.status_code)
        return UpdateStatus(has_update=False, current_version=current_version, error="api-error")

    try:
        release = response.json()
    except ValueError:
        logger.warning("GitHub API returned a malformed release document")
        return UpdateStatus(has_update=False, current_version=current_version, error="api-error")
    if not isinstance(release, dict):
        return UpdateStatus(has_update=False, current_version=current_version, error="api-error")

    latest_version = str(release.get("tag_name") or "")
    has_update = is_newer(current_version, latest_version)
    logger.info(
        "Update check: current=%s, latest=%s, has_update=%s",
        current_version,
        latest_version,
        has_update,
    )

    return UpdateStatus(
        has_update=has_update,
        current_version=current_version,
        latest_version=latest_version.removeprefix("v"),
        release_url=release.get("html_url") or "",
        release_notes=release.get("body") or "",
    )
