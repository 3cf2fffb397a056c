from dataclasses import dataclass
from typing import Optional, Tuple

import requests

from utils.logging_setup import get_logger

logger = get_logger("release_checker")

GITHUB_API_URL = "https://api.github.com/repos/{repo}/releases/latest"
USER_AGENT = "i18n-editor"


@dataclass
class ReleaseData:
    """The latest published release of a GitHub repository."""
    tag_name: str
    html_url: str

    @property
    def version(self) -> str:
        return self.tag_name.lstrip("vV")


def get_latest_release(repo: str, timeout: float = 30) -> Optional[ReleaseData]:
    """Look up the latest release of `repo` ("owner/name") on GitHub.

    Any network failure, timeout or unexpected payload means no release
    information is available and yields None.
    """
    url = GITHUB_API_URL.format(repo=repo)
    logger.debug(f"Checking latest release at {url}")
    try:
        response = requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except requests.exceptions.RequestException as e:
        logger.warning(f"Unable to check for a new release: {e}")
        return None
    except ValueError as e:
        logger.warning(f"Invalid release data from {url}: {e}")
        return None

    if not isinstance(data, dict):
        return None
    tag_name = data.get("tag_name")
    if not tag_name or not isinstance(tag_name, str):
        return None
    return ReleaseData(tag_name=tag_name, html_url=data.get("html_url") or "")


def _parse_version(version: str) -> Tuple[int, ...]:
    return tuple(int("".join(filter(str.isdigit, part)) or 0) for part in version.lstrip("vV").split("."))


def is_newer_version(current: str, latest: str) -> bool:
    """Check whether `latest` is a higher version than `current`."""
    if not latest:
        return False
    try:
        return _parse_version(latest) > _parse_version(current)
    except (ValueError, AttributeError):
        return False
