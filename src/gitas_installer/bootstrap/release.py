"""Release resolution for gitas.

Queries the GitHub releases API for the latest published tag and derives
the download URL of the platform-specific archive.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from http.client import HTTPException
from typing import Any, Optional, Union
from urllib.error import HTTPError, URLError

from gitas_installer.bootstrap.download import secure_urlopen
from gitas_installer.bootstrap.platform import Platform
from gitas_installer.core.errors import NetworkError, VersionNotFound
from gitas_installer.core.logging import get_logger

LOGGER = get_logger(__name__)

DEFAULT_OWNER = "letmutex"
DEFAULT_REPO = "gitas"
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_DOWNLOAD_HOST = "https://github.com"

# Value reported when the API answered without a usable tag
NULL_TAG = "null"

GITHUB_ACCEPT = "application/vnd.github+json"


@dataclass(frozen=True)
class ReleaseInfo:
    """A resolved release asset.

    Attributes:
        tag: Release tag, e.g. "v1.2.3".
        asset_suffix: Platform part of the archive name.
        download_url: Full URL of the archive.
    """

    tag: str
    asset_suffix: str
    download_url: str


def latest_release_url(
    owner: str = DEFAULT_OWNER,
    repo: str = DEFAULT_REPO,
    api_url: str = DEFAULT_API_URL,
) -> str:
    """Return the releases API endpoint for the latest release."""
    return f"{api_url.rstrip('/')}/repos/{owner}/{repo}/releases/latest"


def build_download_url(
    platform_info: Platform,
    tag: str,
    owner: str = DEFAULT_OWNER,
    repo: str = DEFAULT_REPO,
    host: str = DEFAULT_DOWNLOAD_HOST,
) -> str:
    """Construct the download URL of a release archive.

    Example: https://github.com/letmutex/gitas/releases/download/v1.2.3/gitas-v1.2.3-linux-x64.tar.gz

    Raises:
        VersionNotFound: If the tag is empty or the null sentinel.
    """
    _check_tag(tag)
    filename = f"{repo}-{tag}-{platform_info.asset_suffix}"
    return f"{host.rstrip('/')}/{owner}/{repo}/releases/download/{tag}/{filename}"


def parse_tag_name(payload: Union[bytes, str]) -> str:
    """Extract ``tag_name`` from a releases API response body.

    Raises:
        VersionNotFound: If the body is not a JSON object or carries no
            usable tag.
    """
    try:
        data: Any = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise VersionNotFound(
            f"Could not find latest release version (invalid response: {e})"
        ) from e

    if not isinstance(data, dict):
        raise VersionNotFound("Could not find latest release version.")

    tag = data.get("tag_name")
    if not isinstance(tag, str):
        raise VersionNotFound("Could not find latest release version.")
    tag = tag.strip()
    _check_tag(tag)
    return tag


def fetch_latest_tag(
    owner: str = DEFAULT_OWNER,
    repo: str = DEFAULT_REPO,
    api_url: str = DEFAULT_API_URL,
    timeout: Optional[float] = None,
) -> str:
    """Query the releases API once and return the latest tag.

    No retry is attempted.

    Raises:
        NetworkError: If the API cannot be reached or answers with an error.
        VersionNotFound: If the response carries no usable tag.
    """
    url = latest_release_url(owner, repo, api_url)
    LOGGER.debug(f"Querying {url}")

    try:
        with secure_urlopen(url, timeout=timeout, headers={"Accept": GITHUB_ACCEPT}) as response:
            body = response.read()
    except HTTPError as e:
        raise NetworkError(
            f"Release lookup failed: HTTP {e.code} - {e.reason}"
        ) from e
    except URLError as e:
        raise NetworkError(
            f"Release lookup failed: {e.reason}. Check your network connection."
        ) from e
    except (OSError, ValueError, HTTPException) as e:
        raise NetworkError(f"Release lookup failed: {e}") from e

    return parse_tag_name(body)


def resolve_release(
    platform_info: Platform,
    owner: str = DEFAULT_OWNER,
    repo: str = DEFAULT_REPO,
    api_url: str = DEFAULT_API_URL,
    download_host: str = DEFAULT_DOWNLOAD_HOST,
    timeout: Optional[float] = None,
) -> ReleaseInfo:
    """Resolve the latest release asset for a platform."""
    tag = fetch_latest_tag(owner, repo, api_url, timeout=timeout)
    return ReleaseInfo(
        tag=tag,
        asset_suffix=platform_info.asset_suffix,
        download_url=build_download_url(platform_info, tag, owner, repo, download_host),
    )


def _check_tag(tag: str) -> None:
    if not tag or tag == NULL_TAG:
        raise VersionNotFound("Could not find latest release version.")
