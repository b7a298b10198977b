"""Release archive fetching and extraction.

Downloads the versioned archive into a scoped temporary workspace and
extracts it there.
"""

from __future__ import annotations

import shutil
import tarfile
import tempfile
import zipfile
from http.client import HTTPException
from pathlib import Path
from types import TracebackType
from typing import Optional, Type
from urllib.error import HTTPError, URLError

from gitas_installer.bootstrap.download import download_file
from gitas_installer.core.errors import DownloadError, ExtractError
from gitas_installer.core.logging import get_logger

LOGGER = get_logger(__name__)

WORKSPACE_PREFIX = "gitas-install-"


class TempWorkspace:
    """A uniquely named temporary directory owned by one installer run.

    The directory is created on enter and removed on every exit path.
    """

    def __init__(self, prefix: str = WORKSPACE_PREFIX, base_dir: Optional[Path] = None) -> None:
        self._prefix = prefix
        self._base_dir = base_dir
        self._path: Optional[Path] = None

    @property
    def path(self) -> Path:
        if self._path is None:
            raise RuntimeError("Workspace is not active")
        return self._path

    def __enter__(self) -> "TempWorkspace":
        try:
            self._path = Path(tempfile.mkdtemp(
                prefix=self._prefix,
                dir=str(self._base_dir) if self._base_dir else None,
            ))
        except OSError as e:
            raise DownloadError(f"Could not create temporary directory: {e}") from e
        LOGGER.debug(f"Created workspace {self._path}")
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.cleanup()

    def cleanup(self) -> None:
        """Remove the workspace directory if it still exists."""
        if self._path is None or not self._path.exists():
            return
        try:
            shutil.rmtree(self._path)
        except OSError as e:
            LOGGER.warning(f"Could not remove temporary directory {self._path}: {e}")
            return
        LOGGER.debug(f"Removed workspace {self._path}")


def archive_name(repo: str, extension: str) -> str:
    """Local file name of a downloaded archive, e.g. "gitas.tar.gz"."""
    return f"{repo}.{extension}"


def download_archive(
    url: str,
    dest_path: Path,
    timeout: Optional[float] = None,
) -> Path:
    """Download a release archive.

    Args:
        url: Archive URL.
        dest_path: File to write.
        timeout: Socket timeout in seconds.

    Returns:
        The written path.

    Raises:
        DownloadError: If the transfer fails or the server answers with an
            error status.
    """
    LOGGER.info(f"Downloading {url}")
    try:
        download_file(url, dest_path, timeout=timeout)
    except HTTPError as e:
        raise DownloadError(
            f"Failed to download {url}: HTTP {e.code} - {e.reason}"
        ) from e
    except URLError as e:
        raise DownloadError(
            f"Failed to download {url}: {e.reason}. Check your network connection."
        ) from e
    except (OSError, ValueError, HTTPException) as e:
        raise DownloadError(f"Failed to download {url}: {e}") from e

    return dest_path


def extract_archive(archive_path: Path, dest_dir: Path) -> None:
    """Extract a .tar.gz or .zip archive into dest_dir.

    Raises:
        ExtractError: If the archive is corrupt, has an unknown format, or
            contains members that would land outside dest_dir.
    """
    LOGGER.info(f"Extracting {archive_path.name} to {dest_dir}")
    try:
        if archive_path.name.endswith(".zip"):
            _extract_zip(archive_path, dest_dir)
        elif archive_path.name.endswith((".tar.gz", ".tgz")):
            _extract_tarball(archive_path, dest_dir)
        else:
            raise ExtractError(f"Unknown archive format: {archive_path.name}")
    except ExtractError:
        raise
    except (tarfile.TarError, zipfile.BadZipFile, EOFError, OSError) as e:
        raise ExtractError(f"Failed to extract {archive_path.name}: {e}") from e


def _check_member(dest_dir: Path, name: str) -> None:
    member_path = (dest_dir / name).resolve()
    if not member_path.is_relative_to(dest_dir.resolve()):
        raise ExtractError(f"Unsafe path in archive: {name}")


def _extract_tarball(archive_path: Path, dest_dir: Path) -> None:
    with tarfile.open(archive_path, "r:gz") as tar:
        for member in tar.getmembers():
            _check_member(dest_dir, member.name)
            if member.issym() or member.islnk():
                raise ExtractError(f"Links are not allowed in archive: {member.name}")
        for member in tar.getmembers():
            if hasattr(tarfile, "data_filter"):
                tar.extract(member, path=dest_dir, filter="data")
            else:
                tar.extract(member, path=dest_dir)


def _extract_zip(archive_path: Path, dest_dir: Path) -> None:
    with zipfile.ZipFile(archive_path, "r") as zf:
        for name in zf.namelist():
            _check_member(dest_dir, name)
        zf.extractall(dest_dir)


def locate_binary(search_dir: Path, binary_name: str) -> Path:
    """Find the extracted executable.

    Looks at the top level first, then in nested directories (some
    archives wrap their content in a versioned folder).

    Raises:
        ExtractError: If no file with that name was extracted.
    """
    direct = search_dir / binary_name
    if direct.is_file():
        return direct

    for candidate in sorted(search_dir.rglob(binary_name)):
        if candidate.is_file():
            LOGGER.debug(f"Found {binary_name} at {candidate}")
            return candidate

    raise ExtractError(f"Archive does not contain {binary_name}")
