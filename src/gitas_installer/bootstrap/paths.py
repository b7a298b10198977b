"""Path management for the gitas install locations.

Handles the ~/.gitas directory structure and the per-platform default
install directories.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Mapping, Optional

# Default directory name under user home
DEFAULT_HOME_DIR_NAME = ".gitas"

# Shared install location on POSIX hosts
DEFAULT_SYSTEM_BIN_DIR = Path("/usr/local/bin")

# Sub-path of %LOCALAPPDATA% used on native Windows
WINDOWS_APP_DIR_NAME = "gitas"


def get_gitas_home(user_home: Optional[Path] = None) -> Path:
    """Get the gitas home directory path (~/.gitas)."""
    return (user_home or Path.home()) / DEFAULT_HOME_DIR_NAME


def get_local_app_data(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Return the per-user local application data directory on Windows.

    Falls back to ~/AppData/Local when LOCALAPPDATA is not set.
    """
    env = os.environ if environ is None else environ
    value = env.get("LOCALAPPDATA")
    if value:
        return Path(value)
    return Path.home() / "AppData" / "Local"


@dataclass
class GitasPaths:
    """Manages paths within the gitas home directory.

    Directory structure:
        ~/.gitas/
            bin/
                gitas                   - Installed binary (per-user install)
            config/
                installer.yml           - Optional installer configuration
    """

    home: Path

    _BIN_DIR: ClassVar[str] = "bin"
    _CONFIG_DIR: ClassVar[str] = "config"
    _CONFIG_FILE: ClassVar[str] = "installer.yml"

    @classmethod
    def default(cls) -> "GitasPaths":
        """Create paths from the default gitas home."""
        return cls(get_gitas_home())

    @property
    def user_home(self) -> Path:
        """The user's home directory that contains the gitas home."""
        return self.home.parent

    @property
    def bin_dir(self) -> Path:
        """Directory holding the per-user gitas binary."""
        return self.home / self._BIN_DIR

    @property
    def config_dir(self) -> Path:
        return self.home / self._CONFIG_DIR

    @property
    def config_file(self) -> Path:
        """Path to the optional installer configuration file."""
        return self.config_dir / self._CONFIG_FILE

    def windows_bin_dir(self, environ: Optional[Mapping[str, str]] = None) -> Path:
        """Directory holding the gitas binary on native Windows."""
        return get_local_app_data(environ) / WINDOWS_APP_DIR_NAME / self._BIN_DIR
