"""Typed installer configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from gitas_installer.bootstrap.paths import DEFAULT_SYSTEM_BIN_DIR
from gitas_installer.bootstrap.placement import InstallPolicy
from gitas_installer.bootstrap.release import (
    DEFAULT_API_URL,
    DEFAULT_DOWNLOAD_HOST,
    DEFAULT_OWNER,
    DEFAULT_REPO,
)


@dataclass
class RepositoryConfig:
    """Release source."""

    owner: str = DEFAULT_OWNER
    name: str = DEFAULT_REPO


@dataclass
class InstallConfig:
    """Install location policy."""

    policy: InstallPolicy = InstallPolicy.USER
    system_dir: Path = DEFAULT_SYSTEM_BIN_DIR


@dataclass
class NetworkConfig:
    """Network settings.

    ``timeout`` of None blocks until the server answers.
    """

    timeout: Optional[float] = None


@dataclass
class InstallerConfig:
    """Complete installer configuration.

    The defaults reproduce the behavior of an installer run without any
    configuration file.
    """

    repository: RepositoryConfig = field(default_factory=RepositoryConfig)
    install: InstallConfig = field(default_factory=InstallConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    api_url: str = DEFAULT_API_URL
    download_host: str = DEFAULT_DOWNLOAD_HOST
    log_level: str = "WARNING"

    _config_sources: List[str] = field(default_factory=list, repr=False, compare=False)

    @property
    def binary(self) -> str:
        """Base name of the installed executable (matches the repository)."""
        return self.repository.name

    @property
    def config_sources(self) -> List[str]:
        """Config files this configuration was loaded from."""
        return list(self._config_sources)
