"""Installer configuration."""

from gitas_installer.config.loader import ConfigError, load_config
from gitas_installer.config.models import InstallerConfig

__all__ = ["ConfigError", "InstallerConfig", "load_config"]
