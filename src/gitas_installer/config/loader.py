"""Configuration file loading.

Handles loading the optional installer configuration from YAML with:
- Config file at ~/.gitas/config/installer.yml
- Environment variable expansion (${VAR})
- Validation with typo suggestions
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from gitas_installer.bootstrap.paths import GitasPaths
from gitas_installer.bootstrap.placement import InstallPolicy
from gitas_installer.config.models import (
    InstallConfig,
    InstallerConfig,
    NetworkConfig,
    RepositoryConfig,
)
from gitas_installer.config.validation import ValidationSeverity, validate_config
from gitas_installer.core.logging import get_logger

LOGGER = get_logger(__name__)

# Environment variable pattern: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


class ConfigError(Exception):
    """Configuration loading or parsing error."""

    pass


def load_config(
    paths: Optional[GitasPaths] = None,
    config_path: Optional[Path] = None,
) -> InstallerConfig:
    """Load the installer configuration.

    Without a config file the built-in defaults are returned.

    Args:
        paths: Gitas paths used to locate the default config file.
        config_path: Explicit config file, overrides the default location.

    Returns:
        InstallerConfig instance.

    Raises:
        ConfigError: If the file cannot be parsed or holds invalid values.
    """
    path = config_path or (paths or GitasPaths.default()).config_file
    if not path.is_file():
        LOGGER.debug(f"No config file at {path}, using defaults")
        return InstallerConfig()

    try:
        data = load_yaml_file(path)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    errors = [
        issue for issue in validate_config(data, source=str(path))
        if issue.severity is ValidationSeverity.ERROR
    ]
    if errors:
        raise ConfigError("; ".join(str(issue) for issue in errors))

    config = dict_to_config(data)
    config._config_sources = [str(path)]
    LOGGER.debug(f"Loaded config from {path}")
    return config


def load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML config file.

    Performs environment variable expansion on string values.

    Raises:
        yaml.YAMLError: If YAML parsing fails.
        ConfigError: If the document is not a mapping.
    """
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    data = yaml.safe_load(content)

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must be a YAML mapping, got {type(data).__name__}")

    return expand_env_vars(data)


def expand_env_vars(data: Any) -> Any:
    """Recursively expand environment variables in config values.

    Supports ${VAR} and ${VAR:-default} syntax.
    """
    if isinstance(data, dict):
        return {k: expand_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        return ENV_VAR_PATTERN.sub(_env_var_replacer, data)
    else:
        return data


def _env_var_replacer(match: re.Match[str]) -> str:
    """Replace environment variable reference with its value."""
    var_name = match.group(1)
    default_value = match.group(2)

    value = os.environ.get(var_name)
    if value is not None:
        return value
    if default_value is not None:
        return default_value

    LOGGER.warning(f"Environment variable ${var_name} is not set and has no default")
    return ""


def dict_to_config(data: Dict[str, Any]) -> InstallerConfig:
    """Convert a validated dictionary to InstallerConfig."""
    defaults = InstallerConfig()

    repo_data = data.get("repository") or {}
    repository = RepositoryConfig(
        owner=str(repo_data.get("owner", defaults.repository.owner)),
        name=str(repo_data.get("name", defaults.repository.name)),
    )

    install_data = data.get("install") or {}
    install = InstallConfig(
        policy=InstallPolicy(str(install_data.get("policy", defaults.install.policy.value)).lower()),
        system_dir=Path(install_data.get("system_dir") or defaults.install.system_dir).expanduser(),
    )

    network_data = data.get("network") or {}
    timeout = network_data.get("timeout", defaults.network.timeout)
    network = NetworkConfig(timeout=float(timeout) if timeout is not None else None)

    log_data = data.get("logging") or {}

    return InstallerConfig(
        repository=repository,
        install=install,
        network=network,
        api_url=str(data.get("api_url", defaults.api_url)),
        download_host=str(data.get("download_host", defaults.download_host)),
        log_level=str(log_data.get("level", defaults.log_level)).upper(),
    )
