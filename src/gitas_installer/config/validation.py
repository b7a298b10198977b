"""Configuration validation for the installer.

Validates known keys and value types. Unknown keys produce warnings with
a close-match suggestion; invalid values produce errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from difflib import get_close_matches
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from gitas_installer.core.logging import get_logger

LOGGER = get_logger(__name__)


class ValidationSeverity(Enum):
    """Severity level for validation issues."""

    ERROR = "error"  # Config cannot be used
    WARNING = "warning"  # Likely mistake but config usable


@dataclass
class ConfigValidationIssue:
    """A validation issue for configuration with severity."""

    message: str
    source: str
    severity: ValidationSeverity
    key: Optional[str] = None
    suggestion: Optional[str] = None

    def __str__(self) -> str:
        text = f"{self.source}: {self.message}"
        if self.suggestion:
            text += f" (did you mean '{self.suggestion}'?)"
        return text


VALID_TOP_LEVEL_KEYS: Set[str] = {
    "repository",
    "install",
    "network",
    "logging",
    "api_url",
    "download_host",
}

VALID_SECTION_KEYS: Dict[str, Set[str]] = {
    "repository": {"owner", "name"},
    "install": {"policy", "system_dir"},
    "network": {"timeout"},
    "logging": {"level"},
}

VALID_POLICIES: Set[str] = {"user", "system"}

VALID_LOG_LEVELS: Set[str] = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

URL_KEYS = ("api_url", "download_host")


def validate_config(data: Dict[str, Any], source: str) -> List[ConfigValidationIssue]:
    """Validate a configuration dictionary.

    Args:
        data: Config dictionary to validate.
        source: Source file path for messages.

    Returns:
        List of validation issues (warnings and errors).
    """
    issues: List[ConfigValidationIssue] = []

    if not isinstance(data, dict):  # type: ignore[unreachable]
        issues.append(ConfigValidationIssue(
            message=f"Config must be a mapping, got {type(data).__name__}",
            source=source,
            severity=ValidationSeverity.ERROR,
        ))
        return issues  # type: ignore[unreachable]

    for key, value in data.items():
        if key not in VALID_TOP_LEVEL_KEYS:
            _add(issues, ConfigValidationIssue(
                message=f"Unknown top-level key '{key}'",
                source=source,
                severity=ValidationSeverity.WARNING,
                key=key,
                suggestion=_suggest_key(key, VALID_TOP_LEVEL_KEYS),
            ))
            continue

        valid_keys = VALID_SECTION_KEYS.get(key)
        if valid_keys is None:
            continue
        if not isinstance(value, dict):
            _add(issues, ConfigValidationIssue(
                message=f"'{key}' must be a mapping, got {type(value).__name__}",
                source=source,
                severity=ValidationSeverity.ERROR,
                key=key,
            ))
            continue
        for sub_key in value:
            if sub_key not in valid_keys:
                _add(issues, ConfigValidationIssue(
                    message=f"Unknown key '{sub_key}' in '{key}'",
                    source=source,
                    severity=ValidationSeverity.WARNING,
                    key=f"{key}.{sub_key}",
                    suggestion=_suggest_key(sub_key, valid_keys),
                ))

    for issue in _validate_values(data, source):
        _add(issues, issue)

    return issues


def _validate_values(data: Dict[str, Any], source: str) -> List[ConfigValidationIssue]:
    issues: List[ConfigValidationIssue] = []

    install = data.get("install")
    if isinstance(install, dict) and "policy" in install:
        policy = install["policy"]
        if not isinstance(policy, str) or policy.lower() not in VALID_POLICIES:
            issues.append(ConfigValidationIssue(
                message=f"Invalid value '{policy}' for 'install.policy'. "
                        f"Valid values: {', '.join(sorted(VALID_POLICIES))}",
                source=source,
                severity=ValidationSeverity.ERROR,
                key="install.policy",
                suggestion=_suggest_key(str(policy).lower(), VALID_POLICIES),
            ))

    # null falls back to the default directory
    if isinstance(install, dict) and install.get("system_dir") is not None:
        system_dir = install["system_dir"]
        if not isinstance(system_dir, str) or not system_dir.strip():
            issues.append(ConfigValidationIssue(
                message=f"'install.system_dir' must be a directory path, got {system_dir!r}",
                source=source,
                severity=ValidationSeverity.ERROR,
                key="install.system_dir",
            ))

    repository = data.get("repository")
    if isinstance(repository, dict):
        for sub_key in ("owner", "name"):
            if sub_key not in repository:
                continue
            value = repository[sub_key]
            if not isinstance(value, str) or not value.strip():
                issues.append(ConfigValidationIssue(
                    message=f"'repository.{sub_key}' must be a non-empty string, got {value!r}",
                    source=source,
                    severity=ValidationSeverity.ERROR,
                    key=f"repository.{sub_key}",
                ))

    network = data.get("network")
    if isinstance(network, dict) and network.get("timeout") is not None:
        timeout = network["timeout"]
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            issues.append(ConfigValidationIssue(
                message=f"'network.timeout' must be a positive number, got {timeout!r}",
                source=source,
                severity=ValidationSeverity.ERROR,
                key="network.timeout",
            ))

    log_config = data.get("logging")
    if isinstance(log_config, dict) and "level" in log_config:
        level = log_config["level"]
        if not isinstance(level, str) or level.upper() not in VALID_LOG_LEVELS:
            issues.append(ConfigValidationIssue(
                message=f"Invalid value '{level}' for 'logging.level'. "
                        f"Valid values: {', '.join(sorted(VALID_LOG_LEVELS))}",
                source=source,
                severity=ValidationSeverity.ERROR,
                key="logging.level",
            ))

    for key in URL_KEYS:
        value = data.get(key)
        if value is not None and (not isinstance(value, str) or not value.startswith("https://")):
            issues.append(ConfigValidationIssue(
                message=f"'{key}' must be an https:// URL, got {value!r}",
                source=source,
                severity=ValidationSeverity.ERROR,
                key=key,
            ))

    return issues


def _suggest_key(invalid_key: str, valid_keys: Set[str]) -> Optional[str]:
    """Suggest a valid key for a potential typo."""
    matches = get_close_matches(invalid_key, list(valid_keys), n=1, cutoff=0.6)
    return matches[0] if matches else None


def _add(issues: List[ConfigValidationIssue], issue: ConfigValidationIssue) -> None:
    issues.append(issue)
    if issue.severity is ValidationSeverity.WARNING:
        LOGGER.warning(str(issue))
