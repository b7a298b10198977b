"""Tests for installer configuration loading."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from gitas_installer.bootstrap.paths import GitasPaths
from gitas_installer.bootstrap.placement import InstallPolicy
from gitas_installer.config.loader import (
    ConfigError,
    dict_to_config,
    expand_env_vars,
    load_config,
)
from gitas_installer.config.models import InstallerConfig
from gitas_installer.config.validation import ValidationSeverity, validate_config


@pytest.fixture
def paths(tmp_path: Path) -> GitasPaths:
    return GitasPaths(tmp_path / ".gitas")


def write_config(paths: GitasPaths, content: str) -> Path:
    paths.config_dir.mkdir(parents=True, exist_ok=True)
    paths.config_file.write_text(content)
    return paths.config_file


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_without_file(self, paths: GitasPaths) -> None:
        config = load_config(paths)
        assert config == InstallerConfig()
        assert config.repository.owner == "letmutex"
        assert config.binary == "gitas"
        assert config.install.policy is InstallPolicy.USER
        assert config.install.system_dir == Path("/usr/local/bin")
        assert config.network.timeout is None

    def test_loads_values(self, paths: GitasPaths, tmp_path: Path) -> None:
        write_config(paths, f"""
install:
  policy: system
  system_dir: {tmp_path / "bin"}
network:
  timeout: 30
logging:
  level: debug
""")
        config = load_config(paths)
        assert config.install.policy is InstallPolicy.SYSTEM
        assert config.install.system_dir == tmp_path / "bin"
        assert config.network.timeout == 30.0
        assert config.log_level == "DEBUG"
        assert config.config_sources == [str(paths.config_file)]

    def test_empty_file(self, paths: GitasPaths) -> None:
        write_config(paths, "")
        assert load_config(paths) == InstallerConfig()

    def test_invalid_yaml(self, paths: GitasPaths) -> None:
        write_config(paths, "install: [unclosed")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(paths)

    def test_not_a_mapping(self, paths: GitasPaths) -> None:
        write_config(paths, "- one\n- two\n")
        with pytest.raises(ConfigError, match="must be a YAML mapping"):
            load_config(paths)

    def test_invalid_policy(self, paths: GitasPaths) -> None:
        write_config(paths, "install:\n  policy: global\n")
        with pytest.raises(ConfigError, match="install.policy"):
            load_config(paths)

    def test_invalid_timeout(self, paths: GitasPaths) -> None:
        write_config(paths, "network:\n  timeout: -1\n")
        with pytest.raises(ConfigError, match="network.timeout"):
            load_config(paths)

    def test_non_string_system_dir_rejected(self, paths: GitasPaths) -> None:
        write_config(paths, "install:\n  policy: system\n  system_dir: 5\n")
        with pytest.raises(ConfigError, match="install.system_dir"):
            load_config(paths)

    def test_null_system_dir_uses_default(self, paths: GitasPaths) -> None:
        write_config(paths, "install:\n  system_dir: null\n")
        assert load_config(paths).install.system_dir == Path("/usr/local/bin")

    @pytest.mark.parametrize("value", ["null", "42", "''", "[letmutex]"])
    def test_repository_owner_must_be_string(self, paths: GitasPaths, value: str) -> None:
        write_config(paths, f"repository:\n  owner: {value}\n")
        with pytest.raises(ConfigError, match="repository.owner"):
            load_config(paths)

    def test_repository_name_must_be_string(self, paths: GitasPaths) -> None:
        write_config(paths, "repository:\n  name: null\n")
        with pytest.raises(ConfigError, match="repository.name"):
            load_config(paths)

    def test_plain_http_rejected(self, paths: GitasPaths) -> None:
        write_config(paths, "api_url: http://api.github.com\n")
        with pytest.raises(ConfigError, match="api_url"):
            load_config(paths)

    def test_unknown_key_warns_with_suggestion(self, paths: GitasPaths, caplog) -> None:
        write_config(paths, "instal:\n  policy: user\n")
        with caplog.at_level(logging.WARNING):
            config = load_config(paths)
        assert config == InstallerConfig()
        assert "did you mean 'install'" in caplog.text

    def test_env_var_expansion(self, paths: GitasPaths, tmp_path: Path) -> None:
        write_config(paths, "install:\n  policy: system\n  system_dir: ${GITAS_TEST_BIN}\n")
        with patch.dict(os.environ, {"GITAS_TEST_BIN": str(tmp_path / "opt")}):
            config = load_config(paths)
        assert config.install.system_dir == tmp_path / "opt"

    def test_explicit_path(self, tmp_path: Path) -> None:
        config_path = tmp_path / "custom.yml"
        config_path.write_text("repository:\n  owner: someone\n")
        config = load_config(config_path=config_path)
        assert config.repository.owner == "someone"
        assert config.repository.name == "gitas"


class TestExpandEnvVars:
    def test_default_value(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert expand_env_vars({"a": "${MISSING:-fallback}"}) == {"a": "fallback"}

    def test_nested(self) -> None:
        with patch.dict(os.environ, {"X": "1"}):
            assert expand_env_vars({"a": ["${X}", {"b": "${X}/y"}], "c": 3}) == {
                "a": ["1", {"b": "1/y"}],
                "c": 3,
            }

    def test_unset_without_default(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert expand_env_vars("${NOPE}") == ""


class TestValidateConfig:
    def test_valid(self) -> None:
        issues = validate_config(
            {"repository": {"owner": "letmutex", "name": "gitas"}, "install": {"policy": "user"}},
            source="test",
        )
        assert issues == []

    def test_section_must_be_mapping(self) -> None:
        issues = validate_config({"network": 30}, source="test")
        assert [i.severity for i in issues] == [ValidationSeverity.ERROR]

    def test_unknown_sub_key(self) -> None:
        issues = validate_config({"install": {"polcy": "user"}}, source="test")
        assert issues[0].key == "install.polcy"
        assert issues[0].suggestion == "policy"
        assert issues[0].severity is ValidationSeverity.WARNING

    def test_boolean_timeout_rejected(self) -> None:
        issues = validate_config({"network": {"timeout": True}}, source="test")
        assert issues[0].severity is ValidationSeverity.ERROR


def test_dict_to_config_null_sections() -> None:
    config = dict_to_config({"install": None, "network": None})
    assert config == InstallerConfig()
