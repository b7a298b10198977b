"""Tests for Windows user PATH integration."""

from __future__ import annotations

from pathlib import Path
from typing import Dict

import pytest

from gitas_installer.core.errors import IntegrationWarning
from gitas_installer.integration.windows import append_entry, integrate_user_path

INSTALL_DIR = Path("C:/Users/dev/AppData/Local/gitas/bin")


class MemoryPathTarget:
    """In-memory stand-in for the persistent user PATH."""

    description = "user PATH"

    def __init__(self, value: str = "", fail_write: bool = False) -> None:
        self.value = value
        self.fail_write = fail_write
        self.writes = 0

    def read(self) -> str:
        return self.value

    def append(self, install_dir: Path) -> None:
        if self.fail_write:
            raise PermissionError("access denied")
        self.writes += 1
        self.value = append_entry(self.value, str(install_dir))


class TestAppendEntry:
    def test_empty(self) -> None:
        assert append_entry("", "C:/bin") == "C:/bin"

    def test_separator(self) -> None:
        assert append_entry("C:/a;C:/b", "C:/bin") == "C:/a;C:/b;C:/bin"

    def test_trailing_separator(self) -> None:
        assert append_entry("C:/a;", "C:/bin") == "C:/a;C:/bin"


class TestIntegrateUserPath:
    """Tests for integrate_user_path."""

    def test_appends_and_updates_process(self) -> None:
        target = MemoryPathTarget("C:/Windows")
        env: Dict[str, str] = {"PATH": "C:/Windows"}

        changed = integrate_user_path(INSTALL_DIR, target=target, environ=env, notify=lambda _: None)

        assert changed is True
        assert target.value == f"C:/Windows;{INSTALL_DIR}"
        assert env["PATH"] == f"C:/Windows;{INSTALL_DIR}"

    def test_is_idempotent(self) -> None:
        target = MemoryPathTarget("C:/Windows")
        env: Dict[str, str] = {"PATH": "C:/Windows"}

        integrate_user_path(INSTALL_DIR, target=target, environ=env, notify=lambda _: None)
        once = (target.value, env["PATH"])
        changed = integrate_user_path(INSTALL_DIR, target=target, environ=env, notify=lambda _: None)

        assert changed is False
        assert (target.value, env["PATH"]) == once
        assert target.writes == 1

    def test_empty_persistent_path(self) -> None:
        target = MemoryPathTarget("")
        env: Dict[str, str] = {}
        integrate_user_path(INSTALL_DIR, target=target, environ=env, notify=lambda _: None)
        assert target.value == str(INSTALL_DIR)
        assert env["PATH"] == str(INSTALL_DIR)

    def test_write_failure_is_warning(self) -> None:
        target = MemoryPathTarget("C:/Windows", fail_write=True)
        with pytest.raises(IntegrationWarning, match="Could not update user PATH"):
            integrate_user_path(INSTALL_DIR, target=target, environ={}, notify=lambda _: None)

    def test_notifies_on_change(self, capsys) -> None:
        integrate_user_path(INSTALL_DIR, target=MemoryPathTarget(), environ={})
        assert "Added" in capsys.readouterr().out
