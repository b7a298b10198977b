"""Persistent user PATH integration on native Windows."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Callable, MutableMapping, Optional

from gitas_installer.integration.path import PathTarget, ensure_on_path
from gitas_installer.core.logging import get_logger

LOGGER = get_logger(__name__)

ENVIRONMENT_KEY = "Environment"
PATH_VALUE = "Path"

HWND_BROADCAST = 0xFFFF
WM_SETTINGCHANGE = 0x001A
SMTO_ABORTIFHUNG = 0x0002


def append_entry(path_value: str, entry: str) -> str:
    """Append entry to a ';'-separated PATH value."""
    if not path_value:
        return entry
    return f"{path_value.rstrip(';')};{entry}"


class WindowsUserPathTarget:
    """The HKCU\\Environment ``Path`` value."""

    description = "user PATH"

    def read(self) -> str:
        import winreg

        with winreg.OpenKey(winreg.HKEY_CURRENT_USER, ENVIRONMENT_KEY) as key:
            try:
                value, _ = winreg.QueryValueEx(key, PATH_VALUE)
            except FileNotFoundError:
                return ""
        return value or ""

    def append(self, install_dir: Path) -> None:
        import winreg

        with winreg.OpenKey(
            winreg.HKEY_CURRENT_USER, ENVIRONMENT_KEY, 0, winreg.KEY_READ | winreg.KEY_WRITE
        ) as key:
            try:
                value, value_type = winreg.QueryValueEx(key, PATH_VALUE)
            except FileNotFoundError:
                value, value_type = "", winreg.REG_EXPAND_SZ
            winreg.SetValueEx(
                key, PATH_VALUE, 0, value_type, append_entry(value or "", str(install_dir))
            )
        _broadcast_environment_change()


def _broadcast_environment_change() -> None:
    """Tell running programs (Explorer, new terminals) that PATH changed."""
    if sys.platform != "win32":
        return
    import ctypes

    result = ctypes.c_ulong()
    ctypes.windll.user32.SendMessageTimeoutW(
        HWND_BROADCAST, WM_SETTINGCHANGE, 0, ENVIRONMENT_KEY,
        SMTO_ABORTIFHUNG, 5000, ctypes.byref(result),
    )


def integrate_user_path(
    install_dir: Path,
    target: Optional[PathTarget] = None,
    environ: Optional[MutableMapping[str, str]] = None,
    notify: Callable[[str], None] = print,
) -> bool:
    """Add install_dir to the persistent user PATH and the current process.

    Returns:
        True if the persistent PATH was modified.

    Raises:
        IntegrationWarning: If the persistent PATH cannot be read or written.
    """
    target = target or WindowsUserPathTarget()
    env = os.environ if environ is None else environ

    changed = ensure_on_path(target, install_dir)
    if changed:
        notify(f"Added {install_dir} to your user PATH")

    current = env.get("PATH", "")
    if str(install_dir) not in current:
        env["PATH"] = append_entry(current, str(install_dir))
        LOGGER.debug("Updated PATH of the current process")

    return changed
