"""Shell profile integration for POSIX hosts."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional

from gitas_installer.bootstrap.platform import OperatingSystem
from gitas_installer.integration.path import ensure_on_path
from gitas_installer.core.logging import get_logger

LOGGER = get_logger(__name__)

PROFILE_BANNER = "# Gitas path"

BOLD = "\033[1m"
RESET = "\033[0m"


class ShellKind(str, Enum):
    """Shell families whose profile can be edited."""

    BASH = "bash"
    ZSH = "zsh"


# Profile file per shell, relative to the user's home. The macOS entry for
# bash wins over the default one because Terminal.app starts login shells.
_PROFILES: Dict[ShellKind, str] = {
    ShellKind.BASH: ".bashrc",
    ShellKind.ZSH: ".zshrc",
}
_MACOS_PROFILES: Dict[ShellKind, str] = {
    ShellKind.BASH: ".bash_profile",
}


def detect_shell(shell: Optional[str]) -> Optional[ShellKind]:
    """Map the value of $SHELL to a supported shell family.

    Returns:
        The shell family, or None for unset or unsupported shells.
    """
    if not shell:
        return None
    name = os.path.basename(shell.rstrip("/"))
    try:
        return ShellKind(name)
    except ValueError:
        return None


def profile_path(kind: ShellKind, user_home: Path, os_name: OperatingSystem) -> Path:
    """Return the profile file for a shell family on an OS."""
    if os_name is OperatingSystem.MACOS and kind in _MACOS_PROFILES:
        return user_home / _MACOS_PROFILES[kind]
    return user_home / _PROFILES[kind]


def export_line(install_dir: Path) -> str:
    return f'export PATH="$PATH:{install_dir}"'


class ShellProfileTarget:
    """A shell profile file used as persistent PATH state."""

    def __init__(self, profile: Path) -> None:
        self.profile = profile

    @property
    def description(self) -> str:
        return str(self.profile)

    def read(self) -> str:
        return self.profile.read_text(encoding="utf-8", errors="replace")

    def append(self, install_dir: Path) -> None:
        with open(self.profile, "a", encoding="utf-8") as f:
            f.write(f"\n{PROFILE_BANNER}\n{export_line(install_dir)}\n")


def integrate_shell_profile(
    install_dir: Path,
    os_name: OperatingSystem,
    user_home: Path,
    environ: Optional[Mapping[str, str]] = None,
    notify: Callable[[str], None] = print,
) -> Optional[Path]:
    """Make install_dir part of PATH for future shell sessions.

    Unsupported shells and missing profile files are skipped without error.

    Returns:
        The edited profile, or None if nothing was changed.

    Raises:
        IntegrationWarning: If the profile cannot be read or written.
    """
    env = os.environ if environ is None else environ
    kind = detect_shell(env.get("SHELL"))
    if kind is None:
        LOGGER.debug(f"Unsupported shell {env.get('SHELL')!r}, skipping PATH setup")
        return None

    profile = profile_path(kind, user_home, os_name)
    if not profile.is_file():
        LOGGER.debug(f"Profile {profile} does not exist, skipping PATH setup")
        return None

    target = ShellProfileTarget(profile)
    if not ensure_on_path(target, install_dir):
        return None

    notify(f"Added {install_dir} to PATH in {profile}")
    notify(f"Please restart your terminal or run: {BOLD}source {profile}{RESET}")
    return profile
