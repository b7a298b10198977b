"""Binary placement into the final install directory.

Two policies are supported:

- ``user``: ~/.gitas/bin (or %LOCALAPPDATA%\\gitas\\bin on Windows); the
  user owns it, so no elevation is ever needed.
- ``system``: a shared directory such as /usr/local/bin. The placement
  mode is decided from two capability checks (is the process privileged,
  can it write the directory) and only escalates through sudo when the
  directory is not writable.
"""

from __future__ import annotations

import os
import shutil
import stat
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from gitas_installer.bootstrap.paths import GitasPaths
from gitas_installer.bootstrap.platform import Platform
from gitas_installer.core.errors import PlacementError
from gitas_installer.core.logging import get_logger

LOGGER = get_logger(__name__)

ELEVATION_COMMAND = "sudo"

CommandRunner = Callable[[List[str]], subprocess.CompletedProcess]


class InstallPolicy(str, Enum):
    """Where the binary is installed."""

    USER = "user"
    SYSTEM = "system"


class PlacementMode(str, Enum):
    """How the binary is moved into place."""

    DIRECT = "direct"
    ELEVATED = "elevated"
    PRIVILEGED = "privileged"


@dataclass(frozen=True)
class InstallPlan:
    """Where and how the binary is placed.

    Attributes:
        install_dir: Final directory of the binary.
        binary_name: Executable file name.
        policy: Install policy the plan was computed for.
        mode: Placement mode chosen from the capability checks.
    """

    install_dir: Path
    binary_name: str
    policy: InstallPolicy = InstallPolicy.USER
    mode: PlacementMode = PlacementMode.DIRECT

    @property
    def requires_elevation(self) -> bool:
        return self.mode is PlacementMode.ELEVATED

    @property
    def binary_path(self) -> Path:
        return self.install_dir / self.binary_name


class PrivilegeProbe:
    """Capability checks for the current principal."""

    def is_privileged(self) -> bool:
        """True when running as root (always False where euid is unknown)."""
        geteuid = getattr(os, "geteuid", None)
        return geteuid is not None and geteuid() == 0

    def can_write(self, directory: Path) -> bool:
        """True when the directory, or its nearest existing ancestor, is writable."""
        candidate = directory
        while not candidate.exists():
            if candidate.parent == candidate:
                return False
            candidate = candidate.parent
        return os.access(candidate, os.W_OK | os.X_OK)


def run_command(cmd: List[str]) -> subprocess.CompletedProcess:
    """Run a command, inheriting the terminal so sudo can prompt."""
    return subprocess.run(cmd, check=True)


def choose_mode(
    install_dir: Path,
    policy: InstallPolicy,
    probe: PrivilegeProbe,
) -> PlacementMode:
    """Decide the placement mode for an install directory."""
    if policy is InstallPolicy.USER:
        return PlacementMode.DIRECT
    if probe.is_privileged():
        return PlacementMode.PRIVILEGED
    if probe.can_write(install_dir):
        return PlacementMode.DIRECT
    return PlacementMode.ELEVATED


def plan_install(
    platform_info: Platform,
    paths: GitasPaths,
    policy: InstallPolicy = InstallPolicy.USER,
    system_dir: Optional[Path] = None,
    binary: str = "gitas",
    probe: Optional[PrivilegeProbe] = None,
) -> InstallPlan:
    """Compute the install plan for a platform and policy."""
    probe = probe or PrivilegeProbe()
    binary_name = platform_info.binary_name(binary)

    if platform_info.is_windows:
        if policy is not InstallPolicy.USER:
            LOGGER.info("Shared install is not supported on Windows, using per-user directory")
        return InstallPlan(
            install_dir=paths.windows_bin_dir(),
            binary_name=binary_name,
            policy=InstallPolicy.USER,
            mode=PlacementMode.DIRECT,
        )

    if policy is InstallPolicy.SYSTEM:
        if system_dir is None:
            raise ValueError("A system directory is required for the system policy")
        install_dir = system_dir
    else:
        install_dir = paths.bin_dir

    mode = choose_mode(install_dir, policy, probe)
    LOGGER.debug(f"Install plan: {install_dir} ({policy.value}, {mode.value})")
    return InstallPlan(
        install_dir=install_dir,
        binary_name=binary_name,
        policy=policy,
        mode=mode,
    )


def make_executable(path: Path) -> None:
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def place_binary(
    source: Path,
    plan: InstallPlan,
    runner: CommandRunner = run_command,
    notify: Callable[[str], None] = print,
) -> Path:
    """Move the extracted binary into the install directory.

    Args:
        source: Extracted executable inside the temporary workspace.
        plan: Install plan.
        runner: Executes elevated commands.
        notify: Receives the user-facing notice printed before escalating.

    Returns:
        Final path of the executable.

    Raises:
        PlacementError: If the move fails, or the elevated move fails or is
            declined.
    """
    target = plan.binary_path

    if plan.mode is PlacementMode.ELEVATED:
        _place_elevated(source, plan, runner, notify)
        return target

    try:
        plan.install_dir.mkdir(parents=True, exist_ok=True)
        shutil.move(str(source), str(target))
        make_executable(target)
    except PermissionError as e:
        if plan.policy is InstallPolicy.SYSTEM and plan.mode is PlacementMode.DIRECT:
            LOGGER.debug(f"Direct move into {plan.install_dir} denied: {e}")
            _place_elevated(source, plan, runner, notify)
            return target
        raise PlacementError(f"Failed to install to {target}: {e}") from e
    except OSError as e:
        raise PlacementError(f"Failed to install to {target}: {e}") from e

    LOGGER.info(f"Installed {target}")
    return target


def _place_elevated(
    source: Path,
    plan: InstallPlan,
    runner: CommandRunner,
    notify: Callable[[str], None],
) -> None:
    target = plan.binary_path
    notify(
        f"Elevated permissions are required to install to {plan.install_dir}; "
        f"using {ELEVATION_COMMAND}."
    )
    commands = [
        [ELEVATION_COMMAND, "mkdir", "-p", str(plan.install_dir)],
        [ELEVATION_COMMAND, "mv", str(source), str(target)],
        [ELEVATION_COMMAND, "chmod", "+x", str(target)],
    ]
    for cmd in commands:
        try:
            runner(cmd)
        except FileNotFoundError as e:
            raise PlacementError(
                f"{ELEVATION_COMMAND} is not available; cannot write to {plan.install_dir}"
            ) from e
        except subprocess.CalledProcessError as e:
            raise PlacementError(
                f"Elevated command failed (exit {e.returncode}): {' '.join(cmd)}"
            ) from e
