"""Platform detection for the gitas installer.

Detects OS and architecture to determine which release asset to download.
"""

from __future__ import annotations

import platform
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from gitas_installer.core.errors import UnsupportedPlatform


class OperatingSystem(str, Enum):
    """Canonical OS names used in release asset names."""

    LINUX = "linux"
    MACOS = "macos"
    WINDOWS = "windows"


class Architecture(str, Enum):
    """Canonical architecture names used in release asset names."""

    X64 = "x64"
    ARM64 = "arm64"


# Raw platform.system() values mapped directly
_OS_MAP: Dict[str, OperatingSystem] = {
    "Linux": OperatingSystem.LINUX,
    "Darwin": OperatingSystem.MACOS,
    "Windows": OperatingSystem.WINDOWS,
}

# POSIX emulation layers on Windows report e.g. "MINGW64_NT-10.0-19045"
WINDOWS_EMULATION_PREFIXES: Tuple[str, ...] = ("MINGW", "MSYS", "CYGWIN")

_X64_NAMES: FrozenSet[str] = frozenset({"x86_64", "amd64"})
_ARM64_NAMES: FrozenSet[str] = frozenset({"arm64", "aarch64"})

# No arm64 artifacts are published for linux or windows
SUPPORTED_PLATFORMS: FrozenSet[Tuple[OperatingSystem, Architecture]] = frozenset({
    (OperatingSystem.LINUX, Architecture.X64),
    (OperatingSystem.MACOS, Architecture.X64),
    (OperatingSystem.MACOS, Architecture.ARM64),
    (OperatingSystem.WINDOWS, Architecture.X64),
})


@dataclass(frozen=True)
class Platform:
    """The host platform tag.

    Attributes:
        os: Canonical operating system.
        arch: Canonical CPU architecture.
        emulated: True when Windows was detected through a POSIX emulation
            layer (MSYS, MinGW, Cygwin) rather than natively.
    """

    os: OperatingSystem
    arch: Architecture
    emulated: bool = False

    def __post_init__(self) -> None:
        if (self.os, self.arch) not in SUPPORTED_PLATFORMS:
            raise UnsupportedPlatform(
                f"Unsupported platform: {self.os.value}-{self.arch.value}"
            )

    @property
    def tag(self) -> str:
        """Return the platform tag, e.g. "linux-x64"."""
        return f"{self.os.value}-{self.arch.value}"

    @property
    def is_windows(self) -> bool:
        return self.os is OperatingSystem.WINDOWS

    @property
    def archive_extension(self) -> str:
        return "zip" if self.is_windows else "tar.gz"

    @property
    def asset_suffix(self) -> str:
        """Return the platform part of the release archive name.

        Example: "linux-x64.tar.gz", "windows-x64.zip"
        """
        return f"{self.tag}.{self.archive_extension}"

    def binary_name(self, name: str = "gitas") -> str:
        """Return the executable file name on this platform."""
        return f"{name}.exe" if self.is_windows else name


def normalize_os(system: str) -> Tuple[OperatingSystem, bool]:
    """Map a raw OS identifier to its canonical form.

    Args:
        system: Raw value, as returned by platform.system() or ``uname -s``.

    Returns:
        Tuple of (canonical OS, emulated flag).

    Raises:
        UnsupportedPlatform: If the OS is not recognized.
    """
    if system in _OS_MAP:
        return _OS_MAP[system], False
    if system.upper().startswith(WINDOWS_EMULATION_PREFIXES):
        return OperatingSystem.WINDOWS, True
    raise UnsupportedPlatform(f"Unsupported OS: {system}")


def normalize_arch(machine: str, os_name: OperatingSystem) -> Architecture:
    """Map a raw architecture identifier to its canonical form.

    arm64 is only accepted on macOS even though the raw name is recognized
    on every OS.

    Raises:
        UnsupportedPlatform: If the architecture is unknown or has no
            artifact for the given OS.
    """
    lowered = machine.lower()
    if lowered in _X64_NAMES:
        return Architecture.X64
    if lowered in _ARM64_NAMES:
        if os_name is OperatingSystem.MACOS:
            return Architecture.ARM64
        raise UnsupportedPlatform(
            f"Unsupported architecture: {machine} on {os_name.value}"
        )
    raise UnsupportedPlatform(f"Unsupported architecture: {machine}")


def detect_platform(
    system: Optional[str] = None, machine: Optional[str] = None
) -> Platform:
    """Detect and return the current platform.

    Args:
        system: Raw OS identifier; defaults to platform.system().
        machine: Raw architecture identifier; defaults to platform.machine().

    Raises:
        UnsupportedPlatform: If the platform has no published artifact.
    """
    raw_system = system if system is not None else platform.system()
    raw_machine = machine if machine is not None else platform.machine()

    os_name, emulated = normalize_os(raw_system)
    arch = normalize_arch(raw_machine, os_name)
    return Platform(os=os_name, arch=arch, emulated=emulated)
