"""
Bootstrap module for fetching and placing the gitas binary.

This module handles:
- Platform detection (OS + architecture)
- Release resolution (latest tag, download URL)
- Archive download and extraction into a scoped workspace
- Placement into the per-user or shared install directory
"""

from gitas_installer.bootstrap.platform import detect_platform, Platform
from gitas_installer.bootstrap.paths import get_gitas_home, GitasPaths
from gitas_installer.bootstrap.release import resolve_release, ReleaseInfo
from gitas_installer.bootstrap.fetch import TempWorkspace
from gitas_installer.bootstrap.placement import InstallPlan, InstallPolicy, plan_install

__all__ = [
    "detect_platform",
    "Platform",
    "get_gitas_home",
    "GitasPaths",
    "resolve_release",
    "ReleaseInfo",
    "TempWorkspace",
    "InstallPlan",
    "InstallPolicy",
    "plan_install",
]
