"""
Path integration: make the install directory discoverable on PATH.

- POSIX: append an export line to the active shell's profile
- Windows: append to the persistent user PATH value
"""

from gitas_installer.integration.path import PathTarget, ensure_on_path
from gitas_installer.integration.shell import integrate_shell_profile
from gitas_installer.integration.windows import integrate_user_path

__all__ = [
    "PathTarget",
    "ensure_on_path",
    "integrate_shell_profile",
    "integrate_user_path",
]
