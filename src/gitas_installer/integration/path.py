"""Idempotent PATH integration.

The command search path of future sessions lives outside the installer:
a shell profile file on POSIX, the persistent user ``Path`` value on
Windows. Both are modelled as a :class:`PathTarget` and mutated only
through :func:`ensure_on_path`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from gitas_installer.core.errors import IntegrationWarning
from gitas_installer.core.logging import get_logger

LOGGER = get_logger(__name__)


class PathTarget(Protocol):
    """Persistent search-path state that can be read and appended to."""

    @property
    def description(self) -> str:
        """Human readable name used in messages."""
        ...

    def read(self) -> str:
        """Return the current content."""
        ...

    def append(self, install_dir: Path) -> None:
        """Add install_dir to the search path."""
        ...


def ensure_on_path(target: PathTarget, install_dir: Path) -> bool:
    """Add install_dir to target unless its text already appears in it.

    The check is a plain substring match on the directory text, so a
    profile that mentions the directory anywhere (even in a comment) is
    left untouched.

    Returns:
        True if the target was modified, False if it already contained
        the directory.

    Raises:
        IntegrationWarning: If the target cannot be read or written.
    """
    try:
        current = target.read()
    except OSError as e:
        raise IntegrationWarning(f"Could not read {target.description}: {e}") from e

    if str(install_dir) in current:
        LOGGER.debug(f"{install_dir} already present in {target.description}")
        return False

    try:
        target.append(install_dir)
    except OSError as e:
        raise IntegrationWarning(f"Could not update {target.description}: {e}") from e

    LOGGER.info(f"Added {install_dir} to {target.description}")
    return True
