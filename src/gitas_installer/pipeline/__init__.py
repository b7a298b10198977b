"""Installer pipeline."""

from gitas_installer.pipeline.orchestrator import (
    ArchiveExtracted,
    InstallFailed,
    InstallOutcome,
    InstallSucceeded,
    Installer,
)

__all__ = [
    "ArchiveExtracted",
    "InstallFailed",
    "InstallOutcome",
    "InstallSucceeded",
    "Installer",
]
