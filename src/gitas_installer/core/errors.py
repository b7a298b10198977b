"""Error taxonomy for the installer pipeline.

Every fatal error carries the pipeline stage it belongs to, so the
orchestrator can report ``InstallFailed(stage, reason)`` without inspecting
where the exception was raised.
"""

from __future__ import annotations

from enum import Enum


class Stage(str, Enum):
    """Pipeline stages, in execution order."""

    DETECT = "detect"
    RESOLVE = "resolve"
    FETCH = "fetch"
    EXTRACT = "extract"
    PLACE = "place"
    INTEGRATE = "integrate"
    REPORT = "report"


class InstallerError(Exception):
    """Base class for installer errors."""

    stage: Stage = Stage.REPORT
    fatal: bool = True

    @property
    def reason(self) -> str:
        return str(self)


class UnsupportedPlatform(InstallerError):
    """Host OS or architecture has no published artifact."""

    stage = Stage.DETECT


class NetworkError(InstallerError):
    """The releases query could not be completed."""

    stage = Stage.RESOLVE


class VersionNotFound(InstallerError):
    """The releases query succeeded but carried no usable tag."""

    stage = Stage.RESOLVE


class DownloadError(InstallerError):
    """The release archive could not be downloaded."""

    stage = Stage.FETCH


class ExtractError(InstallerError):
    """The release archive is corrupt or has an unexpected layout."""

    stage = Stage.EXTRACT


class PlacementError(InstallerError):
    """The binary could not be moved into the install directory."""

    stage = Stage.PLACE


class IntegrationWarning(InstallerError):
    """PATH integration failed; the binary is still usable by absolute path."""

    stage = Stage.INTEGRATE
    fatal = False
