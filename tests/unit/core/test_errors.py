"""Tests for the installer error taxonomy."""

from __future__ import annotations

import pytest

from gitas_installer.core.errors import (
    DownloadError,
    ExtractError,
    InstallerError,
    IntegrationWarning,
    NetworkError,
    PlacementError,
    Stage,
    UnsupportedPlatform,
    VersionNotFound,
)


class TestStageLabels:
    """Each error is labeled with the stage that raises it."""

    @pytest.mark.parametrize(
        "error_cls, stage",
        [
            (UnsupportedPlatform, Stage.DETECT),
            (NetworkError, Stage.RESOLVE),
            (VersionNotFound, Stage.RESOLVE),
            (DownloadError, Stage.FETCH),
            (ExtractError, Stage.EXTRACT),
            (PlacementError, Stage.PLACE),
            (IntegrationWarning, Stage.INTEGRATE),
        ],
    )
    def test_stage(self, error_cls: type, stage: Stage) -> None:
        error = error_cls("boom")
        assert isinstance(error, InstallerError)
        assert error.stage is stage
        assert error.reason == "boom"

    def test_only_integration_warning_is_non_fatal(self) -> None:
        fatal = [UnsupportedPlatform, NetworkError, VersionNotFound,
                 DownloadError, ExtractError, PlacementError]
        assert all(cls.fatal for cls in fatal)
        assert IntegrationWarning.fatal is False

    def test_stage_order(self) -> None:
        assert [s.value for s in Stage] == [
            "detect", "resolve", "fetch", "extract", "place", "integrate", "report",
        ]
