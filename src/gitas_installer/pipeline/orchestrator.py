"""Installer pipeline orchestration.

Runs the stages detect → resolve → fetch → extract → place → integrate →
report in a single linear pass. A fatal error in any stage ends the run
with an :class:`InstallFailed` outcome naming that stage; the temporary
workspace is removed on every exit path.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, MutableMapping, Optional, Union

from gitas_installer.bootstrap.fetch import (
    TempWorkspace,
    archive_name,
    download_archive,
    extract_archive,
    locate_binary,
)
from gitas_installer.bootstrap.paths import GitasPaths
from gitas_installer.bootstrap.placement import (
    CommandRunner,
    InstallPlan,
    InstallPolicy,
    PrivilegeProbe,
    place_binary,
    plan_install,
    run_command,
)
from gitas_installer.bootstrap.platform import Platform, detect_platform
from gitas_installer.bootstrap.release import ReleaseInfo, resolve_release
from gitas_installer.config.models import InstallerConfig
from gitas_installer.core.errors import InstallerError, IntegrationWarning, Stage
from gitas_installer.core.logging import get_logger
from gitas_installer.integration.path import PathTarget
from gitas_installer.integration.shell import integrate_shell_profile
from gitas_installer.integration.windows import integrate_user_path

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class InstallSucceeded:
    """The binary is installed and executable."""

    binary_path: Path
    version: str
    warnings: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ArchiveExtracted:
    """Windows direct-archive flow: the archive was unpacked in place."""

    directory: Path
    version: str


@dataclass(frozen=True)
class InstallFailed:
    """A fatal error ended the run."""

    stage: Stage
    reason: str


InstallOutcome = Union[InstallSucceeded, ArchiveExtracted, InstallFailed]


class Installer:
    """Sequences the installer stages for one run.

    Host access (platform identifiers, working directory, environment,
    privilege checks, elevated commands, the Windows PATH store) can be
    injected so the pipeline can run against a sandbox.
    """

    def __init__(
        self,
        config: Optional[InstallerConfig] = None,
        paths: Optional[GitasPaths] = None,
        *,
        system: Optional[str] = None,
        machine: Optional[str] = None,
        cwd: Optional[Path] = None,
        environ: Optional[MutableMapping[str, str]] = None,
        probe: Optional[PrivilegeProbe] = None,
        runner: CommandRunner = run_command,
        path_target: Optional[PathTarget] = None,
        workspace_dir: Optional[Path] = None,
        notify: Callable[[str], None] = print,
    ) -> None:
        self.config = config or InstallerConfig()
        self.paths = paths or GitasPaths.default()
        self._system = system
        self._machine = machine
        self._cwd = cwd
        self._environ = os.environ if environ is None else environ
        self._probe = probe or PrivilegeProbe()
        self._runner = runner
        self._path_target = path_target
        self._workspace_dir = workspace_dir
        self._notify = notify

    def run(self) -> InstallOutcome:
        """Run the pipeline and report a single outcome."""
        try:
            return self._run()
        except InstallerError as e:
            LOGGER.debug(f"Stage {e.stage.value} failed", exc_info=True)
            self._notify(f"Error ({e.stage.value}): {e.reason}")
            return InstallFailed(stage=e.stage, reason=e.reason)

    def _run(self) -> InstallOutcome:
        platform_info = detect_platform(self._system, self._machine)
        LOGGER.info(f"Detected platform {platform_info.tag}")

        self._notify("Detecting latest version...")
        release = self._resolve(platform_info)
        self._notify(f"Latest version: {release.tag}")

        if platform_info.is_windows and platform_info.emulated:
            return self._extract_in_place(platform_info, release)

        plan = plan_install(
            platform_info,
            self.paths,
            policy=self.config.install.policy,
            system_dir=self.config.install.system_dir,
            binary=self.config.binary,
            probe=self._probe,
        )

        with TempWorkspace(base_dir=self._workspace_dir) as workspace:
            archive = workspace.path / archive_name(
                self.config.repository.name, platform_info.archive_extension
            )
            self._notify(f"Downloading to {workspace.path}...")
            download_archive(release.download_url, archive, timeout=self.config.network.timeout)

            self._notify("Extracting...")
            extract_archive(archive, workspace.path)
            binary = locate_binary(workspace.path, plan.binary_name)

            self._notify(f"Installing to {plan.install_dir}...")
            binary_path = place_binary(binary, plan, runner=self._runner, notify=self._notify)

            warnings = self._integrate(platform_info, plan)

        self._notify(
            f"Successfully installed {self.config.binary} {release.tag} to {binary_path}"
        )
        return InstallSucceeded(binary_path=binary_path, version=release.tag, warnings=warnings)

    def _resolve(self, platform_info: Platform) -> ReleaseInfo:
        return resolve_release(
            platform_info,
            owner=self.config.repository.owner,
            repo=self.config.repository.name,
            api_url=self.config.api_url,
            download_host=self.config.download_host,
            timeout=self.config.network.timeout,
        )

    def _extract_in_place(self, platform_info: Platform, release: ReleaseInfo) -> ArchiveExtracted:
        directory = self._cwd or Path.cwd()
        binary_name = platform_info.binary_name(self.config.binary)
        archive = directory / archive_name(self.config.repository.name, platform_info.archive_extension)

        self._notify(f"Downloading {release.download_url}...")
        try:
            download_archive(release.download_url, archive, timeout=self.config.network.timeout)
            extract_archive(archive, directory)
        finally:
            archive.unlink(missing_ok=True)

        self._notify(f"Extracted {binary_name} to current directory.")
        self._notify(
            f"Please add this directory to your PATH or move {binary_name} "
            f"to a folder in your PATH."
        )
        return ArchiveExtracted(directory=directory, version=release.tag)

    def _integrate(self, platform_info: Platform, plan: InstallPlan) -> List[str]:
        if plan.policy is InstallPolicy.SYSTEM and _on_search_path(
            plan.install_dir, self._environ.get("PATH", "")
        ):
            LOGGER.debug(f"{plan.install_dir} is already on PATH")
            return []

        try:
            if platform_info.is_windows:
                integrate_user_path(
                    plan.install_dir,
                    target=self._path_target,
                    environ=self._environ,
                    notify=self._notify,
                )
            else:
                integrate_shell_profile(
                    plan.install_dir,
                    platform_info.os,
                    self.paths.user_home,
                    environ=self._environ,
                    notify=self._notify,
                )
        except IntegrationWarning as e:
            LOGGER.warning(e.reason)
            self._notify(f"Warning: {e.reason}")
            self._notify(f"Add {plan.install_dir} to your PATH manually.")
            return [e.reason]
        return []


def _on_search_path(directory: Path, search_path: str) -> bool:
    return str(directory) in search_path.split(os.pathsep)
