"""
Native installer invocation.

Every installer is run unattended and waited for. Exit codes are logged but
not interpreted.
"""

import logging
import pathlib
import shutil
import subprocess
from typing import Callable, List, Optional

from artifetch.artifact_config.config_manager import (
    ArtifactConfigManager,
    PlanStatus,
    ResolutionPlan,
)
from artifetch.artifact_installer.dependency_order import order_dependency_packages
from artifetch.artifact_models import InstallerKind
from artifetch.artifetch_exceptions import ArchiveExtractionFailed, InstallFailed
from artifetch.artifetch_logger import ArtifetchLogger
from artifetch.artifetch_utils import FileUtils

Runner = Callable[..., subprocess.CompletedProcess]


class ArtifactInstaller:
    """
    Hands resolved local files to the platform installers.
    """

    def __init__(
        self,
        config_manager: ArtifactConfigManager,
        logger: ArtifetchLogger,
        architecture: Optional[str] = None,
        runner: Runner = subprocess.run,
        powershell: str = "powershell.exe",
    ):
        """
        Initialize the artifact installer.

        Args:
            config_manager: The ArtifactConfigManager owning the plans
            logger: Logger for progress and error messages
            architecture: Architecture used to pick dependency packages
            runner: Callable with the subprocess.run signature
            powershell: PowerShell executable used for package installs
        """
        self.config_manager = config_manager
        self.logger = logger
        self.architecture = architecture
        self.runner = runner
        self.powershell = powershell

    def install(self, plan: ResolutionPlan) -> bool:
        """
        Install the resolved local file of a plan.

        Args:
            plan: A plan whose local file is ready

        Returns:
            True if the installer was invoked, False otherwise
        """
        if plan.status != PlanStatus.READY:
            return False

        try:
            if plan.local_path is None or not pathlib.Path(plan.local_path).is_file():
                raise InstallFailed(f"Installer file for {plan.artifact_key} does not exist: {plan.local_path}")

            kind = plan.spec.installer.kind
            if kind is InstallerKind.EXE:
                self._run([str(plan.local_path), *plan.spec.installer.args], plan.artifact_key)
            elif kind is InstallerKind.APPX:
                self._install_package(pathlib.Path(plan.local_path))
            else:
                self._install_dependencies(plan)

        except (InstallFailed, ArchiveExtractionFailed) as e:
            error_msg = f"Failed to install {plan.artifact_key}: {str(e)}"
            self.logger.log(error_msg, logging.ERROR)
            plan.error_message = error_msg
            self.config_manager.mark_install_completed(plan, success=False)
            self.config_manager.state.warn(error_msg)
            return False

        self.config_manager.mark_install_completed(plan, success=True)
        self.logger.log(f"Installed {plan.artifact_key}", logging.INFO)
        return True

    def _run(self, cmd: List[str], label: str) -> None:
        self.logger.log(f"Running installer for {label}: {' '.join(cmd)}", logging.DEBUG)
        try:
            result = self.runner(cmd, check=False)
        except OSError as e:
            raise InstallFailed(f"Could not launch {cmd[0]}: {str(e)}") from e
        self.logger.log(f"Installer for {label} exited with {result.returncode}", logging.INFO)

    def _install_package(self, package_path: pathlib.Path) -> None:
        quoted = str(package_path).replace("'", "''")
        self._run(
            [
                self.powershell,
                "-NoProfile",
                "-NonInteractive",
                "-Command",
                f"Add-AppxPackage -Path '{quoted}'",
            ],
            package_path.name,
        )

    def _install_dependencies(self, plan: ResolutionPlan) -> None:
        installer = plan.spec.installer
        archive_path = pathlib.Path(plan.local_path)
        extract_dir = pathlib.Path(self.config_manager.fetcher_config.output_dir) / archive_path.stem
        # Only packages of this archive may be found below extract_dir
        shutil.rmtree(extract_dir, ignore_errors=True)

        FileUtils.extract_archive(
            self.logger,
            str(archive_path),
            str(extract_dir),
            installer.archive_type,
            runner=self.runner,
        )

        manifest_path = None
        if installer.manifest:
            manifest_path = next(extract_dir.rglob(installer.manifest), None)

        packages = order_dependency_packages(extract_dir, manifest_path, self.logger, self.architecture)
        if not packages:
            self.logger.log(f"No packages found in {archive_path.name}", logging.WARNING)
        for package in packages:
            self._install_package(package)

    def remove_source(self, source_name: str) -> bool:
        """
        Remove a package manager source known to be incompatible with the
        sandbox.

        Returns:
            True if the source was removed, False otherwise
        """
        cmd = ["winget", "source", "remove", "--name", source_name]
        self.logger.log(f"Removing package source {source_name}", logging.INFO)
        try:
            result = self.runner(cmd, check=False)
        except OSError as e:
            self.logger.log(f"Could not remove source {source_name}: {str(e)}", logging.WARNING)
            return False

        if result.returncode != 0:
            self.logger.log(
                f"Removing source {source_name} exited with {result.returncode}",
                logging.WARNING,
            )
            return False
        return True
