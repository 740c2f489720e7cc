"""
Runs one provisioning pass over an artifact catalogue.
"""

import dataclasses
import logging
import subprocess
from typing import List, Optional

import requests

from artifetch.artifact_config import (
    ArtifactConfigManager,
    CacheLookup,
    PlanStatus,
    ResolutionOutcome,
    RunState,
    VersionResolver,
)
from artifetch.artifact_downloader import ArtifactDownloader
from artifetch.artifact_installer import ArtifactInstaller
from artifetch.artifact_installer.installer import Runner
from artifetch.artifact_models import ArtifactsConfig
from artifetch.artifetch_config import FetcherConfig
from artifetch.artifetch_logger import ArtifetchLogger
from artifetch.artifetch_settings import ArtifetchSettings
from artifetch.artifetch_utils import PlatformUtils
from artifetch.version_record import VersionRecord


@dataclasses.dataclass
class FetchSummary:
    """
    Result of a provisioning pass.
    """

    outcomes: dict
    installed: List[str]
    failed: List[str]
    unavailable: List[str]
    skipped: List[str]
    pause_at_end: bool
    warnings: List[str]
    versions: VersionRecord

    @property
    def exit_code(self) -> int:
        # Non-zero only when artifacts applied and none of them got installed
        attempted = len(self.installed) + len(self.failed) + len(self.unavailable)
        if attempted and not self.installed:
            return 1
        return 0


class ArtifactFetcher:
    """
    Resolves, fetches and installs the artifacts of a catalogue one at a
    time, then persists the observed remote versions.

    The pass:
    1. Loads the version record stored next to the cached files (read-only)
    2. For each artifact applying to this machine: resolves a plan, downloads
       the payload when the plan requires it, and installs the local file
    3. Removes the catalogue's incompatible package source if asked to
    4. Writes the versions observed this run to the output directory
    """

    def __init__(
        self,
        config: FetcherConfig,
        artifacts_config: ArtifactsConfig,
        logger: ArtifetchLogger,
        session: Optional[requests.Session] = None,
        architecture: Optional[str] = None,
        runner: Optional[Runner] = None,
    ):
        self.config = config
        self.artifacts_config = artifacts_config
        self.logger = logger
        self.architecture = architecture or PlatformUtils.get_architecture().value

        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = ArtifetchSettings.USER_AGENT
        self.session = session

        self.state = RunState()
        stored_versions = VersionRecord.load(config.stored_version_record_path, logger)
        self.config_manager = ArtifactConfigManager(
            artifacts_config=artifacts_config,
            fetcher_config=config,
            resolver=VersionResolver(session, logger, config.mode),
            cache_lookup=CacheLookup(config.cache_dir),
            stored_versions=stored_versions,
            logger=logger,
            state=self.state,
        )
        self.downloader = ArtifactDownloader(self.config_manager, logger, session)
        self.installer = ArtifactInstaller(
            self.config_manager, logger, self.architecture, runner=runner or subprocess.run
        )

    def run(self) -> FetchSummary:
        """
        Execute the provisioning pass.

        Per-artifact failures are logged and the pass continues with the next
        artifact.

        Returns:
            FetchSummary of the pass
        """
        if self.config.mode.is_forced and self.config.cache_dir is None:
            self.logger.log(
                "Cached files are forced but no existing installer files path was given",
                logging.WARNING,
            )

        applicable = self.artifacts_config.for_architecture(self.architecture)
        skipped = [name for name in self.artifacts_config.names() if name not in {a.name for a in applicable}]
        for name in skipped:
            self.logger.log(f"Skipping {name}, not used on {self.architecture}", logging.INFO)

        for spec in applicable:
            plan = self.config_manager.plan_artifact(spec)
            if plan.outcome.requires_download:
                self.downloader.download(plan)
            self.installer.install(plan)

        installed = [p.artifact_key for p in self.config_manager.get_plans_with_status(PlanStatus.INSTALLED)]

        source = self.artifacts_config.incompatible_source
        if self.config.remove_incompatible_source and source and installed:
            if not self.installer.remove_source(source):
                self.state.warn(f"Could not remove package source {source}")

        self.state.current_versions.write(self.config.version_record_path)
        self.logger.log(
            f"Wrote {len(self.state.current_versions)} versions to {self.config.version_record_path}",
            logging.INFO,
        )

        summary = self.downloader.get_download_summary()
        self.logger.log(
            f"Download summary: {summary['completed']} completed, "
            f"{summary['failed']} failed, {summary['pending']} pending",
            logging.INFO,
        )

        plans = self.config_manager.get_resolution_plans()
        return FetchSummary(
            outcomes={key: plan.outcome for key, plan in plans.items()},
            installed=installed,
            failed=[p.artifact_key for p in self.config_manager.get_plans_with_status(PlanStatus.FAILED)],
            unavailable=[
                key for key, plan in plans.items() if plan.outcome is ResolutionOutcome.UNAVAILABLE
            ],
            skipped=skipped,
            pause_at_end=self.state.pause_at_end,
            warnings=list(self.state.warnings),
            versions=self.state.current_versions,
        )
