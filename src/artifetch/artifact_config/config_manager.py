"""
Artifact resolution manager.

Decides, for every artifact of a catalogue, whether the cached copy is used
or the payload is downloaded, and keeps the per-run state: the versions
observed this run and the cumulative end-of-run notify flag.
"""

import logging
import pathlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from artifetch.artifact_config.cache_lookup import CacheLookup
from artifetch.artifact_config.version_resolver import VersionResolver
from artifetch.artifact_models import ArtifactsConfig, ArtifactSpec
from artifetch.artifetch_config import FetcherConfig, FetchMode
from artifetch.artifetch_exceptions import CacheFileMissing
from artifetch.artifetch_logger import ArtifetchLogger
from artifetch.version_record import VersionRecord


class ResolutionOutcome(str, Enum):
    """Where the local file handed to the installer comes from."""

    USE_CACHED_UP_TO_DATE = "use_cached_up_to_date"
    USE_CACHED_FORCED = "use_cached_forced"
    USE_CACHED_NO_CHECK = "use_cached_no_check"
    USE_CACHED_STALE = "use_cached_stale"
    DOWNLOAD = "download"
    DOWNLOAD_AFTER_STALE_DETECTED = "download_after_stale_detected"
    UNAVAILABLE = "unavailable"

    @property
    def requires_download(self) -> bool:
        return self in (
            ResolutionOutcome.DOWNLOAD,
            ResolutionOutcome.DOWNLOAD_AFTER_STALE_DETECTED,
        )

    @property
    def uses_cache(self) -> bool:
        return self in (
            ResolutionOutcome.USE_CACHED_UP_TO_DATE,
            ResolutionOutcome.USE_CACHED_FORCED,
            ResolutionOutcome.USE_CACHED_NO_CHECK,
            ResolutionOutcome.USE_CACHED_STALE,
        )


def decide(
    remote_version: Optional[str],
    cached_path: Optional[pathlib.Path],
    stored_version: Optional[str],
    mode: FetchMode,
) -> Tuple[ResolutionOutcome, bool]:
    """
    Pick the outcome for one artifact.

    Verified freshness wins over an explicit operator override, which wins
    over silent staleness.

    Args:
        remote_version: Version observed at the vendor endpoint this run
        cached_path: Cached copy of the artifact, if any
        stored_version: Version recorded alongside the cached copy
        mode: Operator fetch mode

    Returns:
        Tuple of (outcome, notify) where notify asks for the operator to be
        warned at the end of the run
    """
    if cached_path is not None and remote_version is not None and stored_version == remote_version:
        return ResolutionOutcome.USE_CACHED_UP_TO_DATE, False

    if cached_path is not None and mode.is_forced:
        if remote_version is not None:
            return ResolutionOutcome.USE_CACHED_STALE, True
        if mode is FetchMode.NO_CHECK:
            return ResolutionOutcome.USE_CACHED_NO_CHECK, False
        return ResolutionOutcome.USE_CACHED_FORCED, False

    if cached_path is not None:
        return ResolutionOutcome.DOWNLOAD_AFTER_STALE_DETECTED, True

    if mode.is_forced:
        return ResolutionOutcome.UNAVAILABLE, False

    return ResolutionOutcome.DOWNLOAD, False


class PlanStatus:
    """Enumeration of plan statuses."""

    PENDING = "pending"
    DOWNLOADING = "downloading"
    READY = "ready"
    INSTALLED = "installed"
    FAILED = "failed"
    UNAVAILABLE = "unavailable"


class ResolutionPlan:
    """
    The resolved source of one artifact for this run.

    Captures all information needed to fetch (if required) and install it.
    """

    def __init__(
        self,
        artifact_key: str,
        spec: ArtifactSpec,
        outcome: ResolutionOutcome,
        local_path: Optional[pathlib.Path],
        remote_version: Optional[str],
        status: str = PlanStatus.PENDING,
    ):
        """
        Initialize a resolution plan.

        Args:
            artifact_key: Unique key of the artifact
            spec: The artifact specification
            outcome: Decision taken for the artifact
            local_path: File handed to the installer; the download target
                for download outcomes, None when unavailable
            remote_version: Version observed this run, if any
            status: Current plan status
        """
        self.artifact_key = artifact_key
        self.spec = spec
        self.outcome = outcome
        self.local_path = local_path
        self.remote_version = remote_version
        self.status = status
        self.error_message: Optional[str] = None
        self.downloaded = False

    @property
    def download_url(self) -> str:
        return self.spec.download_url(self.remote_version)

    def is_installed(self) -> bool:
        return self.status == PlanStatus.INSTALLED

    def __repr__(self) -> str:
        return (
            f"ResolutionPlan(key={self.artifact_key}, outcome={self.outcome.value}, "
            f"status={self.status}, path={self.local_path})"
        )


@dataclass
class RunState:
    """
    State accumulated over one run and owned by its single control flow.
    """

    current_versions: VersionRecord = field(default_factory=VersionRecord)
    pause_at_end: bool = False
    warnings: List[str] = field(default_factory=list)

    def warn(self, message: str, notify: bool = False) -> None:
        self.warnings.append(message)
        if notify:
            self.pause_at_end = True


class ArtifactConfigManager:
    """
    Manages artifact resolution decisions for one run.

    Combines the version probe, the cache lookup and the version record
    stored next to the cached files into one ResolutionPlan per artifact.
    """

    def __init__(
        self,
        artifacts_config: ArtifactsConfig,
        fetcher_config: FetcherConfig,
        resolver: VersionResolver,
        cache_lookup: CacheLookup,
        stored_versions: VersionRecord,
        logger: ArtifetchLogger,
        state: Optional[RunState] = None,
    ):
        """
        Initialize the artifact config manager.

        Args:
            artifacts_config: Loaded artifact catalogue
            fetcher_config: Run configuration with mode and directories
            resolver: Remote version resolver
            cache_lookup: Lookup into the external cache directory
            stored_versions: Version record loaded from the cache directory
            logger: Logger for decisions and warnings
            state: Run state to accumulate into; a fresh one when None
        """
        self.artifacts_config = artifacts_config
        self.fetcher_config = fetcher_config
        self.resolver = resolver
        self.cache_lookup = cache_lookup
        self.stored_versions = stored_versions
        self.logger = logger
        self.state = state or RunState()
        self.resolution_plans: Dict[str, ResolutionPlan] = {}

    def plan_artifact(self, spec: ArtifactSpec) -> ResolutionPlan:
        """
        Resolve a single artifact into a plan.

        The observed remote version is recorded into the run state whichever
        outcome is chosen.

        Args:
            spec: The artifact to resolve

        Returns:
            ResolutionPlan for the artifact
        """
        mode = self.fetcher_config.mode
        remote_version = self.resolver.resolve(spec)
        cached_path = self.cache_lookup.find(spec)
        stored_version = self.stored_versions.get(spec.name)

        if remote_version is not None:
            self.state.current_versions.set(spec.name, remote_version)

        outcome, notify = decide(remote_version, cached_path, stored_version, mode)
        if notify:
            self.state.pause_at_end = True

        target_path = pathlib.Path(self.fetcher_config.output_dir) / spec.name

        if outcome.uses_cache:
            plan = ResolutionPlan(spec.name, spec, outcome, cached_path, remote_version, PlanStatus.READY)
        elif outcome.requires_download:
            plan = ResolutionPlan(spec.name, spec, outcome, target_path, remote_version, PlanStatus.PENDING)
        else:
            plan = ResolutionPlan(spec.name, spec, outcome, None, remote_version, PlanStatus.UNAVAILABLE)

        self._report(plan, stored_version)
        self.resolution_plans[spec.name] = plan
        return plan

    def _report(self, plan: ResolutionPlan, stored_version: Optional[str]) -> None:
        name = plan.artifact_key
        outcome = plan.outcome

        if outcome is ResolutionOutcome.USE_CACHED_UP_TO_DATE:
            self.logger.log(f"Using cached {name}, it is up to date ({plan.remote_version})", logging.INFO)
        elif outcome is ResolutionOutcome.USE_CACHED_FORCED:
            self.logger.log(f"Using cached {name}, latest version could not be checked", logging.INFO)
        elif outcome is ResolutionOutcome.USE_CACHED_NO_CHECK:
            self.logger.log(f"Using cached {name} without checking the latest version", logging.INFO)
        elif outcome is ResolutionOutcome.USE_CACHED_STALE:
            message = (
                f"Cached {name} is out of date (cached {stored_version or 'unknown'}, "
                f"latest {plan.remote_version}), using it because cached files are forced"
            )
            self.logger.log(message, logging.WARNING)
            self.state.warn(message)
        elif outcome is ResolutionOutcome.DOWNLOAD_AFTER_STALE_DETECTED:
            message = (
                f"Cached {name} is out of date (cached {stored_version or 'unknown'}, "
                f"latest {plan.remote_version or 'unknown'}), downloading it again"
            )
            self.logger.log(message, logging.WARNING)
            self.state.warn(message)
        elif outcome is ResolutionOutcome.UNAVAILABLE:
            error = CacheFileMissing(
                f"{name} is not in the cached files and cached files are forced"
            )
            plan.error_message = str(error)
            self.logger.log(str(error), logging.ERROR)
            self.state.warn(str(error))
        else:
            self.logger.log(f"Downloading {name}, no cached copy", logging.INFO)

    def get_resolution_plans(self) -> Dict[str, ResolutionPlan]:
        """
        Get all resolution plans made so far.

        Returns:
            Dictionary mapping artifact keys to plans, in resolution order
        """
        return self.resolution_plans

    def get_pending_downloads(self) -> List[ResolutionPlan]:
        return [p for p in self.resolution_plans.values() if p.status == PlanStatus.PENDING]

    def mark_download_completed(self, plan: ResolutionPlan, success: bool = True) -> None:
        """
        Mark the transfer of a plan as completed or failed.

        Args:
            plan: The plan to mark
            success: Whether the download was successful
        """
        plan.status = PlanStatus.READY if success else PlanStatus.FAILED
        plan.downloaded = success
        if not success and plan.error_message is None:
            plan.error_message = "Download failed"

    def mark_install_completed(self, plan: ResolutionPlan, success: bool = True) -> None:
        plan.status = PlanStatus.INSTALLED if success else PlanStatus.FAILED
        if not success and plan.error_message is None:
            plan.error_message = "Install failed"

    def get_plans_with_status(self, status: str) -> List[ResolutionPlan]:
        return [p for p in self.resolution_plans.values() if p.status == status]
