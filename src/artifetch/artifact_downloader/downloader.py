"""
Artifact downloader implementation.

Handles transferring the payload of artifacts whose cached copy was not
usable.
"""

import logging
import pathlib

import requests

from artifetch.artifact_config.config_manager import (
    ArtifactConfigManager,
    PlanStatus,
    ResolutionPlan,
)
from artifetch.artifetch_exceptions import DownloadFailed
from artifetch.artifetch_logger import ArtifetchLogger
from artifetch.artifetch_utils import FileUtils


class ArtifactDownloader:
    """
    Downloads artifact payloads.

    Executes resolution plans that require a transfer and updates their
    states. Nothing is retried.
    """

    def __init__(
        self,
        config_manager: ArtifactConfigManager,
        logger: ArtifetchLogger,
        session: requests.Session,
    ):
        """
        Initialize the artifact downloader.

        Args:
            config_manager: The ArtifactConfigManager owning the plans
            logger: Logger for progress and error messages
            session: HTTP session used for the transfers
        """
        self.config_manager = config_manager
        self.logger = logger
        self.session = session

    def download(self, plan: ResolutionPlan) -> bool:
        """
        Download the payload of a single plan.

        Plans that do not require a download are left untouched.

        Args:
            plan: The resolution plan to execute

        Returns:
            True if the local file is ready for installation, False otherwise
        """
        if not plan.outcome.requires_download:
            return plan.status == PlanStatus.READY

        url = plan.download_url
        try:
            self.logger.log(f"Downloading {plan.artifact_key} from {url}", logging.INFO)

            plan.status = PlanStatus.DOWNLOADING

            FileUtils.download_file(self.logger, self.session, url, str(plan.local_path))

            if not self._verify_download(plan):
                raise DownloadFailed(f"Download verification failed for {plan.artifact_key}")

            self.config_manager.mark_download_completed(plan, success=True)

            self.logger.log(
                f"Successfully downloaded {plan.artifact_key} to {plan.local_path}",
                logging.INFO,
            )
            return True

        except DownloadFailed as e:
            error_msg = f"Failed to download {plan.artifact_key}: {str(e)}"
            self.logger.log(error_msg, logging.ERROR)
            plan.error_message = error_msg
            self.config_manager.mark_download_completed(plan, success=False)
            self.config_manager.state.warn(error_msg)
            return False

    def _verify_download(self, plan: ResolutionPlan) -> bool:
        """
        Verify that a download was successful.

        Args:
            plan: The plan to verify

        Returns:
            True if verification passed, False otherwise
        """
        dest_path = pathlib.Path(plan.local_path)

        if not dest_path.is_file():
            self.logger.log(f"Downloaded file does not exist: {dest_path}", logging.WARNING)
            return False

        if dest_path.stat().st_size == 0:
            self.logger.log(f"Downloaded file is empty: {dest_path}", logging.WARNING)
            return False

        return True

    def get_download_summary(self) -> dict:
        """
        Get a summary of download results.

        Returns:
            Dictionary with counts of downloaded, failed and pending transfers
        """
        plans = self.config_manager.get_resolution_plans().values()
        downloads = [p for p in plans if p.outcome.requires_download]

        completed = sum(1 for p in downloads if p.downloaded)
        failed = sum(1 for p in downloads if not p.downloaded and p.status == PlanStatus.FAILED)
        pending = sum(1 for p in downloads if p.status == PlanStatus.PENDING)

        return {
            "completed": completed,
            "failed": failed,
            "pending": pending,
            "total": len(downloads),
        }
