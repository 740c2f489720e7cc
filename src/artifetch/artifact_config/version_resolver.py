"""
Remote version probing.

The probe never downloads the payload: redirect artifacts are asked for
their redirect target only, release artifacts for the latest release
metadata.
"""

import logging
from typing import Optional
from urllib.parse import urlparse

import requests

from artifetch.artifact_models import ArtifactSpec, VersionSource
from artifetch.artifetch_config import FetchMode
from artifetch.artifetch_exceptions import NetworkProbeFailed
from artifetch.artifetch_logger import ArtifetchLogger
from artifetch.artifetch_settings import ArtifetchSettings


class VersionResolver:
    """
    Retrieves the remote version identifier of an artifact.

    Probe failures are not fatal: they are logged and resolve to None so the
    caller proceeds without a freshness check.
    """

    def __init__(self, session: requests.Session, logger: ArtifetchLogger, mode: FetchMode):
        self.session = session
        self.logger = logger
        self.mode = mode

    def resolve(self, spec: ArtifactSpec) -> Optional[str]:
        """
        Resolve the remote version identifier of spec.

        Returns:
            The identifier, or None when the check is disabled or the probe
            failed
        """
        if not self.mode.checks_version:
            self.logger.log(f"Skipping version check for {spec.name}", logging.DEBUG)
            return None

        try:
            if spec.version_source is VersionSource.GITHUB_RELEASE:
                version = self._probe_github_release(spec)
            else:
                version = self._probe_redirect(spec)
            version = version.strip()
            if not version:
                raise NetworkProbeFailed("Empty version identifier")
            if "=" in version or "\n" in version or "\r" in version:
                raise NetworkProbeFailed(f"Unusable version identifier {version!r}")
        except NetworkProbeFailed as e:
            self.logger.log(
                f"Could not check latest version of {spec.name}: {str(e)}",
                logging.WARNING,
            )
            return None

        self.logger.log(f"Latest version of {spec.name} is {version}", logging.INFO)
        return version

    def _probe_redirect(self, spec: ArtifactSpec) -> str:
        try:
            response = self.session.head(spec.url, allow_redirects=False)
        except requests.RequestException as e:
            raise NetworkProbeFailed(f"Request to {spec.url} failed: {str(e)}") from e

        location = response.headers.get("Location")
        if not location:
            raise NetworkProbeFailed(
                f"{spec.url} did not redirect (status {response.status_code})"
            )

        segments = [segment for segment in urlparse(location).path.split("/") if segment]
        try:
            version = segments[spec.version_segment]
        except IndexError:
            raise NetworkProbeFailed(
                f"Redirect target {location} has no path segment {spec.version_segment}"
            )
        return version

    def _probe_github_release(self, spec: ArtifactSpec) -> str:
        url = f"{ArtifetchSettings.GITHUB_API_URL}/repos/{spec.repo}/releases/latest"
        try:
            response = self.session.get(url, headers={"Accept": "application/vnd.github+json"})
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise NetworkProbeFailed(f"Request to {url} failed: {str(e)}") from e
        except ValueError as e:
            raise NetworkProbeFailed(f"Invalid JSON from {url}: {str(e)}") from e

        tag_name = payload.get("tag_name") if isinstance(payload, dict) else None
        if not tag_name or not isinstance(tag_name, str):
            raise NetworkProbeFailed(f"No tag_name in latest release of {spec.repo}")
        return tag_name
