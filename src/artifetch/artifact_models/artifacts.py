"""
Pydantic data models for artifact catalogues.

A catalogue is a JSON document listing, in install order, the artifacts of
one provisioning task: where each one is fetched from, how its remote version
identifier is derived, and which native installer consumes it.
"""

import json
import pathlib
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from artifetch.artifetch_settings import ArtifetchSettings


class VersionSource(str, Enum):
    """Where the remote version identifier of an artifact comes from."""

    # A path segment of the redirect target of ``url``
    REDIRECT = "redirect"
    # The tag name of the latest GitHub release of ``repo``
    GITHUB_RELEASE = "github_release"


class InstallerKind(str, Enum):
    """Native installer invoked for an artifact."""

    EXE = "exe"
    APPX = "appx"
    APPX_DEPENDENCIES = "appx_dependencies"


class InstallerSpec(BaseModel):
    """
    How a resolved local file is handed to the platform installer.
    """

    kind: InstallerKind = Field(..., description="Installer invoked for the file")
    args: List[str] = Field(default_factory=list, description="Silent/unattended arguments")
    manifest: Optional[str] = Field(
        None, description="Dependency manifest file name inside the archive"
    )
    archive_type: Optional[str] = Field(
        None, alias="archiveType", description="Archive type: zip, tar, tar.gz"
    )

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class ArtifactSpec(BaseModel):
    """
    A single downloadable/installable artifact.

    ``name`` is both the stable key used in the version record and the file
    name of the local copy. The artifact is located either by ``url`` (a
    redirecting link) or by a ``repo``/``asset`` pair naming a GitHub
    release asset.
    """

    name: str = Field(..., description="Stable key and local file name")
    url: Optional[str] = Field(None, description="Redirecting download URL")
    repo: Optional[str] = Field(None, description="GitHub repository, owner/name")
    asset: Optional[str] = Field(None, description="Release asset name")
    version_source: VersionSource = Field(VersionSource.REDIRECT, alias="versionSource")
    version_segment: int = Field(
        -2,
        alias="versionSegment",
        description="Index of the redirect-target path segment used as version",
    )
    platforms: Optional[List[str]] = Field(
        None, description="Architectures the artifact applies to; all when absent"
    )
    installer: InstallerSpec
    description: Optional[str] = Field(None, alias="_description")

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @model_validator(mode="after")
    def _check_locator(self) -> "ArtifactSpec":
        if "=" in self.name or "\n" in self.name or "/" in self.name or "\\" in self.name:
            raise ValueError(f"Artifact name must be a plain file name: {self.name!r}")
        if self.version_source is VersionSource.REDIRECT and not self.url:
            raise ValueError(f"Artifact {self.name} needs 'url' for redirect versioning")
        if self.version_source is VersionSource.GITHUB_RELEASE and not (self.repo and self.asset):
            raise ValueError(f"Artifact {self.name} needs 'repo' and 'asset' for release versioning")
        return self

    def applies_to(self, architecture: str) -> bool:
        """Check whether the artifact is installed on the given architecture."""
        return self.platforms is None or architecture in self.platforms

    def download_url(self, remote_version: Optional[str] = None) -> str:
        """
        URL of the full payload.

        Release assets are pinned to the probed tag when it is known so that
        the downloaded file matches the recorded version.
        """
        if self.version_source is VersionSource.GITHUB_RELEASE:
            base = f"{ArtifetchSettings.GITHUB_URL}/{self.repo}/releases"
            if remote_version:
                return f"{base}/download/{remote_version}/{self.asset}"
            return f"{base}/latest/download/{self.asset}"
        return self.url


class ArtifactsConfig(BaseModel):
    """
    Complete artifact catalogue.

    Structure:
    {
      "_description": "...",
      "incompatibleSource": "msstore",
      "artifacts": [
        {"name": "...", "url": "...", "installer": {"kind": "exe", "args": [...]}},
        {"name": "...", "repo": "...", "asset": "...", "versionSource": "github_release", ...}
      ]
    }
    """

    description: Optional[str] = Field(None, alias="_description")
    incompatible_source: Optional[str] = Field(None, alias="incompatibleSource")
    artifacts: List[ArtifactSpec] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @model_validator(mode="after")
    def _check_unique_names(self) -> "ArtifactsConfig":
        names = [artifact.name for artifact in self.artifacts]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate artifact names: {', '.join(duplicates)}")
        return self

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ArtifactsConfig":
        return cls.model_validate(d)

    @classmethod
    def from_file(cls, path: pathlib.Path) -> "ArtifactsConfig":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    def get_artifact(self, name: str) -> Optional[ArtifactSpec]:
        for artifact in self.artifacts:
            if artifact.name == name:
                return artifact
        return None

    def names(self) -> List[str]:
        return [artifact.name for artifact in self.artifacts]

    def for_architecture(self, architecture: str) -> List[ArtifactSpec]:
        return [artifact for artifact in self.artifacts if artifact.applies_to(architecture)]
