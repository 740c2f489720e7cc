"""
Artifact catalogue models.

This package provides Pydantic data models for parsing artifact catalogues
(the shipped bundles and user supplied catalogue files) and the dependency
manifests that ship inside package archives.
"""

from .artifacts import (
    ArtifactsConfig,
    ArtifactSpec,
    InstallerKind,
    InstallerSpec,
    VersionSource,
)
from .manifest import (
    DependencyManifest,
    ManifestEntry,
)

__all__ = [
    # Artifacts
    "ArtifactsConfig",
    "ArtifactSpec",
    "InstallerKind",
    "InstallerSpec",
    "VersionSource",
    # Manifest
    "DependencyManifest",
    "ManifestEntry",
]
