"""
Artifact resolution.

This package handles:
1. Probing vendor endpoints for the remote version of each artifact
2. Looking up cached copies in an externally supplied directory
3. Deciding, per artifact, between the cached copy and a fresh download
4. Accumulating the observed versions and the end-of-run notify flag
"""

from .cache_lookup import CacheLookup
from .config_manager import (
    ArtifactConfigManager,
    PlanStatus,
    ResolutionOutcome,
    ResolutionPlan,
    RunState,
    decide,
)
from .version_resolver import VersionResolver

__all__ = [
    "ArtifactConfigManager",
    "CacheLookup",
    "PlanStatus",
    "ResolutionOutcome",
    "ResolutionPlan",
    "RunState",
    "VersionResolver",
    "decide",
]
