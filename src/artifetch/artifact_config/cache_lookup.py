"""
Lookup of cached installer files in a possibly read-only directory.
"""

import pathlib
from typing import Optional

from artifetch.artifact_models import ArtifactSpec


class CacheLookup:
    """
    Finds the cached copy of an artifact. Only ever reads from the cache
    directory.
    """

    def __init__(self, cache_dir: Optional[pathlib.Path]):
        self.cache_dir = cache_dir

    def find(self, spec: ArtifactSpec) -> Optional[pathlib.Path]:
        if self.cache_dir is None:
            return None
        candidate = self.cache_dir / spec.name
        if candidate.is_file():
            return candidate
        return None
