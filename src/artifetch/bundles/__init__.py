"""
Artifact catalogues shipped with artifetch, one directory per bundle.
"""

import os
from pathlib import PurePath
from typing import List

from artifetch.artifact_models import ArtifactsConfig
from artifetch.artifetch_exceptions import ConfigurationError

BUNDLES_DIR = os.path.abspath(os.path.dirname(__file__))
CATALOGUE_FILENAME = "artifacts.json"


def list_bundles() -> List[str]:
    return sorted(
        entry
        for entry in os.listdir(BUNDLES_DIR)
        if os.path.isfile(os.path.join(BUNDLES_DIR, entry, CATALOGUE_FILENAME))
    )


def load_bundle(name: str) -> ArtifactsConfig:
    """
    Load the catalogue of a shipped bundle.

    Raises:
        ConfigurationError: If no bundle has that name
    """
    if name not in list_bundles():
        raise ConfigurationError(
            f"Unknown bundle: {name}. Available: {', '.join(list_bundles())}"
        )
    return ArtifactsConfig.from_file(PurePath(BUNDLES_DIR, name, CATALOGUE_FILENAME))
