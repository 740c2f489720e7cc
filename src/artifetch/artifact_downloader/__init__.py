"""
Artifact downloader.

This package handles:
1. Downloading artifact payloads into the writable output directory
2. Verifying downloads
3. Updating plan states
"""

from .downloader import ArtifactDownloader

__all__ = ["ArtifactDownloader"]
