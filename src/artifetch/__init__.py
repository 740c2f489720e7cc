"""
This module provides the public API of artifetch: a fetcher/installer for
pinned installer artifacts that reuses cached copies when they are current.
"""

from .artifetch_config import FetchMode, FetcherConfig
from .fetcher import ArtifactFetcher, FetchSummary

__version__ = "0.1.0"

__all__ = ["ArtifactFetcher", "FetchMode", "FetcherConfig", "FetchSummary", "__version__"]
