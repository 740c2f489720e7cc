"""
This file contains the exceptions raised by artifetch.
"""


class ArtifetchException(Exception):
    """
    Base class for all exceptions raised by artifetch.
    """

    def __init__(self, message: str):
        super().__init__(message)


class ConfigurationError(ArtifetchException):
    """
    Raised before any work begins when the supplied flags, paths or config
    file cannot be used.
    """


class NetworkProbeFailed(ArtifetchException):
    """
    The remote version identifier of an artifact could not be retrieved.
    """


class DownloadFailed(ArtifetchException):
    """
    The full payload of an artifact could not be transferred.
    """


class CacheFileMissing(ArtifetchException):
    """
    Cached files were forced but no cached copy of the artifact exists.
    """


class ManifestParseFailed(ArtifetchException):
    """
    A dependency manifest exists but could not be parsed.
    """


class ArchiveExtractionFailed(ArtifetchException):
    """
    An archive could not be expanded, even with the fallback extractor.
    """


class InstallFailed(ArtifetchException):
    """
    The native installer for an artifact could not be launched.
    """
