"""
Defines the default settings for artifetch.
"""

import os
import pathlib


class ArtifetchSettings:
    """
    Provides the various default paths and constants used by artifetch.
    """

    # Name of the version record written next to downloaded installers
    VERSION_RECORD_FILENAME = "versions.txt"

    # Name of the optional TOML config file looked up in the working directory
    CONFIG_FILENAME = "artifetch.toml"

    GITHUB_API_URL = "https://api.github.com"
    GITHUB_URL = "https://github.com"

    DOWNLOAD_CHUNK_SIZE = 1024 * 64

    USER_AGENT = "artifetch"

    @staticmethod
    def get_artifetch_directory():
        """
        Get the artifetch directory, created if absent.
        """
        artifetch_dir = str(pathlib.PurePath(os.path.expanduser("~"), ".artifetch"))
        os.makedirs(artifetch_dir, exist_ok=True)
        return artifetch_dir

    @staticmethod
    def get_default_output_directory():
        """
        Get the default writable directory that downloads and the version
        record are written to.
        """
        return str(pathlib.PurePath(ArtifetchSettings.get_artifetch_directory(), "installers"))
