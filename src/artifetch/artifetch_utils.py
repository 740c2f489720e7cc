"""
This file contains various utility functions like I/O operations, handling paths, etc.
"""

import logging
import os
import platform
import shutil
import subprocess
from enum import Enum
from typing import Callable, Optional

import requests

from artifetch.artifetch_exceptions import ArchiveExtractionFailed, ConfigurationError, DownloadFailed
from artifetch.artifetch_logger import ArtifetchLogger
from artifetch.artifetch_settings import ArtifetchSettings


class FileUtils:
    """
    Utility functions for file operations.
    """

    @staticmethod
    def download_file(
        logger: ArtifetchLogger,
        session: requests.Session,
        url: str,
        target_path: str,
    ) -> None:
        """
        Stream the file at url to target_path.

        A partially written file is removed when the transfer fails.

        Raises:
            DownloadFailed: On any HTTP or filesystem error
        """
        os.makedirs(os.path.dirname(target_path) or ".", exist_ok=True)
        partial_path = target_path + ".part"
        try:
            response = session.get(url, stream=True, allow_redirects=True)
            try:
                response.raise_for_status()
                with open(partial_path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=ArtifetchSettings.DOWNLOAD_CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
            finally:
                response.close()
            os.replace(partial_path, target_path)
        except (requests.RequestException, OSError) as e:
            if os.path.exists(partial_path):
                os.remove(partial_path)
            logger.log(f"Error downloading file {url}: {str(e)}", logging.ERROR)
            raise DownloadFailed(f"Error downloading file {url}: {str(e)}") from e

    @staticmethod
    def extract_archive(
        logger: ArtifetchLogger,
        archive_path: str,
        target_path: str,
        archive_type: Optional[str] = None,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ) -> None:
        """
        Expand an archive into target_path.

        shutil.unpack_archive is tried first; when it fails the system tar
        binary is used instead.

        Raises:
            ArchiveExtractionFailed: If both extractors fail
        """
        os.makedirs(target_path, exist_ok=True)
        archive_format = {"zip": "zip", "tar": "tar", "tar.gz": "gztar", "tgz": "gztar"}.get(
            archive_type or "", None
        )

        try:
            shutil.unpack_archive(archive_path, target_path, archive_format)
            return
        except (shutil.ReadError, ValueError, OSError) as e:
            logger.log(
                f"Extracting {archive_path} failed ({str(e)}), falling back to tar",
                logging.WARNING,
            )

        try:
            result = runner(
                ["tar", "-xf", archive_path, "-C", target_path],
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise ArchiveExtractionFailed(f"Failed to extract {archive_path}: {str(e)}") from e

        if result.returncode != 0:
            raise ArchiveExtractionFailed(
                f"Failed to extract {archive_path}: tar exited with {result.returncode}: {result.stderr}"
            )


class Architecture(str, Enum):
    """
    Processor architectures installers are published for.
    """

    X64 = "x64"
    X86 = "x86"
    ARM64 = "arm64"


class PlatformUtils:
    """
    This class provides utilities for platform detection and identification.
    """

    @staticmethod
    def get_architecture() -> Architecture:
        """
        Returns the architecture of the current machine.

        Raises:
            ConfigurationError: If no installers are published for the machine
        """
        # Windows reports the native architecture here even from a 32-bit process
        machine = (os.environ.get("PROCESSOR_ARCHITEW6432") or platform.machine()).lower()
        if machine in ("amd64", "x86_64"):
            return Architecture.X64
        if machine in ("arm64", "aarch64"):
            return Architecture.ARM64
        if machine in ("x86", "i386", "i686"):
            return Architecture.X86
        raise ConfigurationError(f"Unknown machine architecture: {machine}")

