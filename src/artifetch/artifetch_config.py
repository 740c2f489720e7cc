"""
Configuration parameters for artifetch.
"""

import os
import pathlib
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional

try:
    import tomllib
except ModuleNotFoundError:
    # Python < 3.11
    import tomli as tomllib

from artifetch.artifetch_exceptions import ConfigurationError
from artifetch.artifetch_settings import ArtifetchSettings


class FetchMode(str, Enum):
    """
    How cached installer files are preferred over the vendor endpoints.
    """

    NORMAL = "normal"
    FORCE_CACHED = "force_cached"
    NO_CHECK = "no_check"

    @classmethod
    def from_flags(cls, force_cached_files_only: bool, no_check_latest_version: bool) -> "FetchMode":
        """
        Collapse the two operator flags into one mode. Skipping the version
        check implies forcing cached files.
        """
        if no_check_latest_version:
            return cls.NO_CHECK
        if force_cached_files_only:
            return cls.FORCE_CACHED
        return cls.NORMAL

    @property
    def is_forced(self) -> bool:
        return self in (FetchMode.FORCE_CACHED, FetchMode.NO_CHECK)

    @property
    def checks_version(self) -> bool:
        return self is not FetchMode.NO_CHECK


@dataclass
class FetcherConfig:
    """
    Configuration parameters for a single fetch/install run.
    """

    output_dir: str
    existing_installer_files_path: Optional[str] = None
    mode: FetchMode = FetchMode.NORMAL
    remove_incompatible_source: bool = True

    def validate(self) -> None:
        """
        Reject combinations that cannot be acted on before any work begins.

        Raises:
            ConfigurationError: If the cache path is not a directory or the
                output directory points at an existing file
        """
        if self.existing_installer_files_path is not None:
            if not os.path.isdir(self.existing_installer_files_path):
                raise ConfigurationError(
                    f"Existing installer files path is not a directory: {self.existing_installer_files_path}"
                )

        if os.path.exists(self.output_dir) and not os.path.isdir(self.output_dir):
            raise ConfigurationError(f"Output path is not a directory: {self.output_dir}")

    @property
    def cache_dir(self) -> Optional[pathlib.Path]:
        if self.existing_installer_files_path is None:
            return None
        return pathlib.Path(self.existing_installer_files_path)

    @property
    def version_record_path(self) -> pathlib.Path:
        return pathlib.Path(self.output_dir) / ArtifetchSettings.VERSION_RECORD_FILENAME

    @property
    def stored_version_record_path(self) -> Optional[pathlib.Path]:
        if self.cache_dir is None:
            return None
        return self.cache_dir / ArtifetchSettings.VERSION_RECORD_FILENAME

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FetcherConfig":
        """
        Create a FetcherConfig from a dictionary of operator settings.

        The flags ``force_cached_files_only`` and ``no_check_latest_version``
        are normalised into a single FetchMode. An explicit ``mode`` wins over
        the flags.

        Args:
            d: Settings, as loaded from artifetch.toml or built by the CLI

        Returns:
            FetcherConfig instance

        Raises:
            ConfigurationError: If a value has the wrong type or the result
                fails validation
        """
        for flag in ("force_cached_files_only", "no_check_latest_version", "remove_incompatible_source"):
            if flag in d and not isinstance(d[flag], bool):
                raise ConfigurationError(f"'{flag}' must be a boolean, got {d[flag]!r}")

        if "mode" in d and d["mode"] is not None:
            try:
                mode = FetchMode(d["mode"])
            except ValueError:
                raise ConfigurationError(f"Unsupported mode: {d['mode']}")
        else:
            mode = FetchMode.from_flags(
                d.get("force_cached_files_only", False),
                d.get("no_check_latest_version", False),
            )

        cache_path = d.get("existing_installer_files_path")
        output_dir = d.get("output_dir") or ArtifetchSettings.get_default_output_directory()

        instance = cls(
            output_dir=str(output_dir),
            existing_installer_files_path=str(cache_path) if cache_path else None,
            mode=mode,
            remove_incompatible_source=d.get("remove_incompatible_source", True),
        )
        instance.validate()
        return instance

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["mode"] = self.mode.value
        return out


def load_config_file(path: str) -> Dict[str, Any]:
    """
    Load the ``[artifetch]`` table of a TOML config file.

    Args:
        path: Path to the config file

    Returns:
        The settings found in the table, empty if the table is absent

    Raises:
        ConfigurationError: If the file cannot be read or parsed
    """
    try:
        with open(path, "rb") as f:
            toml_dict = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Failed to load config file {path}: {str(e)}") from e

    section = toml_dict.get("artifetch", {})
    if not isinstance(section, dict):
        raise ConfigurationError(f"'artifetch' in {path} must be a table")
    return section
