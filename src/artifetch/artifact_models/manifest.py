"""
Pydantic data models for dependency manifests shipped inside package
archives, e.g. DesktopAppInstaller_Dependencies.json:

{
  "Dependencies": [
    {"Name": "Microsoft.VCLibs.140.00.UWPDesktop", "Version": "14.0.33728.0"},
    {"Name": "Microsoft.UI.Xaml.2.8", "Version": "8.2310.30001.0"}
  ]
}
"""

import json
import pathlib
from typing import List

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from artifetch.artifetch_exceptions import ManifestParseFailed


class ManifestEntry(BaseModel):
    """One package the bundle depends on."""

    name: str = Field(..., alias="Name")
    version: str = Field(..., alias="Version")

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def matches(self, file_name: str) -> bool:
        return self.name in file_name and self.version in file_name


class DependencyManifest(BaseModel):
    """Ordered list of the packages a bundle depends on."""

    dependencies: List[ManifestEntry] = Field(default_factory=list, alias="Dependencies")

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @classmethod
    def from_file(cls, path: pathlib.Path) -> "DependencyManifest":
        """
        Load a manifest file.

        Raises:
            ManifestParseFailed: If the file is unreadable, not JSON, or does
                not have the expected structure
        """
        try:
            # utf-8-sig: manifests written by Windows tooling often carry a BOM
            with open(path, "r", encoding="utf-8-sig") as f:
                data = json.load(f)
            return cls.model_validate(data)
        except (OSError, ValueError, ValidationError) as e:
            raise ManifestParseFailed(f"Failed to parse dependency manifest {path}: {str(e)}") from e
