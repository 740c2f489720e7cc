"""
Install ordering of the auxiliary packages shipped in a dependency archive.
"""

import logging
import pathlib
from typing import List, Optional

from artifetch.artifact_models import DependencyManifest
from artifetch.artifetch_exceptions import ManifestParseFailed
from artifetch.artifetch_logger import ArtifetchLogger

PACKAGE_SUFFIXES = (".appx", ".msix", ".appxbundle", ".msixbundle")


def _find_packages(package_dir: pathlib.Path, architecture: Optional[str]) -> List[pathlib.Path]:
    search_dir = package_dir
    if architecture:
        # Archives group packages into one directory per architecture
        arch_dirs = [p for p in package_dir.rglob("*") if p.is_dir() and p.name.lower() == architecture.lower()]
        if arch_dirs:
            search_dir = arch_dirs[0]

    return [
        p for p in search_dir.rglob("*")
        if p.is_file() and p.suffix.lower() in PACKAGE_SUFFIXES
    ]


def order_dependency_packages(
    package_dir: pathlib.Path,
    manifest_path: Optional[pathlib.Path],
    logger: ArtifetchLogger,
    architecture: Optional[str] = None,
) -> List[pathlib.Path]:
    """
    List the packages of package_dir in install order.

    With a manifest, packages are returned in manifest order; a package
    matches an entry when its file name contains both the entry's name and
    version. Without a usable manifest every package found is returned in
    directory listing order.

    Args:
        package_dir: Directory the dependency archive was expanded into
        manifest_path: Manifest listing the dependencies, if the archive has one
        logger: Logger for warnings
        architecture: Restrict to the packages built for this architecture

    Returns:
        Package files to install, in order
    """
    packages = _find_packages(package_dir, architecture)

    manifest = None
    if manifest_path is not None and manifest_path.is_file():
        try:
            manifest = DependencyManifest.from_file(manifest_path)
        except ManifestParseFailed as e:
            logger.log(f"{str(e)}, installing every package found", logging.WARNING)
    else:
        logger.log(
            f"No dependency manifest in {package_dir}, installing every package found in no particular order",
            logging.WARNING,
        )

    if manifest is None:
        return packages

    ordered: List[pathlib.Path] = []
    for entry in manifest.dependencies:
        matches = [p for p in packages if entry.matches(p.name) and p not in ordered]
        if not matches:
            logger.log(
                f"No package found for dependency {entry.name} {entry.version}",
                logging.WARNING,
            )
        ordered.extend(matches)
    return ordered
