"""
Artifact installation.

This package handles:
1. Invoking the native installer for a resolved local file
2. Expanding dependency archives and ordering their packages by manifest
3. Removing package sources known to be incompatible after installation
"""

from .dependency_order import order_dependency_packages
from .installer import ArtifactInstaller

__all__ = ["ArtifactInstaller", "order_dependency_packages"]
