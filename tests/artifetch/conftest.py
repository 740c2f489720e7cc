"""
Shared fixtures for the artifetch tests.
"""

import pytest

from artifetch.artifact_models import ArtifactsConfig
from artifetch.artifetch_logger import ArtifetchLogger
from fakes import FakeRunner, FakeSession, make_exe_spec


@pytest.fixture
def logger():
    return ArtifetchLogger()


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def cache_dir(tmp_path):
    path = tmp_path / "cache"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "out"


@pytest.fixture
def two_exe_catalogue():
    return ArtifactsConfig(artifacts=[make_exe_spec("A.exe"), make_exe_spec("B.exe")])
