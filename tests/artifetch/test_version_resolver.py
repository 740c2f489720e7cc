"""
Tests for remote version probing.
"""

from artifetch.artifact_config import VersionResolver
from artifetch.artifact_models import ArtifactSpec
from artifetch.artifetch_config import FetchMode
from fakes import FakeResponse, make_exe_spec, redirect_target, redirect_url

LATEST_RELEASE = "https://api.github.com/repos/microsoft/winget-cli/releases/latest"


def release_spec() -> ArtifactSpec:
    return ArtifactSpec(
        name="Microsoft.DesktopAppInstaller_8wekyb3d8bbwe.msixbundle",
        repo="microsoft/winget-cli",
        asset="Microsoft.DesktopAppInstaller_8wekyb3d8bbwe.msixbundle",
        version_source="github_release",
        installer={"kind": "appx"},
    )


def test_redirect_segment_is_version(session, logger):
    session.add_redirect(redirect_url("A.exe"), redirect_target("A.exe", "1a2b3c"))
    resolver = VersionResolver(session, logger, FetchMode.NORMAL)

    assert resolver.resolve(make_exe_spec("A.exe")) == "1a2b3c"
    assert session.calls == [("HEAD", redirect_url("A.exe"))]


def test_custom_segment(session, logger):
    spec = make_exe_spec("A.exe")
    spec.version_segment = 1
    session.add_redirect(redirect_url("A.exe"), "https://cdn.example.test/pr/guid-1/hash/A.exe")

    assert VersionResolver(session, logger, FetchMode.NORMAL).resolve(spec) == "guid-1"


def test_missing_location_yields_none(session, logger):
    session.routes[("HEAD", redirect_url("A.exe"))] = FakeResponse(200)

    assert VersionResolver(session, logger, FetchMode.NORMAL).resolve(make_exe_spec("A.exe")) is None


def test_connection_error_yields_none(session, logger):
    session.fail("HEAD", redirect_url("A.exe"))

    assert VersionResolver(session, logger, FetchMode.FORCE_CACHED).resolve(make_exe_spec("A.exe")) is None


def test_unusable_identifier_yields_none(session, logger):
    session.add_redirect(redirect_url("A.exe"), redirect_target("A.exe", "a=b"))

    assert VersionResolver(session, logger, FetchMode.NORMAL).resolve(make_exe_spec("A.exe")) is None


def test_no_check_never_calls_network(session, logger):
    session.add_redirect(redirect_url("A.exe"), redirect_target("A.exe", "abc"))
    resolver = VersionResolver(session, logger, FetchMode.NO_CHECK)

    assert resolver.resolve(make_exe_spec("A.exe")) is None
    assert resolver.resolve(release_spec()) is None
    assert session.calls == []


def test_release_tag_is_version(session, logger):
    session.add_json(LATEST_RELEASE, {"tag_name": "v1.7.10861", "name": "Windows Package Manager"})

    assert VersionResolver(session, logger, FetchMode.NORMAL).resolve(release_spec()) == "v1.7.10861"


def test_release_errors_yield_none(session, logger):
    resolver = VersionResolver(session, logger, FetchMode.NORMAL)

    session.add_json(LATEST_RELEASE, {"message": "API rate limit exceeded"}, status_code=403)
    assert resolver.resolve(release_spec()) is None

    session.add_json(LATEST_RELEASE, {"name": "no tag"})
    assert resolver.resolve(release_spec()) is None

    session.routes[("GET", LATEST_RELEASE)] = FakeResponse(200, body=b"<html>")
    assert resolver.resolve(release_spec()) is None


def test_release_tag_is_stripped(session, logger):
    resolver = VersionResolver(session, logger, FetchMode.NORMAL)

    session.add_json(LATEST_RELEASE, {"tag_name": " v1.7.10861\t"})
    assert resolver.resolve(release_spec()) == "v1.7.10861"

    session.add_json(LATEST_RELEASE, {"tag_name": "   "})
    assert resolver.resolve(release_spec()) is None
