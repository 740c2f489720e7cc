"""
End-to-end tests of a provisioning pass with fake network and installers.
"""

import pytest

from artifetch.artifact_config import ResolutionOutcome
from artifetch.artifact_models import ArtifactsConfig, ArtifactSpec
from artifetch.artifetch_config import FetcherConfig, FetchMode
from artifetch.artifetch_logger import ArtifetchLogger
from artifetch.fetcher import ArtifactFetcher
from artifetch.version_record import VersionRecord
from fakes import FakeRunner, make_exe_spec, redirect_target, redirect_url


def publish(session, name, version, body=b"MZ-payload"):
    session.add_redirect(redirect_url(name), redirect_target(name, version))
    session.add_payload(redirect_url(name), body)


def make_fetcher(catalogue, session, runner, output_dir, cache_dir=None, mode=FetchMode.NORMAL,
                 architecture="x64", remove_source=True):
    config = FetcherConfig(
        output_dir=str(output_dir),
        existing_installer_files_path=str(cache_dir) if cache_dir else None,
        mode=mode,
        remove_incompatible_source=remove_source,
    )
    return ArtifactFetcher(config, catalogue, logger=ArtifetchLogger(), session=session,
                           architecture=architecture, runner=runner)


def seed_cache(cache_dir, versions):
    for name in versions:
        (cache_dir / name).write_bytes(b"MZ-cached")
    VersionRecord(versions).write(cache_dir / "versions.txt")


class TestArtifactFetcher:
    """Tests for ArtifactFetcher."""

    def test_fresh_run_downloads_installs_and_records(self, two_exe_catalogue, session, runner, output_dir):
        publish(session, "A.exe", "abc")
        publish(session, "B.exe", "def")

        summary = make_fetcher(two_exe_catalogue, session, runner, output_dir).run()

        assert summary.outcomes == {"A.exe": ResolutionOutcome.DOWNLOAD, "B.exe": ResolutionOutcome.DOWNLOAD}
        assert summary.installed == ["A.exe", "B.exe"]
        assert summary.exit_code == 0
        assert not summary.pause_at_end
        assert [cmd[0] for cmd in runner.commands] == [str(output_dir / "A.exe"), str(output_dir / "B.exe")]
        assert VersionRecord.load(output_dir / "versions.txt").to_dict() == {"A.exe": "abc", "B.exe": "def"}

    def test_second_run_against_own_output_is_up_to_date(self, two_exe_catalogue, session, tmp_path):
        publish(session, "A.exe", "abc")
        publish(session, "B.exe", "def")
        first_out = tmp_path / "first"
        make_fetcher(two_exe_catalogue, session, FakeRunner(), first_out).run()
        downloads_after_first = len(session.calls_for("GET"))

        second_out = tmp_path / "second"
        summary = make_fetcher(two_exe_catalogue, session, FakeRunner(), second_out, cache_dir=first_out).run()

        assert set(summary.outcomes.values()) == {ResolutionOutcome.USE_CACHED_UP_TO_DATE}
        assert len(session.calls_for("GET")) == downloads_after_first
        assert summary.installed == ["A.exe", "B.exe"]
        assert VersionRecord.load(second_out / "versions.txt").to_dict() == {"A.exe": "abc", "B.exe": "def"}

    def test_remote_change_downloads_and_pauses(self, session, runner, cache_dir, output_dir):
        seed_cache(cache_dir, {"A.exe": "abc"})
        publish(session, "A.exe", "xyz", body=b"MZ-new")
        catalogue = ArtifactsConfig(artifacts=[make_exe_spec("A.exe")])

        summary = make_fetcher(catalogue, session, runner, output_dir, cache_dir=cache_dir).run()

        assert summary.outcomes["A.exe"].requires_download
        assert summary.pause_at_end
        assert (output_dir / "A.exe").read_bytes() == b"MZ-new"
        assert (cache_dir / "A.exe").read_bytes() == b"MZ-cached"
        assert VersionRecord.load(cache_dir / "versions.txt").get("A.exe") == "abc"
        assert VersionRecord.load(output_dir / "versions.txt").get("A.exe") == "xyz"

    def test_remote_change_forced_uses_stale_cache(self, session, runner, cache_dir, output_dir):
        seed_cache(cache_dir, {"A.exe": "abc"})
        publish(session, "A.exe", "xyz")
        catalogue = ArtifactsConfig(artifacts=[make_exe_spec("A.exe")])

        summary = make_fetcher(catalogue, session, runner, output_dir, cache_dir=cache_dir,
                               mode=FetchMode.FORCE_CACHED).run()

        assert summary.outcomes["A.exe"] is ResolutionOutcome.USE_CACHED_STALE
        assert summary.pause_at_end
        assert session.calls_for("GET") == []
        assert runner.commands[0][0] == str(cache_dir / "A.exe")
        assert summary.versions.get("A.exe") == "xyz"

    def test_forced_missing_cache_continues(self, two_exe_catalogue, session, runner, cache_dir, output_dir):
        seed_cache(cache_dir, {"B.exe": "def"})
        publish(session, "A.exe", "abc")
        publish(session, "B.exe", "def")

        summary = make_fetcher(two_exe_catalogue, session, runner, output_dir, cache_dir=cache_dir,
                               mode=FetchMode.FORCE_CACHED).run()

        assert summary.outcomes == {
            "A.exe": ResolutionOutcome.UNAVAILABLE,
            "B.exe": ResolutionOutcome.USE_CACHED_UP_TO_DATE,
        }
        assert summary.unavailable == ["A.exe"]
        assert summary.installed == ["B.exe"]
        assert summary.exit_code == 0

    def test_no_check_makes_no_network_calls(self, two_exe_catalogue, session, runner, cache_dir, output_dir):
        seed_cache(cache_dir, {"A.exe": "abc"})

        summary = make_fetcher(two_exe_catalogue, session, runner, output_dir, cache_dir=cache_dir,
                               mode=FetchMode.NO_CHECK).run()

        assert session.calls == []
        assert summary.outcomes == {
            "A.exe": ResolutionOutcome.USE_CACHED_NO_CHECK,
            "B.exe": ResolutionOutcome.UNAVAILABLE,
        }
        assert (output_dir / "versions.txt").read_text(encoding="utf-8") == ""

    def test_record_only_holds_probed_versions(self, two_exe_catalogue, session, runner, output_dir):
        publish(session, "A.exe", "abc")
        session.fail("HEAD", redirect_url("B.exe"))
        session.add_payload(redirect_url("B.exe"), b"MZ")

        summary = make_fetcher(two_exe_catalogue, session, runner, output_dir).run()

        assert summary.installed == ["A.exe", "B.exe"]
        assert VersionRecord.load(output_dir / "versions.txt").to_dict() == {"A.exe": "abc"}

    def test_download_failure_is_per_artifact(self, two_exe_catalogue, session, runner, output_dir):
        session.add_redirect(redirect_url("A.exe"), redirect_target("A.exe", "abc"))
        session.add_payload(redirect_url("A.exe"), b"", status_code=500)
        publish(session, "B.exe", "def")

        summary = make_fetcher(two_exe_catalogue, session, runner, output_dir).run()

        assert summary.failed == ["A.exe"]
        assert summary.installed == ["B.exe"]
        assert summary.exit_code == 0
        assert [cmd[0] for cmd in runner.commands] == [str(output_dir / "B.exe")]
        assert summary.versions.get("A.exe") == "abc"

    def test_nothing_installed_exits_non_zero(self, two_exe_catalogue, session, runner, output_dir):
        summary = make_fetcher(two_exe_catalogue, session, runner, output_dir, mode=FetchMode.NO_CHECK).run()

        assert summary.unavailable == ["A.exe", "B.exe"]
        assert summary.exit_code == 1

    def test_platform_filtering(self, session, runner, output_dir):
        catalogue = ArtifactsConfig(
            artifacts=[make_exe_spec("A.exe", platforms=["arm64"]), make_exe_spec("B.exe")]
        )
        publish(session, "A.exe", "abc")
        publish(session, "B.exe", "def")

        summary = make_fetcher(catalogue, session, runner, output_dir, architecture="x64").run()

        assert summary.skipped == ["A.exe"]
        assert list(summary.outcomes) == ["B.exe"]
        assert "A.exe" not in summary.versions

    @pytest.mark.parametrize("remove_source, expected", [(True, True), (False, False)])
    def test_incompatible_source_removed_after_install(self, session, runner, output_dir, remove_source, expected):
        spec = ArtifactSpec(name="App.msixbundle", repo="microsoft/winget-cli", asset="App.msixbundle",
                            version_source="github_release", installer={"kind": "appx"})
        catalogue = ArtifactsConfig(artifacts=[spec], incompatible_source="msstore")
        session.add_json("https://api.github.com/repos/microsoft/winget-cli/releases/latest", {"tag_name": "v1.7"})
        session.add_payload(
            "https://github.com/microsoft/winget-cli/releases/download/v1.7/App.msixbundle", b"PK"
        )

        summary = make_fetcher(catalogue, session, runner, output_dir, remove_source=remove_source).run()

        assert summary.installed == ["App.msixbundle"]
        removed = ["winget", "source", "remove", "--name", "msstore"] in runner.commands
        assert removed is expected
        assert summary.versions.get("App.msixbundle") == "v1.7"
