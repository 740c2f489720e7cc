"""
Command line interface of artifetch.
"""

import logging
import os
import sys
from typing import Any, Dict, Optional

import click
from pydantic import ValidationError

from artifetch import bundles
from artifetch.artifact_models import ArtifactsConfig
from artifetch.artifetch_config import FetcherConfig, load_config_file
from artifetch.artifetch_exceptions import ConfigurationError
from artifetch.artifetch_logger import ArtifetchLogger
from artifetch.artifetch_settings import ArtifetchSettings
from artifetch.fetcher import ArtifactFetcher, FetchSummary


def _load_artifacts(bundle: Optional[str], artifacts_path: Optional[str]) -> ArtifactsConfig:
    if artifacts_path is not None:
        try:
            return ArtifactsConfig.from_file(artifacts_path)
        except (OSError, ValueError, ValidationError) as e:
            raise ConfigurationError(f"Failed to load artifacts file {artifacts_path}: {str(e)}") from e
    if bundle is None:
        raise ConfigurationError("Give a bundle name or --artifacts")
    return bundles.load_bundle(bundle)


def _build_settings(config_path: Optional[str], overrides: Dict[str, Any]) -> Dict[str, Any]:
    if config_path is None and os.path.isfile(ArtifetchSettings.CONFIG_FILENAME):
        config_path = ArtifetchSettings.CONFIG_FILENAME

    settings: Dict[str, Any] = load_config_file(config_path) if config_path else {}
    # Command line flags win over the config file
    settings.update({k: v for k, v in overrides.items() if v is not None})
    return settings


def _stdin_is_interactive() -> bool:
    return sys.stdin.isatty()


def _report(summary: FetchSummary, no_pause: bool) -> None:
    for name, outcome in summary.outcomes.items():
        click.echo(f"{name}: {outcome.value}")

    if summary.installed:
        click.echo(f"Installed: {', '.join(summary.installed)}")
    if summary.failed or summary.unavailable:
        click.secho(f"Not installed: {', '.join(summary.failed + summary.unavailable)}", fg="red", err=True)

    for warning in summary.warnings:
        click.secho(f"WARNING: {warning}", fg="yellow", err=True)

    if summary.pause_at_end:
        click.secho(
            "Some cached installers are out of date. Review the warnings above.",
            fg="yellow",
            err=True,
        )
        if not no_pause and _stdin_is_interactive():
            click.pause()


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log debug messages")
def cli(verbose: bool) -> None:
    """Fetch pinned installers and run them unattended."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s %(message)s",
    )


@cli.command("install")
@click.argument("bundle", required=False)
@click.option("--artifacts", "artifacts_path", type=click.Path(dir_okay=False), help="Artifact catalogue to use instead of a bundle")
@click.option(
    "--existing-installer-files-path",
    type=click.Path(),
    help="Directory of previously downloaded installers to reuse (only read)",
)
@click.option("--output-dir", type=click.Path(), help="Writable directory for downloads and the version record")
@click.option(
    "--force-cached-files-only",
    is_flag=True,
    help="Use cached installers even when out of date (warns)",
)
@click.option(
    "--no-check-latest-version",
    is_flag=True,
    help="Do not probe the vendor for the latest version (implies --force-cached-files-only)",
)
@click.option(
    "--remove-msstore-source/--keep-msstore-source",
    "remove_msstore_source",
    default=None,
    help="Remove the incompatible msstore source after installing winget (default: remove)",
)
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="TOML config file")
@click.option("--no-pause", is_flag=True, help="Do not wait for a key when there are warnings")
def install_cmd(
    bundle: Optional[str],
    artifacts_path: Optional[str],
    existing_installer_files_path: Optional[str],
    output_dir: Optional[str],
    force_cached_files_only: bool,
    no_check_latest_version: bool,
    remove_msstore_source: Optional[bool],
    config_path: Optional[str],
    no_pause: bool,
) -> None:
    """Fetch and install the artifacts of BUNDLE."""
    try:
        artifacts_config = _load_artifacts(bundle, artifacts_path)
        settings = _build_settings(
            config_path,
            {
                "existing_installer_files_path": existing_installer_files_path,
                "output_dir": output_dir,
                "force_cached_files_only": force_cached_files_only or None,
                "no_check_latest_version": no_check_latest_version or None,
                "remove_incompatible_source": remove_msstore_source,
            },
        )
        config = FetcherConfig.from_dict(settings)
        fetcher = ArtifactFetcher(config, artifacts_config, ArtifetchLogger())
    except ConfigurationError as e:
        raise click.UsageError(str(e))

    try:
        summary = fetcher.run()
    except OSError as e:
        raise click.ClickException(f"Failed to write version record: {str(e)}")

    _report(summary, no_pause)
    sys.exit(summary.exit_code)


@cli.command("bundles")
def bundles_cmd() -> None:
    """List the shipped bundles and their artifacts."""
    for name in bundles.list_bundles():
        catalogue = bundles.load_bundle(name)
        click.echo(name)
        for artifact in catalogue.artifacts:
            platforms = f" ({', '.join(artifact.platforms)})" if artifact.platforms else ""
            click.echo(f"  {artifact.name}{platforms}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
