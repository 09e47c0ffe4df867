"""CLI entrypoint for changed-pkgs."""

import sys
from pathlib import Path

import click

from . import __version__
from .config import LOG_LEVELS, load_settings
from .errors import ConfigError
from .log import configure_logging


@click.command(context_settings={"auto_envvar_prefix": "CHANGED_PKGS"})
@click.version_option(__version__, prog_name="changed-pkgs")
@click.option("--from-ref", required=True, help="Revision before the change")
@click.option("--to-ref", required=True, help="Revision after the change")
@click.option(
    "--repo-dir",
    type=click.Path(file_okay=False, dir_okay=True),
    default=None,
    help="The Git repo to inspect [default: .]",
)
@click.option(
    "--mod-dir",
    type=click.Path(file_okay=False, dir_okay=True),
    default=None,
    help="Path to the directory containing go.mod. Used to find local packages [default: .]",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS),
    default=None,
    help="The level to log at [default: warn]",
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output the packages as a JSON array",
)
@click.option(
    "--explain",
    is_flag=True,
    help="Show why each package changed",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="TOML config file (defaults to ./.changed-pkgs.toml when present)",
)
def cli(
    from_ref: str,
    to_ref: str,
    repo_dir: str | None,
    mod_dir: str | None,
    log_level: str | None,
    output_json: bool,
    explain: bool,
    config_path: Path | None,
) -> None:
    """changed-pkgs - Get the changed Go packages between two commits.

    A package is changed when one of its files changed, when it imports a
    package from a third-party module whose required version changed, or when
    it imports a changed local package.

    Examples:

        changed-pkgs --from-ref origin/main --to-ref HEAD

        changed-pkgs --from-ref v1.2.0 --to-ref v1.3.0 --mod-dir services/api --explain
    """
    from .commands.changed import run_changed

    try:
        settings = load_settings(config_path)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    settings = settings.merged(
        repo_dir=repo_dir,
        mod_dir=mod_dir,
        log_level=log_level,
        output="json" if output_json else None,
    )
    configure_logging(settings.log_level)

    exit_code = run_changed(settings, from_ref, to_ref, explain=explain)
    sys.exit(exit_code)


def main() -> None:
    cli(prog_name="changed-pkgs")
