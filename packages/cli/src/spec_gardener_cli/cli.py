"""CLI entry point for spec-gardener.

Commands:
  run    process one GitHub event (the GitHub Actions entry point)
  parse  show how a saved agent reply would be interpreted
  init   write a config file and a GitHub Actions workflow
"""

from __future__ import annotations

import logging

import click
from rich.logging import RichHandler

from spec_gardener_cli.commands.init import init_cmd
from spec_gardener_cli.commands.parse import parse_cmd
from spec_gardener_cli.commands.run import run_cmd


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False, markup=False)],
        force=True,
    )


@click.group()
@click.version_option(package_name="spec-gardener", prog_name="spec-gardener")
@click.option(
    "--config",
    "config_path",
    default=".spec-gardener.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="SPEC_GARDENER_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Refine issue and pull request descriptions into specifications with an AI agent."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(run_cmd)
main.add_command(parse_cmd)
main.add_command(init_cmd)
