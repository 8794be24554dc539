"""CLI entry point for ghsweep.

Commands:
  run      walk every accessible repository and decide what to do with it
  status   per-owner progress from the decision log
  history  the logged decisions for an owner or a single repository
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from ghsweep_cli.commands.history import history_cmd
from ghsweep_cli.commands.run import run_cmd
from ghsweep_cli.commands.status import status_cmd

console = Console()


def _build_store(config: dict):
    """Instantiate the decision store under the configured data directory."""
    from ghsweep_core.config import DECISIONS_FILENAME, data_path
    from ghsweep_store.json_file import JsonDecisionStore

    return JsonDecisionStore(data_path(config, DECISIONS_FILENAME))


def _build_cache(config: dict):
    from ghsweep_core.config import data_path
    from ghsweep_store.cache import REPOS_CACHE_FILENAME, RepositoryCache

    return RepositoryCache(data_path(config, REPOS_CACHE_FILENAME))


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("ghsweep"),
    prog_name="ghsweep",
)
@click.option(
    "--config",
    "config_path",
    default=".ghsweep.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="GHSWEEP_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Walk through your GitHub repositories and archive, delete or skip them."""
    from ghsweep_core.config import DEFAULT_CONFIG, load_config

    _configure_logging(verbose)
    ctx.ensure_object(dict)

    # Load the env file before reading config so GITHUB_TOKEN and
    # INCLUDE_ARCHIVED from it are visible.
    load_dotenv(DEFAULT_CONFIG["env_file"])
    config = load_config(config_path)
    if config["env_file"] != DEFAULT_CONFIG["env_file"]:
        load_dotenv(config["env_file"])
        config = load_config(config_path)

    store = _build_store(config)
    ctx.obj["store"] = store
    ctx.obj["cache"] = _build_cache(config)
    ctx.obj["config"] = config
    ctx.call_on_close(store.close)


main.add_command(run_cmd)
main.add_command(status_cmd)
main.add_command(history_cmd)
