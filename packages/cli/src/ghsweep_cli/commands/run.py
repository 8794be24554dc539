"""run command: the interactive walk over every accessible repository."""

from __future__ import annotations

import logging

import click
from rich.console import Console

from ghsweep_cli.auth import provision_github_token, resolve_github_token
from ghsweep_cli.shell import RichShell
from ghsweep_core.executor import ActionExecutor
from ghsweep_core.gh.client import GitHubClient
from ghsweep_core.traversal import TraversalController
from ghsweep_store.base import PersistenceError

console = Console()
logger = logging.getLogger(__name__)

_TIPS = (
    "Yes/No questions can be answered with y and n.",
    "Menus are answered with the number of the option.",
    "Press Ctrl-C at any time after the repos load to save your progress.",
)


def _welcome(shell: RichShell) -> bool:
    with shell.frame("Getting Started"):
        shell.notice("This will walk you through all repositories to which you have access.", "dim")
        shell.notice("It will help you audit them, archiving or deleting ones you no longer want.", "dim")
        for tip in _TIPS:
            shell.notice(tip)
        return shell.confirm("Are you ready to get started?", default=True)


def _persist(store) -> None:
    try:
        store.persist()
    except PersistenceError as e:
        raise click.ClickException(str(e)) from e


@click.command("run")
@click.option(
    "--include-archived/--exclude-archived",
    default=None,
    help="Walk repositories that were already archived too. Overrides INCLUDE_ARCHIVED.",
)
@click.option("--refresh", is_flag=True, help="Discard the cached repository list and fetch it again.")
@click.pass_context
def run_cmd(ctx, include_archived: bool | None, refresh: bool):
    """Decide, repository by repository, what to keep.

    Decisions are saved to the decision log when the walk finishes or when you
    press Ctrl-C, and repositories already archived, deleted or skipped are
    not offered again on the next run.

    \b
    Environment variables:
      GITHUB_TOKEN         token with repo and delete_repo scopes (or use gh CLI)
      INCLUDE_ARCHIVED     set to true to include archived repositories
    """
    config = ctx.obj["config"]
    store = ctx.obj["store"]
    cache = ctx.obj["cache"]
    if include_archived is None:
        include_archived = config["include_archived"]

    shell = RichShell(console, max_workers=config["close_issue_workers"])

    token = resolve_github_token() or provision_github_token(shell, config["env_file"])
    if not token:
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )

    client = GitHubClient(token)
    store.load()

    try:
        if not _welcome(shell):
            return

        with shell.frame("Finding Repos"):
            if refresh:
                cache.clear()
            directory = cache.load(client.list_repositories)
            total = sum(len(repos) for repos in directory.values())
            shell.notice(f"Found {total} repos across {len(directory)} owners")
            shell.notice("You can now press Ctrl-C at any time to save your progress")
    except (KeyboardInterrupt, click.Abort):
        shell.notice("Ok, nothing to save yet, bye!", "success")
        return

    controller = TraversalController(
        store,
        ActionExecutor(client, shell),
        shell,
        include_archived=include_archived,
    )
    try:
        summary = controller.run(directory)
        shell.notice(
            f"Done. {summary.owners_processed} owner(s) processed, {summary.owners_skipped} skipped. "
            f"{summary.repos_resolved} repo(s) resolved, {summary.repos_left} left for later.",
            "success",
        )
    except (KeyboardInterrupt, click.Abort):
        shell.notice("Ok, saving your current decisions for later... bye!", "success")
    finally:
        _persist(store)
        logger.debug("Decision log written to %s", getattr(store, "path", "<store>"))
