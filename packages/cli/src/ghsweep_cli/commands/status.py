"""status command: per-owner progress through the repository directory."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from ghsweep_core.traversal import is_resolved

console = Console()


@click.command("status")
@click.option("--owner", default=None, help="Only show this owner.")
@click.pass_context
def status_cmd(ctx, owner: str | None):
    """Show how far the walk has got for each owner.

    Reads the cached repository list and the decision log only; nothing is
    fetched from GitHub. Run `ghsweep run` first to build the cache.
    """
    cache = ctx.obj["cache"]
    store = ctx.obj["store"]

    directory = cache.read()
    if not directory:
        raise click.UsageError("No cached repository list found. Run `ghsweep run` first.")
    owners = store.load()

    if owner is not None:
        if owner not in directory:
            console.print(f"[yellow]{owner} is not in the cached repository list.[/yellow]")
            return
        directory = {owner: directory[owner]}

    table = Table(title="Sweep status", show_header=True, header_style="bold cyan")
    table.add_column("Owner", style="bold")
    table.add_column("Repos", justify="right")
    table.add_column("Archived", justify="right")
    table.add_column("Deleted", justify="right")
    table.add_column("Skipped", justify="right")
    table.add_column("Pending", justify="right")
    table.add_column("Owner skipped", justify="center")

    totals = {"repos": 0, "pending": 0}
    for login, repos in directory.items():
        decisions = owners.get(login)
        known = decisions.repos if decisions else {}
        records = list(repos.values())

        archived = sum(1 for r in records if r.archived or (r.name in known and known[r.name].archived))
        deleted = sum(1 for r in records if r.name in known and known[r.name].deleted)
        skipped = sum(1 for r in records if r.name in known and known[r.name].skipped)
        owner_skipped = bool(decisions and decisions.skipped)
        pending = 0 if owner_skipped else sum(1 for r in records if not is_resolved(r, known.get(r.name)))

        totals["repos"] += len(records)
        totals["pending"] += pending
        table.add_row(
            login,
            str(len(records)),
            str(archived),
            str(deleted),
            str(skipped),
            f"[yellow]{pending}[/yellow]" if pending else "[green]0[/green]",
            "[dim]yes[/dim]" if owner_skipped else "",
        )

    console.print(table)
    console.print(f"  {totals['pending']} of {totals['repos']} repo(s) still pending.")
