"""history command: display the decision log for an owner."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

console = Console()

_ACTION_STYLE = {
    "Archive": "yellow",
    "Delete": "red",
    "CloseIssues": "cyan",
    "Skip": "dim",
    "Process": "green",
    "Skipped": "dim",
}


@click.command("history")
@click.option("--owner", required=True, help="Owner (user or organization) login.")
@click.option("--repo", "repo_name", default=None, help="Only show this repository.")
@click.option("--limit", default=20, show_default=True, help="Maximum number of entries to show.")
@click.pass_context
def history_cmd(ctx, owner: str, repo_name: str | None, limit: int):
    """Show the decisions logged for an owner, most recent first."""
    store = ctx.obj["store"]
    decisions = store.load().get(owner)
    if decisions is None:
        console.print(f"[yellow]No decisions recorded for {owner}.[/yellow]")
        return

    # (time, repository, action, detail)
    rows: list[tuple[str, str, str, str]] = []
    if repo_name is None:
        rows.extend((e.time, "", e.name, "owner") for e in decisions.decisions)

    for name, repo in decisions.repos.items():
        if repo_name is not None and name != repo_name:
            continue
        for e in repo.decisions:
            detail = ""
            if e.extra and "issues" in e.extra:
                detail = ", ".join(f"#{n}" for n in e.extra["issues"]) or "no open issues"
            rows.append((e.time, name, e.action.value, detail))

    if not rows:
        console.print("[yellow]No decisions recorded.[/yellow]")
        return

    rows.sort(key=lambda r: r[0], reverse=True)
    rows = rows[:limit]

    title = f"Decision History: {owner}/{repo_name}" if repo_name else f"Decision History: {owner}"
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Time", width=20)
    table.add_column("Repository")
    table.add_column("Action", width=12)
    table.add_column("Detail", max_width=40)

    for time, name, action, detail in rows:
        style = _ACTION_STYLE.get(action, "white")
        table.add_row(time[:19].replace("T", " "), name, f"[{style}]{action}[/{style}]", detail)

    console.print(table)
