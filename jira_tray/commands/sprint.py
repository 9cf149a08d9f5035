"""Sprint command: the most recent active sprint and its issues."""

import click
from rich.table import Table

from ..utils.display import console
from ..utils.formatters import format_datetime
from .common import run_service


@click.command()
def sprint():
    """Show the most recently started active sprint across scrum boards.

    Examples:

    \b
    $ jira-tray sprint
    """
    async def load(service):
        current = await service.get_most_recent_active_sprint()
        if current is None:
            return None, []
        return current, await service.get_issues_for_sprint(current.id)

    current, issues = run_service(load)

    if current is None:
        console.print("[yellow]No active sprint found on any scrum board.[/yellow]")
        return

    started = format_datetime(current.start_date) or "not started"
    table = Table(
        title=f"{current.name} (id {current.id}, started {started})",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Summary")
    table.add_column("Status", style="yellow")
    for ticket in issues:
        table.add_row(ticket.key, ticket.summary, ticket.status)
    console.print(table)
