"""Tickets command: open tickets assigned to the current user."""

from collections import defaultdict
from typing import Dict, List, Optional

import click
from rich.table import Table

from ..models import NO_SPRINT, Ticket
from ..utils.display import console
from .common import run_service


def group_by_sprint(tickets: List[Ticket]) -> Dict[str, List[Ticket]]:
    """Group tickets under their sprint name, sprints sorted by name."""
    groups: Dict[str, List[Ticket]] = defaultdict(list)
    for ticket in tickets:
        groups[ticket.sprint or NO_SPRINT].append(ticket)
    return dict(sorted(groups.items()))


@click.command()
@click.option(
    '--status',
    type=str,
    help='Only show tickets in this status (case-insensitive)'
)
def tickets(status: Optional[str]):
    """List your open tickets grouped by sprint.

    Examples:

    \b
    All open tickets:
    $ jira-tray tickets

    \b
    Only tickets in progress:
    $ jira-tray tickets --status "In Progress"
    """
    result = run_service(lambda service: service.get_my_tickets())

    if status:
        wanted = status.strip().lower()
        result = [t for t in result if t.status.lower() == wanted]

    if not result:
        console.print("[yellow]No open tickets found.[/yellow]")
        return

    table = Table(title=f"My Tickets ({len(result)})", show_header=True, header_style="bold cyan")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Summary")
    table.add_column("Status", style="yellow")

    for sprint_name, group in group_by_sprint(result).items():
        table.add_row(f"[bold]{sprint_name}[/bold]", "", "")
        for ticket in group:
            table.add_row(ticket.key, ticket.summary, ticket.status)

    console.print(table)
