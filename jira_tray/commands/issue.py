"""Issue command: details, comments, history and transitions of one issue."""

import asyncio

import click
from rich.panel import Panel
from rich.table import Table

from ..utils.display import console
from ..utils.formatters import format_date, format_datetime, format_story_points
from ..utils.validators import validate_issue_key
from .common import run_service


@click.command()
@click.argument('issue_key')
def issue(issue_key: str):
    """Show the editable fields, comments, history and transitions of an issue.

    Examples:

    \b
    $ jira-tray issue PROJ-123
    """
    if not validate_issue_key(issue_key):
        console.print(f"[red]Invalid issue key:[/red] {issue_key}. Expected format: PROJ-123")
        raise click.Abort()
    issue_key = issue_key.strip().upper()

    async def load(service):
        return await asyncio.gather(
            service.get_issue_field_snapshot(issue_key),
            service.get_issue_comments(issue_key),
            service.get_issue_history(issue_key),
            service.get_transitions(issue_key)
        )

    snapshot, comments, history, transitions = run_service(load)

    details = Table.grid(padding=(0, 2))
    details.add_column(style="cyan")
    details.add_column()
    details.add_row("Assignee", snapshot.assignee_display_name or "Unassigned")
    details.add_row("Story Points", format_story_points(snapshot.story_points) or "-")
    details.add_row("Sprint", snapshot.sprint_name or "-")
    details.add_row("Due Date", format_date(snapshot.due_date) or "-")
    console.print(Panel(details, title=issue_key, border_style="cyan"))
    console.print(Panel(snapshot.description or "[dim]No description[/dim]", title="Description"))

    if comments:
        table = Table(title="Comments", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="dim")
        table.add_column("Author", style="cyan")
        table.add_column("Created")
        table.add_column("Body")
        for comment in comments:
            table.add_row(comment.id, comment.author, format_datetime(comment.created), comment.body)
        console.print(table)

    if history:
        table = Table(title="History", show_header=True, header_style="bold cyan")
        table.add_column("When")
        table.add_column("Author", style="cyan")
        table.add_column("Field", style="yellow")
        table.add_column("From")
        table.add_column("To")
        for entry in history:
            table.add_row(format_datetime(entry.when), entry.author, entry.field,
                          entry.from_value, entry.to_value)
        console.print(table)

    if transitions:
        names = ", ".join(f"{t.name} [dim]({t.id})[/dim]" for t in transitions)
        console.print(f"[cyan]Transitions:[/cyan] {names}")
