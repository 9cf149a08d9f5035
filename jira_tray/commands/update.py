"""Write commands: edit fields, comment on and transition an issue."""

from typing import Optional

import click

from ..utils.display import console
from ..utils.formatters import parse_date
from ..utils.validators import validate_date, validate_issue_key, validate_story_points
from .common import run_service


def _issue_key(value: str) -> str:
    if not validate_issue_key(value):
        console.print(f"[red]Invalid issue key:[/red] {value}. Expected format: PROJ-123")
        raise click.Abort()
    return value.strip().upper()


@click.command()
@click.argument('issue_key')
@click.option('--text', type=str, help='New description (reads stdin when omitted)')
def describe(issue_key: str, text: Optional[str]):
    """Replace the description of an issue.

    \b
    $ jira-tray describe PROJ-123 --text "First line
    Second line"
    $ cat notes.txt | jira-tray describe PROJ-123
    """
    key = _issue_key(issue_key)
    body = text if text is not None else click.get_text_stream('stdin').read()
    run_service(lambda service: service.update_issue_description(key, body))


@click.command()
@click.argument('issue_key')
@click.argument('text')
@click.option('--edit', 'comment_id', type=str, help='Replace the body of this comment ID instead of posting')
def comment(issue_key: str, text: str, comment_id: Optional[str]):
    """Post a comment, or edit an existing one with --edit.

    \b
    $ jira-tray comment PROJ-123 "Deployed to staging"
    $ jira-tray comment PROJ-123 "Deployed to production" --edit 10042
    """
    key = _issue_key(issue_key)
    if comment_id:
        run_service(lambda service: service.update_comment(key, comment_id, text))
    else:
        if not text.strip():
            console.print("[red]Comment text is empty.[/red]")
            raise click.Abort()
        run_service(lambda service: service.add_comment(key, text))


@click.command()
@click.argument('issue_key')
@click.argument('value', required=False)
def points(issue_key: str, value: Optional[str]):
    """Set story points; omit VALUE to clear them.

    \b
    $ jira-tray points PROJ-123 5
    $ jira-tray points PROJ-123
    """
    key = _issue_key(issue_key)
    story_points = None
    if value is not None and value.strip():
        if not validate_story_points(value):
            console.print(f"[red]Invalid story points:[/red] {value}")
            raise click.Abort()
        story_points = float(value)
    updated = run_service(lambda service: service.update_story_points(key, story_points))
    if not updated:
        console.print("[yellow]Story points were not updated (no Story Points field on this instance?).[/yellow]")


@click.command()
@click.argument('issue_key')
@click.argument('assignee', required=False, default='')
def assign(issue_key: str, assignee: str):
    """Assign to a user by name, email or account ID; omit ASSIGNEE to unassign.

    \b
    $ jira-tray assign PROJ-123 "jane@example.com"
    $ jira-tray assign PROJ-123
    """
    key = _issue_key(issue_key)
    run_service(lambda service: service.update_assignee(key, assignee))


@click.command()
@click.argument('issue_key')
@click.argument('due', required=False)
def due(issue_key: str, due: Optional[str]):
    """Set the due date (YYYY-MM-DD); omit DUE to clear it.

    \b
    $ jira-tray due PROJ-123 2024-12-31
    """
    key = _issue_key(issue_key)
    due_date = None
    if due:
        if not validate_date(due):
            console.print(f"[red]Invalid date format:[/red] {due}. Expected YYYY-MM-DD")
            raise click.Abort()
        due_date = parse_date(due)
    run_service(lambda service: service.update_due_date(key, due_date))


@click.command(name='move-sprint')
@click.argument('issue_key')
@click.argument('sprint_id', type=int, required=False)
def move_sprint(issue_key: str, sprint_id: Optional[int]):
    """Move an issue into a sprint; omit SPRINT_ID to remove it from its sprint.

    \b
    $ jira-tray move-sprint PROJ-123 42
    """
    key = _issue_key(issue_key)
    updated = run_service(lambda service: service.update_sprint(key, sprint_id))
    if not updated:
        console.print("[yellow]Sprint was not updated (no Sprint field on this instance?).[/yellow]")


@click.command()
@click.argument('issue_key')
@click.argument('transition_id')
def transition(issue_key: str, transition_id: str):
    """Apply a workflow transition (see `jira-tray issue KEY` for IDs).

    \b
    $ jira-tray transition PROJ-123 31
    """
    key = _issue_key(issue_key)
    run_service(lambda service: service.transition_issue(key, transition_id))
