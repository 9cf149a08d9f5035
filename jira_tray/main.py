"""Main CLI entry point for the Jira tray client."""

import asyncio

import click
from rich.panel import Panel

from . import __version__
from .commands import (
    assign,
    comment,
    describe,
    due,
    issue,
    move_sprint,
    points,
    sprint,
    tickets,
    transition,
)
from .config.auth import JiraAuth
from .config.settings import get_settings
from .exceptions import JiraAuthenticationError, JiraError
from .utils.display import configure_logging, console


@click.group(invoke_without_command=True)
@click.option('--verbose', is_flag=True, help='Show debug logging (request tracing)')
@click.pass_context
@click.version_option(version=__version__, prog_name="jira-tray")
def cli(ctx: click.Context, verbose: bool):
    """Jira Tray - your Jira Cloud tickets from the terminal.

    Reads JIRA_INSTANCE_URL, JIRA_USERNAME and JIRA_API_TOKEN from the
    environment or a .env file.

    Examples:

    \b
    Test connection:
    $ jira-tray test

    \b
    List your open tickets:
    $ jira-tray tickets

    \b
    Show one issue:
    $ jira-tray issue PROJ-123
    """
    configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        console.print(Panel(
            "[bold cyan]Jira Tray[/bold cyan]\n\n"
            "[yellow]Available Commands:[/yellow]\n"
            "  test          - Test connection to Jira\n"
            "  tickets       - List your open tickets grouped by sprint\n"
            "  issue         - Show fields, comments, history and transitions\n"
            "  sprint        - Show the most recent active sprint\n"
            "  describe      - Replace an issue description\n"
            "  comment       - Post or edit a comment\n"
            "  points        - Set or clear story points\n"
            "  assign        - Assign or unassign an issue\n"
            "  due           - Set or clear the due date\n"
            "  move-sprint   - Move an issue into or out of a sprint\n"
            "  transition    - Apply a workflow transition\n\n"
            "[dim]Use --help with any command for detailed help.[/dim]",
            title="Welcome",
            border_style="cyan"
        ))
        console.print(ctx.get_help())


@cli.command()
def test():
    """Test connection to Jira with the current credentials.

    Examples:

    \b
    $ jira-tray test
    """
    settings = get_settings()

    async def check():
        auth = JiraAuth(settings)
        try:
            return await auth.test_connection()
        finally:
            await auth.aclose()

    try:
        user = asyncio.run(check())
    except JiraAuthenticationError as e:
        console.print(Panel(
            f"[red]✗[/red] Authentication failed!\n\n"
            f"Error: {e}\n\n"
            f"[yellow]Common Issues:[/yellow]\n"
            f"• JIRA_INSTANCE_URL: {settings.jira_url or '(not set)'}\n"
            f"• JIRA_USERNAME: use the email address of your Atlassian account\n"
            f"• JIRA_API_TOKEN: ensure the token is valid and not revoked\n\n"
            f"Get your API token from:\n"
            f"https://id.atlassian.com/manage-profile/security/api-tokens",
            title="Authentication Error",
            border_style="red"
        ))
        raise click.Abort()
    except JiraError as e:
        console.print(Panel(
            f"[red]✗[/red] Connection failed!\n\n"
            f"Error: {e}\n\n"
            f"Please check JIRA_INSTANCE_URL ({settings.jira_url or 'not set'}) "
            f"and your network connectivity.",
            title="Connection Error",
            border_style="red"
        ))
        raise click.Abort()

    console.print(Panel(
        f"[green]✓[/green] Connected to Jira successfully!\n\n"
        f"Server: {settings.jira_url}\n"
        f"Display Name: {user.get('displayName', settings.username)}\n"
        f"Email: {user.get('emailAddress', settings.username)}\n"
        f"Account ID: {user.get('accountId', 'N/A')}",
        title="Connection Test",
        border_style="green"
    ))


cli.add_command(tickets)
cli.add_command(issue)
cli.add_command(sprint)
cli.add_command(describe)
cli.add_command(comment)
cli.add_command(points)
cli.add_command(assign)
cli.add_command(due)
cli.add_command(move_sprint)
cli.add_command(transition)


if __name__ == "__main__":
    cli()
