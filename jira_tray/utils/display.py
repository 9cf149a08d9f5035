"""Console output and logging setup for the command line."""

import logging

from rich.console import Console
from rich.logging import RichHandler

from ..services.events import AuthenticationRequired, OperationFailed, OperationSucceeded

console = Console()


def configure_logging(verbose: bool = False) -> None:
    """Route library logging through rich.

    Args:
        verbose: Show debug output (request tracing) instead of warnings only
    """
    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_path=verbose,
        markup=False,
        log_time_format="[%X]"
    )
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[handler],
        force=True
    )
    # httpx logs every request at INFO; only show it when asked to
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def print_status_event(event: object) -> None:
    """Render success, failure and authentication events."""
    if isinstance(event, OperationSucceeded):
        console.print(f"[green]✓[/green] {event.message}")
    elif isinstance(event, OperationFailed):
        console.print(f"[red]✗ {event.context} failed:[/red] {event.error}")
    elif isinstance(event, AuthenticationRequired):
        console.print(f"[red]Authentication required:[/red] {event.message}")
        console.print("[yellow]Check JIRA_USERNAME and JIRA_API_TOKEN in your .env file.[/yellow]")
