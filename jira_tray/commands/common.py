"""Shared plumbing for CLI commands."""

import asyncio
from typing import Awaitable, Callable, TypeVar

import click
from rich.panel import Panel

from ..config.settings import get_settings
from ..services.events import AuthenticationRequired, OperationFailed
from ..services.jira_service import JiraService
from ..utils.display import console, print_status_event

T = TypeVar('T')


def run_service(operation: Callable[[JiraService], Awaitable[T]]) -> T:
    """Run one async operation against a fresh JiraService.

    Status events are printed as they arrive. Aborts the command when the
    settings are incomplete or any failure event was published.
    """
    settings = get_settings()
    if not settings.is_configured:
        console.print(Panel(
            "[red]Error:[/red] Jira is not configured.\n\n"
            "Set JIRA_INSTANCE_URL, JIRA_USERNAME and JIRA_API_TOKEN in your .env file.\n\n"
            "Get your API token from:\n"
            "https://id.atlassian.com/manage-profile/security/api-tokens",
            title="Configuration",
            border_style="red"
        ))
        raise click.Abort()

    failures = []

    def on_event(event: object) -> None:
        if isinstance(event, (OperationFailed, AuthenticationRequired)):
            failures.append(event)
        print_status_event(event)

    async def main() -> T:
        service = JiraService(settings)
        service.events.subscribe(on_event)
        try:
            return await operation(service)
        finally:
            await service.aclose()

    result = asyncio.run(main())
    if failures:
        raise click.Abort()
    return result
