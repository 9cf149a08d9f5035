"""Exceptions raised by the Jira transport layer."""

from typing import Optional


class JiraError(Exception):
    """Base class for every failure talking to Jira."""


class JiraAuthenticationError(JiraError):
    """Credentials were rejected or lack permission (HTTP 401/403)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class JiraRequestError(JiraError):
    """Network error, non-2xx response, or any other generic failure."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class JiraResponseError(JiraRequestError):
    """Response body is not the JSON structure the operation expected."""
