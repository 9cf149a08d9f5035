"""Jira transport: authenticated async requests with outcome classification."""

import base64
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from ..exceptions import JiraAuthenticationError, JiraRequestError, JiraResponseError
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

PLATFORM_API = 'platform'
AGILE_API = 'agile'

AUTH_STATUS_CODES = (401, 403)

# Jira reports rejected logins in this header, sometimes alongside a 200
SERAPH_LOGIN_REASON = 'X-Seraph-LoginReason'
SERAPH_DENIED_REASONS = ('AUTHENTICATED_FAILED', 'AUTHENTICATION_DENIED')


def encode_segment(value: Any) -> str:
    """Percent-encode a value for use as a single URL path segment."""
    return quote(str(value), safe='')


def extract_jira_error_payload(response: httpx.Response) -> Dict[str, Any]:
    """Extract error payload from JIRA REST API response.

    JIRA REST API returns errors in the following format:
    {
        "errorMessages": ["Error message 1", "Error message 2"],
        "errors": {
            "field1": "Field-specific error"
        }
    }

    Args:
        response: httpx.Response object with error status

    Returns:
        Dictionary with error information:
        - raw: Raw JSON payload (or {'text': ...} for non-JSON bodies)
        - errorMessages: List of error messages
        - errors: Dictionary of field-specific errors
        - formatted: One-line summary suitable for an error event
    """
    result = {
        'raw': None,
        'errorMessages': [],
        'errors': {},
        'formatted': ''
    }

    try:
        error_data = response.json()
    except ValueError:
        text = response.text.strip()
        result['raw'] = {'text': text}
        result['formatted'] = text[:200]
        return result

    result['raw'] = error_data
    if not isinstance(error_data, dict):
        return result

    messages = error_data.get('errorMessages') or []
    errors = error_data.get('errors') or {}
    result['errorMessages'] = [str(m) for m in messages] if isinstance(messages, list) else []
    result['errors'] = errors if isinstance(errors, dict) else {}

    parts = list(result['errorMessages'])
    parts.extend(f"{field}: {error}" for field, error in result['errors'].items())
    result['formatted'] = '; '.join(parts)
    return result


def read_json(response: httpx.Response, expected: type) -> Any:
    """Decode a response body and check its top-level JSON type.

    Raises:
        JiraResponseError: body is not JSON or not of the expected type
    """
    try:
        data = response.json()
    except ValueError as e:
        raise JiraResponseError(f"Malformed JSON response: {e}", status_code=response.status_code) from e

    if not isinstance(data, expected):
        kind = 'array' if expected is list else 'object'
        raise JiraResponseError(f"Unexpected JSON (expected {kind})", status_code=response.status_code)
    return data


class JiraAuth:
    """Jira transport gateway built on an async httpx client."""

    def __init__(self, settings: Optional[Settings] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """Initialize Jira transport.

        Args:
            settings: Application settings (defaults to loading from env)
            transport: Optional httpx transport, used by tests to fake Jira
        """
        self.settings = settings or get_settings()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def auth_header(self) -> str:
        """Basic credential header value for ``username:apiToken``."""
        user_pass = f"{self.settings.username}:{self.settings.api_token}".encode('utf-8')
        return "Basic " + base64.b64encode(user_pass).decode('ascii')

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the async client with authentication headers."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={
                    'Authorization': self.auth_header(),
                    'Content-Type': 'application/json',
                    'Accept': 'application/json'
                },
                verify=self.settings.verify_ssl,
                timeout=self.settings.timeout,
                transport=self._transport
            )
        return self._client

    def base_url(self, api: str = PLATFORM_API) -> str:
        """Base URL of the given REST family."""
        if api == AGILE_API:
            return self.settings.agile_url
        return self.settings.platform_url

    @staticmethod
    def is_auth_failure(response: httpx.Response) -> bool:
        """True when the response means the credentials were not accepted."""
        if response.status_code in AUTH_STATUS_CODES:
            return True
        reason = response.headers.get(SERAPH_LOGIN_REASON, '')
        return any(token.strip().upper() in SERAPH_DENIED_REASONS for token in reason.split(','))

    async def request(self, method: str, path: str, *, api: str = PLATFORM_API,
                      params: Optional[Dict[str, Any]] = None,
                      json: Any = None) -> httpx.Response:
        """Execute one request against Jira and classify the outcome.

        Args:
            method: HTTP method (GET, POST, PUT)
            path: Path below the API base, already percent-encoded
            api: PLATFORM_API or AGILE_API
            params: Query parameters
            json: JSON body for POST/PUT

        Returns:
            The 2xx httpx.Response

        Raises:
            JiraAuthenticationError: 401/403 or a rejected login
            JiraRequestError: network error or any other non-2xx status
        """
        if not self.settings.is_configured:
            raise JiraAuthenticationError(
                "Missing Jira credentials. "
                "Please set JIRA_INSTANCE_URL, JIRA_USERNAME and JIRA_API_TOKEN"
            )

        url = f"{self.base_url(api)}{path}"
        logger.debug("%s %s params=%s", method, url, params)
        try:
            if json is None:
                response = await self.client.request(method, url, params=params)
            else:
                response = await self.client.request(method, url, params=params, json=json)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise JiraRequestError(str(e) or e.__class__.__name__) from e

        if self.is_auth_failure(response):
            payload = extract_jira_error_payload(response)
            detail = payload['formatted'] or response.reason_phrase
            raise JiraAuthenticationError(
                f"{response.status_code} {detail}".strip(), status_code=response.status_code
            )

        if not response.is_success:
            payload = extract_jira_error_payload(response)
            message = f"{response.status_code} {response.reason_phrase}"
            if payload['formatted']:
                message = f"{message}: {payload['formatted']}"
            raise JiraRequestError(message, status_code=response.status_code)

        return response

    async def test_connection(self) -> Dict[str, Any]:
        """Fetch the authenticated user to verify the credentials.

        Returns:
            The ``/myself`` payload (displayName, accountId, emailAddress, ...)
        """
        response = await self.request('GET', '/myself')
        return read_json(response, dict)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
