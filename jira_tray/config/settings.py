"""Application settings management using Pydantic Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Jira connection settings loaded from environment variables."""

    instance_url: str = ''
    username: str = ''
    api_token: str = ''
    verify_ssl: bool = True
    timeout: float = 30.0  # seconds per request

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="JIRA_",
        extra="ignore"
    )

    @property
    def jira_url(self) -> str:
        """Get Jira instance URL without trailing slash."""
        return self.instance_url.strip().rstrip('/')

    @property
    def platform_url(self) -> str:
        """Base URL of the platform REST API (v3)."""
        return f"{self.jira_url}/rest/api/3"

    @property
    def agile_url(self) -> str:
        """Base URL of the Jira Software (agile) REST API."""
        return f"{self.jira_url}/rest/agile/1.0"

    @property
    def is_configured(self) -> bool:
        """True when URL, username and API token are all present."""
        return bool(self.instance_url.strip() and self.username.strip() and self.api_token)

    def browse_url(self, issue_key: str) -> str:
        """URL of the issue page in the Jira web UI."""
        return f"{self.jira_url}/browse/{issue_key}"


def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()
