"""
Broker client settings using Pydantic.

Provides environment-based configuration loading with PACT_BROKER_ prefix.
"""

from functools import lru_cache
from typing import Any

from pydantic_settings import BaseSettings

DEFAULT_USER_AGENT = "pactbroker-client/0.1.0"


class BrokerSettings(BaseSettings):
    """Broker connection settings."""

    # Broker
    url: str | None = None

    # Authentication (token wins over basic auth)
    username: str | None = None
    password: str | None = None
    token: str | None = None

    # HTTP client settings
    timeout: float = 30.0
    max_retries: int = 3
    backoff_factor: float = 2.0
    user_agent: str = DEFAULT_USER_AGENT

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "PACT_BROKER_"

    def authentication(self) -> list[str] | None:
        """Render credentials as the client's authentication option."""
        if self.token:
            return ["bearer", self.token]
        if self.username and self.password:
            return ["basic", self.username, self.password]
        return None

    def client_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {
            "timeout": self.timeout,
            "max_retries": self.max_retries,
            "backoff_factor": self.backoff_factor,
            "user_agent": self.user_agent,
        }
        auth = self.authentication()
        if auth:
            options["authentication"] = auth
        return options


@lru_cache
def get_settings() -> BrokerSettings:
    """Get cached settings instance."""
    return BrokerSettings()
