"""
Broker client configuration.

Pydantic-based settings read from PACT_BROKER_* environment variables
or a .env file.
"""

from pactbroker.config.settings import DEFAULT_USER_AGENT, BrokerSettings, get_settings

__all__ = [
    "BrokerSettings",
    "DEFAULT_USER_AGENT",
    "get_settings",
]
