from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class PactBrokerConsumer:
    """A consumer with a pact for the queried provider."""

    name: str
    pact_url: str  # percent-decoded href of the pact
    broker_url: str
    authentication: list[str] = field(default_factory=list)
    tag: str | None = None


@dataclass(frozen=True)
class PactResponse:
    """A pact document together with its decoded ``_links``."""

    pact_file: dict[str, Any]
    links: dict[str, Any]

    @property
    def publish_link(self) -> Any:
        return self.links.get("pb:publish-verification-results")
