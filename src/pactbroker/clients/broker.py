"""
Pact broker client.

Composes HAL navigation, the HTTP transport and the verification payload
builder into the broker operations used by consumers and providers:

- discover the consumers with pacts for a provider (latest, by tag, untagged)
- fetch a pact and the links that come with it
- upload a consumer pact, tagging the consumer version first
- publish verification results and tag the provider version

Discovery treats a missing relation or 404 document as "the broker does not
know this provider" and returns an empty result. Mutating operations return an
OperationResult.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Mapping

from pactbroker.clients.base import BrokerHTTPClient
from pactbroker.clients.models import PactBrokerConsumer, PactResponse
from pactbroker.config.settings import DEFAULT_USER_AGENT, BrokerSettings, get_settings
from pactbroker.core.errors import (
    ConfigurationError,
    MissingPublishLinkError,
    NotFoundHalResponse,
    PactBrokerError,
    TransportError,
)
from pactbroker.core.result import OperationResult
from pactbroker.hal.links import LINKS_KEY, as_map
from pactbroker.hal.navigator import HalNavigator, NavigationContext, NavigationStep, Transport
from pactbroker.hal.uri import decode_href, escape_path_segment
from pactbroker.logging import bind_context
from pactbroker.verification.models import VerificationOutcome
from pactbroker.verification.payload import build_payload

LATEST_PROVIDER_PACTS_WITH_NO_TAG = "pb:latest-untagged-pact-version"
LATEST_PROVIDER_PACTS = "pb:latest-provider-pacts"
LATEST_PROVIDER_PACTS_WITH_TAG = "pb:latest-provider-pacts-with-tag"
PROVIDER = "pb:provider"
PROVIDER_TAG_VERSION = "pb:version-tag"
PACTS = "pb:pacts"
PROVIDER_PACTS_FOR_VERIFICATION = "pb:provider-pacts-for-verification"
PUBLISH_VERIFICATION_RESULTS = "pb:publish-verification-results"
SELF = "self"

UPLOAD_PATH = "/pacts/provider/{provider}/consumer/{consumer}/version/{version}"
TAG_PATH = "/pacticipants/{consumer}/versions/{version}/tags/{tag}"


class PactBrokerClient:
    """Client for the pact broker service."""

    def __init__(
        self,
        pact_broker_url: str,
        options: Mapping[str, Any] | None = None,
        *,
        transport: Transport | None = None,
    ) -> None:
        if not pact_broker_url:
            raise ConfigurationError("A pact broker URL is required")
        self.pact_broker_url = pact_broker_url.rstrip("/")
        self.options: dict[str, Any] = dict(options or {})
        self._transport = transport
        self._log = bind_context(broker_url=self.pact_broker_url)

    @classmethod
    def from_settings(cls, settings: BrokerSettings | None = None) -> PactBrokerClient:
        settings = settings or get_settings()
        if not settings.url:
            raise ConfigurationError("PACT_BROKER_URL is not set")
        return cls(settings.url, settings.client_options())

    @property
    def authentication(self) -> list[str]:
        return list(self.options.get("authentication") or [])

    def new_transport(self) -> Transport:
        return BrokerHTTPClient(
            self.pact_broker_url,
            authentication=self.options.get("authentication"),
            timeout=self.options.get("timeout", 30.0),
            max_retries=self.options.get("max_retries", 3),
            backoff_factor=self.options.get("backoff_factor", 2.0),
            headers=self.options.get("headers"),
            user_agent=self.options.get("user_agent", DEFAULT_USER_AGENT),
        )

    @property
    def transport(self) -> Transport:
        """Transport shared by every operation of this client.

        Built on first use so retry and circuit breaker state span calls.
        """
        if self._transport is None:
            self._transport = self.new_transport()
        return self._transport

    def new_navigator(self) -> HalNavigator:
        return HalNavigator(self.transport, self.pact_broker_url)

    # Discovery

    def fetch_consumers(self, provider: str) -> list[PactBrokerConsumer]:
        """Fetches all consumers for the given provider."""
        return self._discover_consumers(
            NavigationStep(LATEST_PROVIDER_PACTS, {"provider": provider}),
            provider=provider,
        )

    def fetch_consumers_with_tag(self, provider: str, tag: str) -> list[PactBrokerConsumer]:
        """Fetches all consumers for the given provider and tag."""
        return self._discover_consumers(
            NavigationStep(LATEST_PROVIDER_PACTS_WITH_TAG, {"provider": provider, "tag": tag}),
            provider=provider,
            tag=tag,
        )

    def fetch_latest_consumers_with_no_tag(self, provider: str) -> list[PactBrokerConsumer]:
        """Fetches the consumers of the provider that have no associated tag."""
        return self._discover_consumers(
            NavigationStep(LATEST_PROVIDER_PACTS_WITH_NO_TAG, {"provider": provider}),
            provider=provider,
        )

    def _discover_consumers(
        self,
        step: NavigationStep,
        *,
        provider: str,
        tag: str | None = None,
    ) -> list[PactBrokerConsumer]:
        consumers: list[PactBrokerConsumer] = []

        def _collect(pact: dict[str, Any]) -> None:
            consumers.append(
                PactBrokerConsumer(
                    name=str(pact.get("name")),
                    pact_url=decode_href(str(pact.get("href"))),
                    broker_url=self.pact_broker_url,
                    authentication=self.authentication,
                    tag=tag,
                )
            )

        try:
            self.new_navigator().navigate(step).for_all(PACTS, _collect)
        except NotFoundHalResponse as exc:
            # The provider is not defined in the broker
            self._log.info(
                "provider_not_found",
                provider=provider,
                tag=tag,
                relation=step.relation,
                error=exc.message,
            )
            return []
        return consumers

    def get_url_for_provider(self, provider_name: str, tag: str = "") -> str | None:
        """Href of the provider's pacts collection, without fetching it."""
        if not tag or tag == "latest":
            step = NavigationStep(LATEST_PROVIDER_PACTS, {"provider": provider_name})
        else:
            step = NavigationStep(
                LATEST_PROVIDER_PACTS_WITH_TAG, {"provider": provider_name, "tag": tag}
            )
        try:
            context = self.new_navigator().navigate(step)
        except NotFoundHalResponse as exc:
            self._log.info("provider_not_found", provider=provider_name, tag=tag, error=exc.message)
            return None
        if PACTS not in context.registry:
            return None
        # an array of pacts means the current document is the collection
        return context.link_url(PACTS) or context.link_url(SELF)

    def fetch_pact(self, url: str) -> PactResponse:
        document = self.new_navigator().fetch(url)
        return PactResponse(document, as_map(document.get(LINKS_KEY)))

    # Publishing

    def upload_pact_file(
        self,
        pact_file: str | Path,
        unescaped_version: str,
        tags: Iterable[str] = (),
    ) -> OperationResult:
        """Uploads the given pact file to the broker, and optionally applies any tags."""
        try:
            pact_text = Path(pact_file).read_text(encoding="utf-8")
            pact = json.loads(pact_text)
            provider_name = escape_path_segment(pact["provider"]["name"])
            consumer_name = escape_path_segment(pact["consumer"]["name"])
        except OSError as exc:
            return self._invalid_pact(pact_file, f"Unable to read pact file {pact_file}: {exc}")
        except ValueError as exc:
            return self._invalid_pact(pact_file, f"Pact file {pact_file} is not valid JSON: {exc}")
        except (KeyError, TypeError):
            return self._invalid_pact(
                pact_file, f"Pact file {pact_file} has no provider or consumer name"
            )
        version = escape_path_segment(unescaped_version)

        navigator = self.new_navigator()
        tags = list(tags)
        if tags:
            self.upload_tags(navigator, consumer_name, version, tags)

        upload_path = UPLOAD_PATH.format(
            provider=provider_name, consumer=consumer_name, version=version
        )
        result = navigator.upload_json(upload_path, pact_text)
        if result:
            response = result.value
            return OperationResult.ok(f"{response.status_code} {response.reason_phrase}")
        return OperationResult.failure(
            TransportError(f"FAILED! {result.error_message}", {"path": upload_path})
        )

    def _invalid_pact(self, pact_file: str | Path, message: str) -> OperationResult:
        error = PactBrokerError(message, {"file": str(pact_file)})
        self._log.error("pact_file_invalid", file=str(pact_file), error=message)
        return OperationResult.failure(error)

    @staticmethod
    def upload_tags(
        navigator: HalNavigator,
        consumer_name: str,
        version: str,
        tags: Iterable[str],
    ) -> None:
        """Tag a consumer version. Name and version must already be escaped."""
        for tag in tags:
            path = TAG_PATH.format(
                consumer=consumer_name, version=version, tag=escape_path_segment(tag)
            )
            result = navigator.upload_json(path, {})
            if not result:
                bind_context(consumer=consumer_name, version=version).warning(
                    "consumer_tag_failed", tag=tag, error=result.error_message
                )

    def build_payload(
        self,
        result: VerificationOutcome,
        version: str,
        build_url: str | None = None,
    ) -> dict[str, Any]:
        return build_payload(result, version, build_url)

    def publish_verification_results(
        self,
        doc_attributes: Mapping[str, Any],
        result: VerificationOutcome,
        version: str,
        build_url: str | None = None,
    ) -> OperationResult:
        """Publishes the result to the "pb:publish-verification-results" link in the document attributes."""
        links = {str(k).lower(): v for k, v in doc_attributes.items()}
        publish_link = links.get(PUBLISH_VERIFICATION_RESULTS)
        href = None
        if isinstance(publish_link, Mapping):
            href = {str(k).lower(): v for k, v in publish_link.items()}.get("href")
        if href is None:
            error = MissingPublishLinkError()
            self._log.error("verification_results_not_published", version=version, error=error.message)
            return OperationResult.failure(error)

        payload = build_payload(result, version, build_url)
        outcome = self.new_navigator().post_json(str(href), payload)
        if not outcome:
            return outcome
        self._log.debug("verification_results_published", href=str(href), success=payload["success"])
        return OperationResult.ok(True)

    def publish_provider_tag(
        self,
        doc_attributes: Mapping[str, Any],
        name: str,
        tag: str,
        version: str,
    ) -> None:
        """Tag the provider version; failures are logged, never raised."""
        log = self._log.bind(provider=name, tag=tag, version=version)
        navigator = self.new_navigator()
        try:
            context: NavigationContext = navigator.navigate(
                PROVIDER, start=navigator.with_doc_context(doc_attributes)
            )
            result = navigator.put_json(
                context, PROVIDER_TAG_VERSION, {"version": version, "tag": tag}, {}
            )
        except NotFoundHalResponse as exc:
            log.error("provider_tag_link_missing", error=exc.message)
            return
        except TransportError as exc:
            log.error("provider_tag_failed", error=exc.message)
            return

        if result:
            log.debug("provider_tag_pushed")
        else:
            log.error("provider_tag_failed", error=result.error_message)
