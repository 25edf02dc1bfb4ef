"""
Hypermedia navigation over the broker's HAL documents.

Navigation is a chain of steps, each naming a relation and the variables its
template needs. Every step is a transition ``(context, step) -> context``:
look the relation up in the current document, expand it, GET it, and make the
response the new current document. HTTP goes through an injected transport so
the traversal itself can be exercised without a live broker.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Protocol, Union

import structlog

from pactbroker.core.errors import (
    DocumentNotFound,
    PactBrokerError,
    PermanentHTTPError,
    TemplateVariableError,
)
from pactbroker.core.result import OperationResult
from pactbroker.hal.links import LINKS_KEY, LinkDescriptor, LinkRegistry, as_map
from pactbroker.hal.uri import expand_template

logger = structlog.get_logger()

ROOT_PATH = "/"


class Transport(Protocol):
    """HTTP capability the navigator needs; see BrokerHTTPClient."""

    def get(self, url: str) -> dict[str, Any]:
        ...

    def post(self, url: str, content: str | None = None) -> Any:
        ...

    def put(self, url: str, content: str | None = None) -> Any:
        ...


@dataclass(frozen=True)
class NavigationStep:
    """One hop: follow ``relation`` after substituting ``variables``."""

    relation: str
    variables: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def of(cls, step: StepLike) -> NavigationStep:
        if isinstance(step, NavigationStep):
            return step
        if isinstance(step, str):
            return cls(step)
        variables, relation = step
        return cls(relation, dict(variables or {}))


StepLike = Union[NavigationStep, str, "tuple[Mapping[str, Any], str]"]


@dataclass(frozen=True)
class NavigationContext:
    """The current HAL document of a navigation chain."""

    document: dict[str, Any]
    base_url: str = ""

    @property
    def registry(self) -> LinkRegistry:
        return LinkRegistry.from_document(self.document)

    @property
    def links(self) -> dict[str, Any]:
        return as_map(self.document.get(LINKS_KEY))

    def resolve(self, step: NavigationStep) -> str:
        """Expanded href for ``step``; nothing is fetched.

        Raises RelationNotFound if the relation is absent and
        TemplateVariableError if the template needs a variable the step lacks.
        """
        descriptor = self.registry.relation(step.relation)
        if not descriptor.templated:
            return descriptor.href
        missing = [name for name in descriptor.variables if name not in step.variables]
        if missing:
            raise TemplateVariableError(step.relation, missing)
        return expand_template(descriptor.href, step.variables)

    def link_url(self, relation: str) -> str | None:
        """Href of a single-link ``relation`` as found in the document.

        None when the relation is absent or holds an array of links.
        """
        value = self.links.get(relation)
        if not isinstance(value, Mapping):
            return None
        return LinkDescriptor.from_dict(value).href

    def for_all(self, relation: str, visitor: Callable[[dict[str, Any]], None]) -> None:
        """Call ``visitor`` with each entry of a collection relation.

        Entries come from ``_links``; a plain array stored under the same key
        in the document body is accepted as well.
        """
        registry = self.registry
        if relation in registry:
            entries: Iterable[Any] = registry.entries(relation)
        else:
            value = self.document.get(relation)
            entries = value if isinstance(value, list) else []
        for entry in entries:
            if isinstance(entry, Mapping):
                visitor(dict(entry))


def advance(
    context: NavigationContext,
    step: NavigationStep,
    fetch: Callable[[str], dict[str, Any]],
) -> NavigationContext:
    """Follow one step from ``context`` using ``fetch`` for the GET."""
    href = context.resolve(step)
    logger.debug("hal_navigate", relation=step.relation, href=href)
    return NavigationContext(document=fetch(href), base_url=context.base_url)


class HalNavigator:
    """Walks the broker's HAL graph through an injected transport."""

    def __init__(self, transport: Transport, base_url: str) -> None:
        self._transport = transport
        self._base_url = base_url.rstrip("/")

    @property
    def base_url(self) -> str:
        return self._base_url

    def fetch(self, path: str) -> dict[str, Any]:
        """GET a HAL document. A 404 means the broker has no such resource."""
        try:
            document = self._transport.get(path)
        except PermanentHTTPError as exc:
            if exc.status_code == 404:
                raise DocumentNotFound(path) from exc
            raise
        return document if isinstance(document, dict) else {}

    def root(self) -> NavigationContext:
        return NavigationContext(document=self.fetch(ROOT_PATH), base_url=self._base_url)

    def with_doc_context(self, links: Mapping[str, Any]) -> NavigationContext:
        """Start from a link map captured earlier (e.g. a fetched pact's ``_links``)."""
        return NavigationContext(document={LINKS_KEY: dict(links)}, base_url=self._base_url)

    def navigate(self, *steps: StepLike, start: NavigationContext | None = None) -> NavigationContext:
        """Follow ``steps`` in order, starting from the broker root by default."""
        context = start if start is not None else self.root()
        for step in steps:
            context = advance(context, NavigationStep.of(step), self.fetch)
        return context

    def post_json(self, url: str, body: Any) -> OperationResult:
        return self._send("POST", url, body)

    def put_json(
        self,
        context: NavigationContext,
        relation: str,
        variables: Mapping[str, Any],
        body: Any = None,
    ) -> OperationResult:
        """PUT to a relation of ``context``.

        RelationNotFound and TemplateVariableError propagate; only the HTTP
        exchange is folded into the result.
        """
        href = context.resolve(NavigationStep(relation, variables))
        return self._send("PUT", href, body if body is not None else {})

    def upload_json(self, path: str, body: Any = None) -> OperationResult:
        """PUT to a conventional broker path (no link discovery)."""
        return self._send("PUT", path, body)

    def _send(self, method: str, url: str, body: Any) -> OperationResult:
        content = body if body is None or isinstance(body, str) else json.dumps(body)
        sender = self._transport.post if method == "POST" else self._transport.put
        try:
            response = sender(url, content)
        except PactBrokerError as exc:
            logger.error("hal_request_failed", method=method, url=url, error=str(exc))
            return OperationResult.failure(exc)
        return OperationResult.ok(response)
