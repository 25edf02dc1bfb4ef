"""
HAL link parsing.

A HAL document carries a ``_links`` object mapping relation names to a link
descriptor, or in some broker responses to an array of descriptors. Parsing is
lenient: hrefs stay opaque strings until a template is expanded.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Mapping

from pactbroker.core.errors import RelationNotFound
from pactbroker.hal.uri import template_variables

LINKS_KEY = "_links"


@dataclass(frozen=True)
class LinkDescriptor:
    """A single HAL link."""

    href: str
    templated: bool = False
    name: str | None = None
    title: str | None = None

    @property
    def variables(self) -> list[str]:
        """Variables declared by a templated href (empty for plain links)."""
        return template_variables(self.href) if self.templated else []

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LinkDescriptor:
        return cls(
            href=str(data.get("href", "")),
            templated=bool(data.get("templated", False)),
            name=data.get("name"),
            title=data.get("title"),
        )


def as_map(links: Any) -> dict[str, Any]:
    """Copy a raw ``_links`` value into a plain dict (non-mappings give ``{}``)."""
    if isinstance(links, Mapping):
        return dict(links)
    return {}


class LinkRegistry:
    """Named relations of one HAL document."""

    def __init__(self, links: Mapping[str, Any] | None = None) -> None:
        self._links: dict[str, Any] = as_map(links)

    @classmethod
    def from_document(cls, document: Mapping[str, Any] | None) -> LinkRegistry:
        return cls((document or {}).get(LINKS_KEY))

    def __contains__(self, name: object) -> bool:
        return name in self._links

    def __len__(self) -> int:
        return len(self._links)

    def names(self) -> list[str]:
        return list(self._links)

    def raw(self) -> dict[str, Any]:
        return dict(self._links)

    def find(self, name: str) -> LinkDescriptor | None:
        """Descriptor for ``name``; for an array value the first entry wins."""
        value = self._links.get(name)
        if isinstance(value, list):
            value = next((v for v in value if isinstance(v, Mapping)), None)
        if not isinstance(value, Mapping):
            return None
        return LinkDescriptor.from_dict(value)

    def relation(self, name: str) -> LinkDescriptor:
        descriptor = self.find(name)
        if descriptor is None:
            raise RelationNotFound(name, self._links)
        return descriptor

    def entries(self, name: str) -> Iterator[dict[str, Any]]:
        """Yield every raw entry of a relation, whether single or an array."""
        value = self._links.get(name)
        if value is None:
            return
        items = value if isinstance(value, list) else [value]
        for item in items:
            if isinstance(item, Mapping):
                yield dict(item)
