"""
URI helpers for HAL links.

Broker hrefs reach the client in two shapes: already percent-encoded path
segments (``/pacts/provider/foo%20bar``) and hrefs whose encoded segments were
encoded a second time by a proxy or older broker (``foo%2520bar``). The client
decodes exactly once with :func:`decode_href` everywhere.
"""

from __future__ import annotations

import re
from typing import Mapping
from urllib.parse import quote, unquote

TEMPLATE_VARIABLE = re.compile(r"\{([^{}]+)\}")

# RFC 3986 pchar minus the unreserved characters quote() never escapes
PATH_SEGMENT_SAFE = "!$&'()*+,;=:@"


def escape_path_segment(value: str) -> str:
    """Escape a value for use as a single URL path segment."""
    return quote(value, safe=PATH_SEGMENT_SAFE)


def decode_href(href: str) -> str:
    """Percent-decode an href once.

    ``+`` is left alone: broker hrefs are paths, not form-encoded data.
    """
    return unquote(href)


def template_variables(href: str) -> list[str]:
    """Names of the ``{variable}`` placeholders in a templated href, in order."""
    seen: list[str] = []
    for name in TEMPLATE_VARIABLE.findall(href):
        if name not in seen:
            seen.append(name)
    return seen


def expand_template(href: str, variables: Mapping[str, object]) -> str:
    """Substitute every placeholder with its escaped value.

    Raises KeyError naming the first variable missing from ``variables``.
    """

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        return escape_path_segment(str(variables[name]))

    return TEMPLATE_VARIABLE.sub(_replace, href)


def join_url(base_url: str, path: str) -> str:
    """Resolve ``path`` against the broker base URL; absolute URLs pass through."""
    if path.startswith(("http://", "https://")):
        return path
    if not path.startswith("/"):
        path = f"/{path}"
    return f"{base_url.rstrip('/')}{path}"
