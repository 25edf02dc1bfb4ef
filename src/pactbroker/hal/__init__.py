"""
HAL (Hypertext Application Language) support for the broker client.

- links: parse ``_links`` into named relation descriptors
- uri: template expansion, path-segment escaping and href decoding
- navigator: follow chains of named relations through a transport
"""

from pactbroker.hal.links import LINKS_KEY, LinkDescriptor, LinkRegistry, as_map
from pactbroker.hal.navigator import (
    HalNavigator,
    NavigationContext,
    NavigationStep,
    Transport,
    advance,
)
from pactbroker.hal.uri import decode_href, escape_path_segment, expand_template

__all__ = [
    "LINKS_KEY",
    "LinkDescriptor",
    "LinkRegistry",
    "as_map",
    "HalNavigator",
    "NavigationContext",
    "NavigationStep",
    "Transport",
    "advance",
    "decode_href",
    "escape_path_segment",
    "expand_template",
]
