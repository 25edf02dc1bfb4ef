"""
Error taxonomy for the pact broker client.

- TransportError: HTTP or network failures, not interpreted further
- NotFoundHalResponse: the broker does not know the requested entity
  (missing relation or a 404 document); recoverable during discovery
- TemplateVariableError: a templated link was requested without the
  variables it declares; always fatal
- MissingPublishLinkError: verification results cannot be attributed to a pact
"""

from __future__ import annotations

from typing import Any, Iterable


class PactBrokerError(Exception):
    """Base exception for pact broker client errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(PactBrokerError):
    """Raised for configuration-related errors."""


class TransportError(PactBrokerError):
    """Raised when the broker cannot be reached or answers with an error."""


class RetryableHTTPError(TransportError):
    """HTTP errors that should be retried."""


class PermanentHTTPError(TransportError):
    """HTTP errors that should not be retried."""

    def __init__(self, message: str, *, status_code: int, body: str = "", url: str = "") -> None:
        super().__init__(message, {"status": status_code, "url": url})
        self.status_code = status_code
        self.body = body
        self.url = url


class NotFoundHalResponse(PactBrokerError):
    """Raised when a HAL resource the caller navigates to does not exist."""


class RelationNotFound(NotFoundHalResponse):
    """Raised when a relation is absent from the current HAL document."""

    def __init__(self, relation: str, available: Iterable[str] = ()):
        available = sorted(available)
        super().__init__(
            f"Link '{relation}' was not found in the HAL document",
            {"relation": relation, "available": available},
        )
        self.relation = relation
        self.available = available


class DocumentNotFound(NotFoundHalResponse):
    """Raised when a navigation GET is answered with 404."""

    def __init__(self, path: str):
        super().__init__(f"No HAL document found at path '{path}'", {"path": path})
        self.path = path


class TemplateVariableError(PactBrokerError):
    """Raised when a templated link is expanded without all of its variables."""

    def __init__(self, relation: str, missing: Iterable[str]):
        missing = sorted(missing)
        super().__init__(
            f"Link '{relation}' requires template variables {', '.join(missing)}",
            {"relation": relation, "missing": missing},
        )
        self.relation = relation
        self.missing = missing


class MissingPublishLinkError(PactBrokerError):
    """Raised when a pact has no link to publish verification results to."""

    def __init__(self) -> None:
        super().__init__(
            "Unable to publish verification results as there is no "
            "pb:publish-verification-results link"
        )


def format_error_message(error: PactBrokerError) -> str:
    """Format an error message for display to users."""
    msg = error.message
    if error.details:
        detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
        msg = f"{msg} ({detail_str})"
    return msg
