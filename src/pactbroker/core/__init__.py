"""Core modules - error taxonomy and operation results."""

from pactbroker.core.errors import (
    ConfigurationError,
    DocumentNotFound,
    MissingPublishLinkError,
    NotFoundHalResponse,
    PactBrokerError,
    PermanentHTTPError,
    RelationNotFound,
    RetryableHTTPError,
    TemplateVariableError,
    TransportError,
    format_error_message,
)
from pactbroker.core.result import OperationResult

__all__ = [
    # Errors
    "PactBrokerError",
    "ConfigurationError",
    "TransportError",
    "RetryableHTTPError",
    "PermanentHTTPError",
    "NotFoundHalResponse",
    "RelationNotFound",
    "DocumentNotFound",
    "TemplateVariableError",
    "MissingPublishLinkError",
    "format_error_message",
    # Results
    "OperationResult",
]
