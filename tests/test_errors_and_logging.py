"""Tests for the error taxonomy, operation results and logging helpers."""

import logging

import pytest
import structlog
from pactbroker.core.errors import (
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
from pactbroker.logging import bind_context, configure_logging


class TestErrors:
    def test_not_found_family(self):
        assert issubclass(RelationNotFound, NotFoundHalResponse)
        assert issubclass(DocumentNotFound, NotFoundHalResponse)
        assert not issubclass(TemplateVariableError, NotFoundHalResponse)
        assert not issubclass(TransportError, NotFoundHalResponse)

    def test_transport_family(self):
        assert issubclass(RetryableHTTPError, TransportError)
        assert issubclass(PermanentHTTPError, TransportError)
        assert issubclass(TransportError, PactBrokerError)

    def test_relation_not_found_lists_available(self):
        error = RelationNotFound("pb:pacts", {"self": {}, "curies": []})
        assert error.relation == "pb:pacts"
        assert error.available == ["curies", "self"]
        assert "pb:pacts" in error.message

    def test_template_variable_error(self):
        error = TemplateVariableError("pb:latest-provider-pacts-with-tag", ["tag", "provider"])
        assert error.missing == ["provider", "tag"]
        assert "provider, tag" in str(error)

    def test_permanent_error_details(self):
        error = PermanentHTTPError("HTTP 404", status_code=404, url="https://b/x")
        assert error.status_code == 404
        assert error.details == {"status": 404, "url": "https://b/x"}

    def test_missing_publish_link_message(self):
        assert MissingPublishLinkError().message == (
            "Unable to publish verification results as there is no "
            "pb:publish-verification-results link"
        )

    def test_format_error_message(self):
        assert format_error_message(PactBrokerError("boom")) == "boom"
        assert format_error_message(DocumentNotFound("/x")) == (
            "No HAL document found at path '/x' (path=/x)"
        )


class TestOperationResult:
    def test_ok(self):
        result = OperationResult.ok("201 Created")
        assert result
        assert result.value == "201 Created"
        assert result.error_message is None

    def test_ok_default_value(self):
        assert OperationResult.ok().value is True

    def test_failure(self):
        error = TransportError("FAILED! HTTP 500")
        result = OperationResult.failure(error)
        assert not result
        assert result.error is error
        assert result.error_message == "FAILED! HTTP 500"


@pytest.fixture
def restore_structlog():
    saved = structlog.get_config()
    yield
    structlog.configure(**saved)


class TestLogging:
    def test_configure_json(self, restore_structlog):
        configure_logging(logging.DEBUG)
        assert isinstance(structlog.get_config()["processors"][-1], structlog.processors.JSONRenderer)

    def test_configure_console(self, restore_structlog):
        configure_logging(json_output=False)
        assert isinstance(structlog.get_config()["processors"][-1], structlog.dev.ConsoleRenderer)

    def test_bind_context(self):
        with structlog.testing.capture_logs() as logs:
            bind_context(broker_url="https://b", provider="p").warning("provider_not_found")

        assert logs == [
            {
                "broker_url": "https://b",
                "provider": "p",
                "event": "provider_not_found",
                "log_level": "warning",
            }
        ]
