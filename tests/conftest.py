"""Root test configuration."""

import logging

import httpx
import pytest
import structlog
from pactbroker.core.errors import PermanentHTTPError

BROKER_URL = "https://broker.example.com"


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


class FakeTransport:
    """In-memory broker: GETs are served from ``documents``, writes are recorded."""

    def __init__(self, documents=None, write_status=200, write_error=None):
        self.documents = dict(documents or {})
        self.write_status = write_status
        self.write_error = write_error
        self.requests = []

    def get(self, url):
        self.requests.append(("GET", url, None))
        if url not in self.documents:
            raise PermanentHTTPError(f"HTTP 404 for GET {url}", status_code=404, url=url)
        return self.documents[url]

    def _write(self, method, url, content):
        self.requests.append((method, url, content))
        if self.write_error is not None:
            raise self.write_error
        return httpx.Response(self.write_status)

    def post(self, url, content=None):
        return self._write("POST", url, content)

    def put(self, url, content=None):
        return self._write("PUT", url, content)

    @property
    def writes(self):
        return [r for r in self.requests if r[0] != "GET"]


@pytest.fixture
def make_transport():
    return FakeTransport


@pytest.fixture
def root_document():
    """Broker index document as served at ``/``."""
    return {
        "_links": {
            "self": {"href": BROKER_URL},
            "pb:latest-provider-pacts": {
                "href": f"{BROKER_URL}/pacts/provider/{{provider}}/latest",
                "templated": True,
            },
            "pb:latest-provider-pacts-with-tag": {
                "href": f"{BROKER_URL}/pacts/provider/{{provider}}/latest/{{tag}}",
                "templated": True,
            },
            "pb:latest-untagged-pact-version": {
                "href": f"{BROKER_URL}/pacts/provider/{{provider}}/latest-untagged",
                "templated": True,
            },
        }
    }
