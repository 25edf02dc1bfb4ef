from __future__ import annotations

import base64
from typing import Any, Sequence

import httpx
import structlog
from circuitbreaker import CircuitBreakerError, circuit
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pactbroker.config.settings import DEFAULT_USER_AGENT
from pactbroker.core.errors import (
    ConfigurationError,
    PermanentHTTPError,
    RetryableHTTPError,
    TransportError,
)
from pactbroker.hal.uri import join_url

logger = structlog.get_logger()

HAL_ACCEPT = "application/hal+json, application/json"


def is_retryable_status(status_code: int) -> bool:
    """Determine if HTTP status code is retryable."""
    return status_code in (408, 429, 500, 502, 503, 504)


def auth_header(authentication: Sequence[str] | None) -> dict[str, str]:
    """Build the Authorization header for ``["basic", user, pass]`` or ``["bearer", token]``."""
    if not authentication:
        return {}
    scheme = str(authentication[0]).lower()
    if scheme == "basic" and len(authentication) >= 3:
        raw = f"{authentication[1]}:{authentication[2]}".encode()
        return {"Authorization": f"Basic {base64.b64encode(raw).decode('ascii')}"}
    if scheme == "bearer" and len(authentication) >= 2:
        return {"Authorization": f"Bearer {authentication[1]}"}
    raise ConfigurationError(
        f"Unsupported broker authentication scheme '{authentication[0]}'",
        {"scheme": authentication[0], "length": len(authentication)},
    )


class BrokerHTTPClient:
    """Sync HTTP client for the broker with retry logic and circuit breaker."""

    def __init__(
        self,
        base_url: str,
        *,
        authentication: Sequence[str] | None = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff_factor: float = 2.0,
        circuit_failure_threshold: int = 5,
        circuit_recovery_timeout: int = 60,
        headers: dict[str, str] | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._auth_headers = auth_header(authentication)
        self._extra_headers = dict(headers or {})
        self._user_agent = user_agent

        retrying = retry(
            retry=retry_if_exception_type(RetryableHTTPError),
            stop=stop_after_attempt(max(1, max_retries)),
            wait=wait_exponential(multiplier=backoff_factor, min=0, max=30),
            reraise=True,
        )
        breaker = circuit(
            failure_threshold=circuit_failure_threshold,
            recovery_timeout=circuit_recovery_timeout,
            expected_exception=RetryableHTTPError,
            name=f"pact-broker:{self._base_url}",
        )
        # One breaker per client: the broker is a single endpoint.
        self._guarded_request = breaker(retrying(self._send))

    @property
    def base_url(self) -> str:
        return self._base_url

    def url_for(self, path: str) -> str:
        return join_url(self._base_url, path)

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": HAL_ACCEPT,
            "Content-Type": "application/json",
            "User-Agent": self._user_agent,
        }
        headers.update(self._auth_headers)
        headers.update(self._extra_headers)
        return headers

    def _send(self, method: str, url: str, content: str | None = None) -> httpx.Response:
        """Execute one HTTP request, classifying failures."""
        try:
            with httpx.Client(timeout=self._timeout) as client:
                response = client.request(method, url, content=content, headers=self._headers())
        except (httpx.TimeoutException, httpx.ConnectError, httpx.ReadError) as exc:
            logger.warning("http_network_error", method=method, url=url, error=str(exc))
            raise RetryableHTTPError(str(exc), {"url": url}) from exc
        except httpx.HTTPError as exc:
            logger.error("http_unexpected_error", method=method, url=url, error=str(exc))
            raise TransportError(str(exc), {"url": url}) from exc

        if is_retryable_status(response.status_code):
            logger.warning(
                "http_retryable_error",
                status=response.status_code,
                method=method,
                url=url,
            )
            raise RetryableHTTPError(
                f"HTTP {response.status_code}: {response.text}",
                {"status": response.status_code, "url": url},
            )

        if response.status_code >= 300:
            logger.error(
                "http_permanent_error",
                status=response.status_code,
                method=method,
                url=url,
            )
            raise PermanentHTTPError(
                f"HTTP {response.status_code} {response.reason_phrase} for {method} {url}",
                status_code=response.status_code,
                body=response.text,
                url=url,
            )
        return response

    def request(self, method: str, path: str, content: str | None = None) -> httpx.Response:
        url = self.url_for(path)
        try:
            return self._guarded_request(method, url, content)
        except CircuitBreakerError as exc:
            raise RetryableHTTPError(str(exc), {"url": url}) from exc

    def get(self, url: str) -> dict[str, Any]:
        """GET a HAL document and parse its JSON body."""
        response = self.request("GET", url)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(f"Broker returned invalid JSON for {url}", {"url": url}) from exc

    def post(self, url: str, content: str | None = None) -> httpx.Response:
        return self.request("POST", url, content)

    def put(self, url: str, content: str | None = None) -> httpx.Response:
        return self.request("PUT", url, content)
