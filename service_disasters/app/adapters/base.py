"""
Common plumbing for upstream HTTP adapters.
"""

from typing import Any, Optional

import httpx

from shared.logging import get_logger
from shared.errors import ExternalServiceError
from shared.circuit_breaker import CircuitBreaker, CircuitBreakerOpenException
from shared.retry import RetryConfig, RetryError, call_with_retry


class UpstreamClient:
    """Base class for adapters that call a third-party HTTP API.

    Each request is retried on transport errors (connect failures,
    timeouts), and the retried call as a whole counts once against the
    adapter's circuit breaker. Every failure leaves as
    ``ExternalServiceError`` tagged with ``service_name``.
    """

    service_name = "upstream"
    # Adapters whose target URL comes from the caller opt out of the shared breaker
    uses_circuit_breaker = True
    max_redirects = 20

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        retry_config: Optional[RetryConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.transport = transport
        self.logger = get_logger(f"disasters.adapters.{self.service_name}")
        self.circuit_breaker: Optional[CircuitBreaker] = None
        if self.uses_circuit_breaker:
            self.circuit_breaker = CircuitBreaker(
                self.service_name,
                failure_threshold=5,
                recovery_timeout=30.0
            )
        self.retry_config = retry_config or RetryConfig(
            max_attempts=3,
            base_delay=0.5,
            max_delay=5.0,
            exponential_base=2.0,
            jitter=True
        )

    async def _request(
        self,
        method: str,
        url: str,
        *,
        check_status: bool = True,
        headers_only: bool = False,
        **kwargs
    ) -> httpx.Response:
        """Send one request with retry applied, the whole call guarded by the breaker.

        With ``headers_only`` the body is never read; the returned response
        carries status and headers only.
        """

        async def _send() -> httpx.Response:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self.transport,
                max_redirects=self.max_redirects,
            ) as client:
                if headers_only:
                    async with client.stream(method, url, **kwargs) as response:
                        pass
                else:
                    response = await client.request(method, url, **kwargs)
            if check_status:
                response.raise_for_status()
            return response

        async def _send_with_retry() -> httpx.Response:
            return await call_with_retry(
                _send,
                exceptions=(httpx.TransportError,),
                config=self.retry_config,
                name=self.service_name,
            )

        try:
            if self.circuit_breaker is None:
                return await _send_with_retry()
            return await self.circuit_breaker.call(_send_with_retry)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            self.logger.error("Upstream returned error status", url=url, status_code=status)
            raise ExternalServiceError(
                self.service_name,
                f"Unexpected status {status}",
                details={"status_code": status}
            ) from e
        except RetryError as e:
            self.logger.error("Upstream unreachable", url=url, error=str(e.last_exception))
            raise ExternalServiceError(
                self.service_name,
                "Service unavailable",
                details={"error": str(e.last_exception), "attempts": e.attempts}
            ) from e
        except CircuitBreakerOpenException as e:
            self.logger.warning("Upstream call blocked by open circuit", url=url)
            raise ExternalServiceError(self.service_name, "Circuit open") from e
        except httpx.HTTPError as e:
            self.logger.error("Upstream HTTP error", url=url, error=str(e))
            raise ExternalServiceError(self.service_name, "HTTP error", details={"error": str(e)}) from e

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ExternalServiceError(self.service_name, "Response is not valid JSON") from e
