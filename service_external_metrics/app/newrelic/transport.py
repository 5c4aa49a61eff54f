"""
HTTP fetch capability used by the New Relic client.
"""

import re
from abc import ABC, abstractmethod
from contextlib import nullcontext
from typing import Dict, Optional
from urllib.parse import urlsplit

import httpx

from shared.logging import get_logger
from shared.errors import UpstreamError
from shared.metrics import MetricsCollector


class FetchClient(ABC):
    """Performs a single GET against the upstream API.

    Implementations return the raw response body and raise ``UpstreamError``
    for transport failures and non-success responses.
    """

    @abstractmethod
    async def fetch(self, url: str, headers: Dict[str, str], params: Dict[str, str]) -> bytes:
        """Fetch ``url`` with the given headers and query parameters."""


class HttpxFetchClient(FetchClient):
    """FetchClient backed by ``httpx.AsyncClient``."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        metrics: Optional[MetricsCollector] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.metrics = metrics
        self.transport = transport
        self.logger = get_logger("external-metrics.fetch_client")

    async def fetch(self, url: str, headers: Dict[str, str], params: Dict[str, str]) -> bytes:
        endpoint = _endpoint_label(url)
        try:
            with self._timed(endpoint):
                async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                    response = await client.get(url, headers=headers, params=params)
        except httpx.HTTPError as e:
            self.logger.error("New Relic request failed", url=url, params=params, error=str(e))
            self._count(endpoint, "error")
            raise UpstreamError(str(e), details={"url": url}) from e

        self.logger.debug(
            "New Relic request completed",
            url=url,
            params=params,
            status_code=response.status_code,
            response=response.text
        )

        self._count(endpoint, str(response.status_code))
        if not response.is_success:
            raise UpstreamError(
                f"Unexpected status {response.status_code} from {url}",
                details={"url": url, "status_code": response.status_code, "body": response.text}
            )

        return response.content

    def _timed(self, endpoint: str):
        if self.metrics is None:
            return nullcontext()
        return self.metrics.time_operation("newrelic_request_duration_seconds", endpoint=endpoint)

    def _count(self, endpoint: str, status: str):
        if self.metrics is not None:
            self.metrics.increment_counter("newrelic_requests_total", endpoint=endpoint, status=status)


def _endpoint_label(url: str) -> str:
    # Collapse numeric path segments so application and host ids stay out of label values
    return re.sub(r"/\d+(?=/|$)", "/{id}", urlsplit(url).path)
