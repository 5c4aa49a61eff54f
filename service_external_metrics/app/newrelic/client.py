"""
New Relic REST API client computing requests-per-minute figures.
"""

import json
from decimal import Decimal
from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel, ValidationError

from shared.config import BaseConfig, DEFAULT_NEWRELIC_API_URL
from shared.errors import ApplicationNotFoundError, MalformedResponseError
from shared.logging import get_logger

from .models import ApplicationHostResponse, ApplicationList, MetricsDataResponse
from .transport import FetchClient

ModelT = TypeVar("ModelT", bound=BaseModel)

HTTP_DISPATCHER = "HttpDispatcher"
REQUESTS_PER_MINUTE = "requests_per_minute"
CALLS_PER_MINUTE = "calls_per_minute"


def parse_rpm(value: Any) -> int:
    """Coerce an upstream numeric value to an int.

    Decimal-shaped values are truncated toward zero, integer-shaped values are
    taken as is. Anything else raises ``MalformedResponseError``.
    """
    if isinstance(value, bool):
        raise MalformedResponseError(f"expected a number, got {value!r}")
    if isinstance(value, int):
        return value
    try:
        if isinstance(value, (float, Decimal)):
            return int(value)
        if isinstance(value, str):
            text = value.strip()
            if "." in text:
                return int(float(text))
            return int(text)
    except (ValueError, OverflowError) as e:
        raise MalformedResponseError(f"could not parse {value!r} as a number", details={"value": str(value)}) from e

    raise MalformedResponseError(f"expected a number, got {value!r}")


class NewRelicClient:
    """Queries the New Relic API for application and per-host throughput."""

    def __init__(
        self,
        api_key: str,
        min_rpm_for_consideration: int,
        fetch_client: FetchClient,
        base_uri: str = DEFAULT_NEWRELIC_API_URL,
    ):
        self.api_key = api_key
        self.min_rpm_for_consideration = min_rpm_for_consideration
        self.fetch_client = fetch_client
        self.base_uri = base_uri if base_uri.endswith("/") else base_uri + "/"
        self.logger = get_logger("external-metrics.newrelic")

    @classmethod
    def from_config(cls, config: BaseConfig, fetch_client: FetchClient) -> "NewRelicClient":
        return cls(
            api_key=config.newrelic_api_key,
            min_rpm_for_consideration=config.min_rpm,
            fetch_client=fetch_client,
            base_uri=config.newrelic_api_url,
        )

    async def get_application_rpm(self, app_name: str) -> int:
        """Return the application-level ``requests_per_minute`` aggregate."""
        app_id = await self._get_application_id(app_name)

        response = await self._get(
            f"applications/{app_id}/metrics/data.json",
            self._metric_params(REQUESTS_PER_MINUTE),
            MetricsDataResponse,
        )
        rpm = self._first_value(response, REQUESTS_PER_MINUTE)

        self.logger.debug("Application RPM retrieved", app_name=app_name, app_id=app_id, rpm=rpm)
        return rpm

    async def get_rpm_average_across_hosts(self, app_name: str) -> int:
        """Average ``calls_per_minute`` over hosts at or above the minimum RPM.

        Hosts below the threshold are left out of both the sum and the count.
        Returns 0 when no host qualifies. The first failing host call aborts
        the whole average.
        """
        app_id = await self._get_application_id(app_name)
        hosts = await self._get(f"applications/{app_id}/hosts.json", {}, ApplicationHostResponse)

        total_rpm = 0
        considered_hosts = 0
        for host in hosts.hosts:
            host_rpm = await self._get_host_rpm(host.id, app_id)
            if host_rpm >= self.min_rpm_for_consideration:
                considered_hosts += 1
                total_rpm += host_rpm

        if considered_hosts == 0:
            self.logger.warning(
                "No hosts were found to be above the minimum RPM",
                app_name=app_name,
                min_rpm=self.min_rpm_for_consideration,
                host_count=len(hosts.hosts)
            )
            return 0

        average = total_rpm // considered_hosts
        self.logger.debug(
            "Host RPM average computed",
            app_name=app_name,
            considered_hosts=considered_hosts,
            host_count=len(hosts.hosts),
            rpm=average
        )
        return average

    async def _get_host_rpm(self, host_id: int, app_id: int) -> int:
        response = await self._get(
            f"applications/{app_id}/hosts/{host_id}/metrics/data.json",
            self._metric_params(CALLS_PER_MINUTE),
            MetricsDataResponse,
        )
        return self._first_value(response, CALLS_PER_MINUTE)

    async def _get_application_id(self, app_name: str) -> int:
        # Upstream has no name filter, so scan the full listing; first match wins
        apps = await self._get("applications.json", {}, ApplicationList)

        app_id = 0
        for app in apps.applications:
            if app.name == app_name:
                app_id = app.id
                break

        if app_id == 0:
            raise ApplicationNotFoundError(app_name)

        return app_id

    async def _get(self, path: str, params: Dict[str, str], model: Type[ModelT]) -> ModelT:
        headers = {
            "x-api-key": self.api_key,
            "content-type": "application/json",
        }
        body = await self.fetch_client.fetch(self.base_uri + path, headers, params)

        try:
            return model.model_validate(json.loads(body, parse_float=Decimal))
        except (ValueError, ValidationError) as e:
            raise MalformedResponseError(
                f"could not decode response from {path}",
                details={"path": path, "error": str(e)}
            ) from e

    @staticmethod
    def _metric_params(value_name: str) -> Dict[str, str]:
        return {
            "names[]": HTTP_DISPATCHER,
            "values[]": value_name,
            "summarize": "true",
        }

    @staticmethod
    def _first_value(response: MetricsDataResponse, value_name: str) -> int:
        try:
            value = response.first_value(value_name)
        except LookupError as e:
            raise MalformedResponseError(str(e), details={"value_name": value_name}) from e
        return parse_rpm(value)
