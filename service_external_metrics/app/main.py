"""
External metrics service for the New Relic adapter.
"""

from typing import Optional

from fastapi import Query

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import AdapterException

from .newrelic import FetchClient, HttpxFetchClient, NewRelicClient
from .provider import ExternalMetricInfo, NewRelicProvider, parse_selector
from .provider.external import API_VERSION

SERVICE_NAME = "external-metrics"
SERVICE_PORT = 8080
API_PREFIX = f"/apis/{API_VERSION}"


class ExternalMetricsService(BaseService):
    """Serves the external.metrics.k8s.io API from New Relic data."""

    def __init__(self, config: Optional[ServiceConfig] = None, fetch_client: Optional[FetchClient] = None):
        super().__init__(SERVICE_NAME, SERVICE_PORT, config)

        self.fetch_client = fetch_client or HttpxFetchClient(
            timeout=self.config.newrelic_timeout_seconds,
            metrics=self.metrics
        )
        self.newrelic = NewRelicClient.from_config(self.config, self.fetch_client)
        self.provider = NewRelicProvider(self.newrelic)

        self._setup_external_metrics_routes()

    def _setup_external_metrics_routes(self):
        """Set up external metrics API routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": SERVICE_NAME,
                "message": "New Relic Adapter - External Metrics Service",
                "version": "1.0.0",
                "metrics": [info.metric for info in self.provider.list_all_external_metrics()]
            }

        @self.app.get(API_PREFIX)
        async def list_external_metrics():
            """API resource discovery for the external metrics group."""
            return {
                "kind": "APIResourceList",
                "apiVersion": "v1",
                "groupVersion": API_VERSION,
                "resources": [
                    {
                        "name": info.metric,
                        "singularName": "",
                        "namespaced": True,
                        "kind": "ExternalMetricValueList",
                        "verbs": ["get"]
                    }
                    for info in self.provider.list_all_external_metrics()
                ]
            }

        @self.app.get(API_PREFIX + "/namespaces/{namespace}/{metric_name}")
        async def get_external_metric(
            namespace: str,
            metric_name: str,
            label_selector: Optional[str] = Query(None, alias="labelSelector", description="Label selector naming the application")
        ):
            """Evaluate an external metric for the application named in the selector."""
            try:
                selector = parse_selector(label_selector)
                values = await self.provider.get_external_metric(
                    namespace,
                    selector,
                    ExternalMetricInfo(metric=metric_name)
                )
            except AdapterException:
                self.metrics.increment_counter("external_metric_queries_total", metric=metric_name, status="error")
                raise

            self.metrics.increment_counter("external_metric_queries_total", metric=metric_name, status="ok")
            return values.to_dict()

    async def _check_dependencies(self):
        """Report configured upstreams without calling them."""
        return {
            "newrelic_api": self.newrelic.base_uri,
            "min_rpm": self.newrelic.min_rpm_for_consideration
        }

    def run(self):
        self.logger.info(self.config.startup_message)
        super().run()


def create_app(config: Optional[ServiceConfig] = None, fetch_client: Optional[FetchClient] = None):
    """Create external metrics service application."""
    service = ExternalMetricsService(config, fetch_client)
    return service.app


def main():
    """Run the external metrics service with configuration from the environment."""
    ExternalMetricsService().run()


if __name__ == "__main__":
    main()
