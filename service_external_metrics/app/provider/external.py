"""
External metrics provider backed by New Relic application RPM.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol

from shared.errors import SelectorMissingAppNameError, UnsupportedMetricError
from shared.logging import get_logger, set_app_context

from .selector import Selector

APP_KEY = "appName"
RPM_METRIC = "rpm"
API_VERSION = "external.metrics.k8s.io/v1beta1"


class RpmProvider(Protocol):
    async def get_application_rpm(self, app_name: str) -> int:
        ...


@dataclass(frozen=True)
class ExternalMetricInfo:
    """Descriptor of a metric served by the provider."""
    metric: str = ""


@dataclass(frozen=True)
class ExternalMetricValue:
    """A single metric sample handed back to the autoscaler."""
    metric_name: str
    value: int
    timestamp: datetime
    metric_labels: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metricName": self.metric_name,
            "metricLabels": dict(self.metric_labels),
            "timestamp": self.timestamp.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "value": str(self.value),
        }


@dataclass(frozen=True)
class ExternalMetricValueList:
    items: List[ExternalMetricValue] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "ExternalMetricValueList",
            "apiVersion": API_VERSION,
            "metadata": {},
            "items": [item.to_dict() for item in self.items],
        }


class NewRelicProvider:
    """Answers external metric queries with an application's RPM.

    The application is named by an ``appName`` equality requirement in the
    label selector. The namespace is echoed back as the ``app`` label.
    """

    def __init__(self, api: RpmProvider):
        self.api = api
        self.logger = get_logger("external-metrics.provider")

    def list_all_external_metrics(self) -> List[ExternalMetricInfo]:
        return [ExternalMetricInfo(metric=RPM_METRIC)]

    async def get_external_metric(
        self,
        namespace: str,
        metric_selector: Selector,
        info: Optional[ExternalMetricInfo] = None,
    ) -> ExternalMetricValueList:
        if info is not None and info.metric and info.metric != RPM_METRIC:
            raise UnsupportedMetricError(info.metric)

        app_name = metric_selector.first_equality_value(APP_KEY)
        if not app_name:
            raise SelectorMissingAppNameError(details={"selector": str(metric_selector)})

        set_app_context(app_name)
        rpm = await self.api.get_application_rpm(app_name)

        self.logger.info("External metric evaluated", namespace=namespace, metric=RPM_METRIC, value=rpm)
        return ExternalMetricValueList(items=[
            ExternalMetricValue(
                metric_name=RPM_METRIC,
                value=rpm,
                timestamp=datetime.now(timezone.utc),
                metric_labels={"app": namespace},
            )
        ])
