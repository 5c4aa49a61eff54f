"""
External metrics provider package.

Translates external metric queries (namespace, label selector, metric name)
into New Relic lookups and shapes the answer as an ExternalMetricValueList.
"""

from .external import (
    APP_KEY,
    RPM_METRIC,
    ExternalMetricInfo,
    ExternalMetricValue,
    ExternalMetricValueList,
    NewRelicProvider,
)
from .selector import Operator, Requirement, Selector, parse_selector

__all__ = [
    "APP_KEY",
    "RPM_METRIC",
    "ExternalMetricInfo",
    "ExternalMetricValue",
    "ExternalMetricValueList",
    "NewRelicProvider",
    "Operator",
    "Requirement",
    "Selector",
    "parse_selector",
]
