"""
Unit tests for the New Relic external metrics provider.
"""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

from service_external_metrics.app.provider import (
    ExternalMetricInfo,
    NewRelicProvider,
    parse_selector,
)
from shared.errors import (
    ApplicationNotFoundError,
    SelectorMissingAppNameError,
    UnsupportedMetricError,
    UpstreamError,
)


class TestNewRelicProvider:
    """Test cases for NewRelicProvider."""

    @pytest.fixture
    def api(self):
        """Mock RPM source."""
        api = AsyncMock()
        api.get_application_rpm.return_value = 123
        return api

    @pytest.fixture
    def provider(self, api):
        """Create provider instance."""
        return NewRelicProvider(api)

    @pytest.mark.asyncio
    async def test_get_external_metric(self, provider, api):
        """Test a successful lookup."""
        before = datetime.now(timezone.utc)

        value_list = await provider.get_external_metric(
            "fmcore",
            parse_selector("appName=fmcore"),
            ExternalMetricInfo()
        )

        api.get_application_rpm.assert_awaited_once_with("fmcore")
        assert len(value_list.items) == 1
        item = value_list.items[0]
        assert item.value == 123
        assert item.metric_name == "rpm"
        assert item.metric_labels == {"app": "fmcore"}
        assert before - timedelta(seconds=1) <= item.timestamp <= datetime.now(timezone.utc)

    @pytest.mark.asyncio
    async def test_selector_value_is_passed_through(self, provider, api):
        """Test that the appName value, not the namespace, names the application."""
        await provider.get_external_metric(
            "production",
            parse_selector("tier=web,appName=checkout"),
            ExternalMetricInfo(metric="rpm")
        )

        api.get_application_rpm.assert_awaited_once_with("checkout")

    @pytest.mark.asyncio
    async def test_never_uses_host_average(self, provider, api):
        """Test that the adapter reads the application aggregate only."""
        await provider.get_external_metric("ns", parse_selector("appName=checkout"))

        api.get_rpm_average_across_hosts.assert_not_called()

    @pytest.mark.asyncio
    async def test_api_error_propagates(self, provider, api):
        """Test that client errors surface unchanged."""
        error = UpstreamError("random error")
        api.get_application_rpm.side_effect = error

        with pytest.raises(UpstreamError) as exc_info:
            await provider.get_external_metric("fmcore", parse_selector("appName=not-found"), ExternalMetricInfo())

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_application_not_found_propagates(self, provider, api):
        api.get_application_rpm.side_effect = ApplicationNotFoundError("ghost")

        with pytest.raises(ApplicationNotFoundError):
            await provider.get_external_metric("fmcore", parse_selector("appName=ghost"), ExternalMetricInfo())

    @pytest.mark.asyncio
    @pytest.mark.parametrize("selector", ["notName=not-found", "", "appName!=fmcore", "appName", "appName="])
    async def test_app_name_selector_not_found(self, provider, api, selector):
        """Test that a selector without an appName equality is rejected."""
        with pytest.raises(SelectorMissingAppNameError) as exc_info:
            await provider.get_external_metric("fmcore", parse_selector(selector), ExternalMetricInfo())

        assert exc_info.value.message == "could not find appName selector"
        api.get_application_rpm.assert_not_called()

    @pytest.mark.asyncio
    async def test_unsupported_metric(self, provider, api):
        """Test that metric names other than rpm are rejected."""
        with pytest.raises(UnsupportedMetricError):
            await provider.get_external_metric("fmcore", parse_selector("appName=fmcore"), ExternalMetricInfo(metric="cpu"))

        api.get_application_rpm.assert_not_called()

    def test_list_all_external_metrics(self, provider):
        """Test the advertised metric list."""
        metric_list = provider.list_all_external_metrics()

        assert [info.metric for info in metric_list] == ["rpm"]
        assert provider.list_all_external_metrics() == metric_list

    @pytest.mark.asyncio
    async def test_value_list_wire_format(self, provider):
        """Test ExternalMetricValueList serialization."""
        value_list = await provider.get_external_metric("fmcore", parse_selector("appName=fmcore"))
        data = value_list.to_dict()

        assert data["kind"] == "ExternalMetricValueList"
        assert data["apiVersion"] == "external.metrics.k8s.io/v1beta1"
        assert data["items"][0]["metricName"] == "rpm"
        assert data["items"][0]["metricLabels"] == {"app": "fmcore"}
        assert data["items"][0]["value"] == "123"
        assert data["items"][0]["timestamp"].endswith("Z")
