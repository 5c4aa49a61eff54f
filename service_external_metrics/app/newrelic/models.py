"""
Pydantic models for the New Relic REST API (v2) payloads.
"""

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field


class ApplicationEntry(BaseModel):
    """One entry of the applications listing."""
    id: int = Field(default=0, validation_alias=AliasChoices("id", "ID"))
    name: str = ""


class ApplicationList(BaseModel):
    applications: List[ApplicationEntry] = Field(default_factory=list)


class ApplicationHost(BaseModel):
    """A host running an application."""
    id: int = Field(default=0, validation_alias=AliasChoices("id", "ID"))


class ApplicationHostResponse(BaseModel):
    hosts: List[ApplicationHost] = Field(default_factory=list, alias="application_hosts")


class TimeSlice(BaseModel):
    """One time-windowed sample. Values are kept as decoded so int/decimal form survives."""
    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None
    values: Dict[str, Any] = Field(default_factory=dict)


class Metric(BaseModel):
    name: str = ""
    timeslices: List[TimeSlice] = Field(default_factory=list)


class MetricsData(BaseModel):
    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None
    metrics_not_found: List[str] = Field(default_factory=list)
    metrics_found: List[str] = Field(default_factory=list)
    metrics: List[Metric] = Field(default_factory=list)


class MetricsDataResponse(BaseModel):
    metric_data: MetricsData

    def first_value(self, value_name: str) -> Any:
        """Return ``metrics[0].timeslices[0].values[value_name]``.

        Raises ``LookupError`` when any level of that path is missing.
        """
        metrics = self.metric_data.metrics
        if not metrics:
            raise LookupError("response contains no metrics")
        timeslices = metrics[0].timeslices
        if not timeslices:
            raise LookupError(f"metric {metrics[0].name!r} contains no timeslices")
        values = timeslices[0].values
        if value_name not in values:
            raise LookupError(f"timeslice has no value {value_name!r}")
        return values[value_name]
