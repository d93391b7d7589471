from __future__ import annotations

import datetime

import pydantic as pd

from stackdriver_adapter.core.models.objects import GroupResource
from stackdriver_adapter.core.models.quantity import Quantity
from stackdriver_adapter.utils.clock import format_rfc3339

# Kubernetes' runtime.APIVersionInternal
API_VERSION_INTERNAL = "__internal"


class ObjectReference(pd.BaseModel):
    model_config = pd.ConfigDict(populate_by_name=True)

    api_version: str = pd.Field(alias="apiVersion")
    kind: str
    name: str
    namespace: str = ""


class MetricValue(pd.BaseModel):
    """A single value of the custom metrics API, as served for one described object."""

    model_config = pd.ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    described_object: ObjectReference = pd.Field(alias="describedObject")
    metric_name: str = pd.Field(alias="metricName")
    timestamp: datetime.datetime
    value: Quantity

    @pd.field_serializer("value")
    def serialize_value(self, value: Quantity) -> str:
        return str(value)

    @pd.field_serializer("timestamp")
    def serialize_timestamp(self, timestamp: datetime.datetime) -> str:
        return format_rfc3339(timestamp)


class MetricInfo(pd.BaseModel):
    model_config = pd.ConfigDict(frozen=True)

    group_resource: GroupResource
    metric: str
    namespaced: bool = True
