"""
The parts of the Cloud Monitoring (Stackdriver) v3 API the translator speaks.

Requests and responses are the `monitoring_v3` types of the official client library,
so a request built by the translator can be passed to `MetricServiceClient` as it is,
or rendered as the query parameters of the REST call with `to_query_params`.
Responses received over REST are parsed from their JSON representation (camelCase keys).
"""

from __future__ import annotations

from typing import Union

from google.api import metric_pb2 as ga_metric
from google.cloud import monitoring_v3
from google.cloud.monitoring_v3 import Aggregation as gAggregation
from google.cloud.monitoring_v3.types import TimeSeries, TypedValue

# Those are enum classes defined in the Aggregation and MetricDescriptor messages
Aligner = gAggregation.Aligner
MetricKind = ga_metric.MetricDescriptor.MetricKind
ValueType = ga_metric.MetricDescriptor.ValueType

ListTimeSeriesRequest = monitoring_v3.ListTimeSeriesRequest
ListTimeSeriesResponse = monitoring_v3.ListTimeSeriesResponse
ListMetricDescriptorsRequest = monitoring_v3.ListMetricDescriptorsRequest
ListMetricDescriptorsResponse = monitoring_v3.ListMetricDescriptorsResponse

__all__ = [
    "Aligner",
    "MetricKind",
    "ValueType",
    "TimeSeries",
    "TypedValue",
    "ListTimeSeriesRequest",
    "ListTimeSeriesResponse",
    "ListMetricDescriptorsRequest",
    "ListMetricDescriptorsResponse",
    "to_query_params",
    "parse_time_series_response",
    "parse_metric_descriptors_response",
    "typed_value_kind",
]


def to_query_params(request: Union[ListTimeSeriesRequest, ListMetricDescriptorsRequest]) -> dict[str, str]:
    """
    Renders a request as the query parameters of its REST call,
    `GET /v3/{name}/timeSeries` or `GET /v3/{name}/metricDescriptors`.

    Timestamps and durations are rendered by protobuf's JSON mapping, e.g. `2024-01-02T03:04:05Z` and `120s`.
    """

    params = {"filter": request.filter}
    if isinstance(request, ListTimeSeriesRequest):
        pb = ListTimeSeriesRequest.pb(request)
        params.update(
            {
                "interval.startTime": pb.interval.start_time.ToJsonString(),
                "interval.endTime": pb.interval.end_time.ToJsonString(),
                "aggregation.perSeriesAligner": Aligner(pb.aggregation.per_series_aligner).name,
                "aggregation.alignmentPeriod": pb.aggregation.alignment_period.ToJsonString(),
            }
        )
    return params


def parse_time_series_response(payload: Union[str, bytes]) -> ListTimeSeriesResponse:
    """
    Parses the JSON body of a `timeSeries.list` response.

    Raises:
    google.protobuf.json_format.ParseError: if the payload is not a valid response.
    """

    return ListTimeSeriesResponse.from_json(payload, ignore_unknown_fields=True)


def parse_metric_descriptors_response(payload: Union[str, bytes]) -> ListMetricDescriptorsResponse:
    """
    Parses the JSON body of a `metricDescriptors.list` response.

    Unknown fields are ignored, the listing carries more of each descriptor than is needed here.
    """

    return ListMetricDescriptorsResponse.from_json(payload, ignore_unknown_fields=True)


def typed_value_kind(value: TypedValue) -> str:
    """Name of the field set in the `value` oneof of a point, e.g. `int64_value`. Empty if none is set."""

    return TypedValue.pb(value).WhichOneof("value") or ""
