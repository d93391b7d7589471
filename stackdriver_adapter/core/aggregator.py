from __future__ import annotations

import logging

from stackdriver_adapter.core.abstract.resource_models import BaseResourceModel
from stackdriver_adapter.core.integrations.stackdriver.exceptions import (
    BackendContractViolation,
    MalformedSample,
    MetricNotFound,
)
from stackdriver_adapter.core.models.objects import GroupResource
from stackdriver_adapter.core.models.quantity import Quantity
from stackdriver_adapter.core.models.stackdriver import ListTimeSeriesResponse, TypedValue, typed_value_kind

logger = logging.getLogger("stackdriver-adapter")

MetricValues = dict[str, Quantity]  # Mapping: resource key -> summed value


def quantity_of(value: TypedValue) -> Quantity:
    """
    Converts the value of a single point to a quantity.

    Integers are kept exact, doubles are truncated to thousandths.

    Raises:
    MalformedSample: if the point carries neither an int64 nor a double value.
    """

    kind = typed_value_kind(value)
    if kind == "int64_value":
        return Quantity.from_int(value.int64_value)
    if kind == "double_value":
        try:
            return Quantity.from_float(value.double_value)
        except ValueError as e:
            raise MalformedSample(str(e)) from e

    raise MalformedSample(
        f"Expected metric of type DoubleValue or Int64Value, but received TypedValue with {kind or 'no'} value"
    )


def aggregate_time_series(
    response: ListTimeSeriesResponse,
    resource_model: BaseResourceModel,
    group_resource: GroupResource,
    metric_name: str,
) -> MetricValues:
    """
    Folds a time series listing into one value per resource key.

    Stackdriver can't express filters like `label1 = x AND (label2 = y OR label2 = z)`,
    so only part of the filtering is done by the query, and series are attributed to objects here.
    A single object may report several series, their values are summed.

    Args:
    response (ListTimeSeriesResponse): The response of a query built by the translator.
    resource_model (BaseResourceModel): The resource model the query was built with.
    group_resource (GroupResource): The resource that was queried, used for error reporting.
    metric_name (str): The metric that was queried, used for error reporting.

    Returns:
    MetricValues: The summed value of every resource key that had at least one series.
    """

    if len(response.time_series) < 1:
        raise MetricNotFound(str(group_resource), metric_name)

    metric_values: MetricValues = {}
    for series in response.time_series:
        if len(series.points) != 1:
            # This shouldn't happen with a correct query to Stackdriver
            raise BackendContractViolation(
                f"Expected exactly one Point in TimeSeries from Stackdriver, but received {len(series.points)}"
            )

        key = resource_model.metric_key(series)
        current = metric_values.get(key, Quantity())
        metric_values[key] = current + quantity_of(series.points[0].value)

    logger.debug(
        "Aggregated %d time series of %s into %d %s values",
        len(response.time_series),
        metric_name,
        len(metric_values),
        group_resource,
    )
    return metric_values
