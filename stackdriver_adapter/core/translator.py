from __future__ import annotations

import itertools
import logging
from typing import Iterable, Optional, Sequence

from google.cloud import monitoring_v3

from stackdriver_adapter.core.abstract.resource_models import BaseResourceModel
from stackdriver_adapter.core.aggregator import MetricValues, aggregate_time_series
from stackdriver_adapter.core.integrations.kubernetes import RESTMapper, StaticRESTMapper
from stackdriver_adapter.core.integrations.stackdriver.exceptions import (
    BackendContractViolation,
    BatchTooLarge,
    InvalidSelector,
    UnsupportedOperation,
)
from stackdriver_adapter.core.integrations.stackdriver.filters import ONE_OF_MAX
from stackdriver_adapter.core.models.config import Config
from stackdriver_adapter.core.models.objects import NODES, PODS, GroupResource, ObjectRef
from stackdriver_adapter.core.models.quantity import Quantity
from stackdriver_adapter.core.models.result import API_VERSION_INTERNAL, MetricInfo, MetricValue, ObjectReference
from stackdriver_adapter.core.models.stackdriver import (
    Aligner,
    ListMetricDescriptorsRequest,
    ListMetricDescriptorsResponse,
    ListTimeSeriesRequest,
    ListTimeSeriesResponse,
    MetricKind,
    ValueType,
)
from stackdriver_adapter.utils.clock import Clock, SystemClock

logger = logging.getLogger("stackdriver-adapter")


class Translator:
    """
    Translates between the custom metrics API and the Stackdriver API.

    The translator only builds requests and interprets responses, executing the requests is up to the caller.
    It holds no mutable state, so a single instance can be shared between threads.
    """

    def __init__(
        self,
        config: Config,
        *,
        clock: Optional[Clock] = None,
        mapper: Optional[RESTMapper] = None,
    ) -> None:
        self.config = config
        self.clock = clock if clock is not None else SystemClock()
        self.mapper = mapper if mapper is not None else StaticRESTMapper()
        self.resource_model = BaseResourceModel.find(config.resource_model)(config)

    # --------------------- Requests --------------------- #

    def get_request_for_pods(
        self, pods: Sequence[ObjectRef], metric_name: str, namespace: str
    ) -> ListTimeSeriesRequest:
        """
        Builds the Stackdriver request for a metric of multiple pods.

        `pods` is required to be no longer than ONE_OF_MAX items, this is enforced by the limit
        of the one_of() operator in Stackdriver filters.
        """

        self._validate_batch(pods, PODS)
        filter = self.resource_model.build_pods_filter(metric_name, pods, namespace)
        return self._create_list_time_series_request(filter)

    def get_request_for_nodes(self, nodes: Sequence[ObjectRef], metric_name: str) -> ListTimeSeriesRequest:
        """
        Builds the Stackdriver request for a metric of multiple nodes.

        Same limits as for pods apply. Only the current resource model has node resources.
        """

        if not self.resource_model.supports_nodes:
            raise UnsupportedOperation(
                "Root scoped metrics are not supported without new Stackdriver resource model enabled"
            )
        self._validate_batch(nodes, NODES)
        filter = self.resource_model.build_nodes_filter(metric_name, nodes)
        return self._create_list_time_series_request(filter)

    def list_metric_descriptors(self) -> ListMetricDescriptorsRequest:
        """Builds the Stackdriver request listing all custom metric descriptors of the cluster."""

        filter = self.resource_model.build_descriptors_filter()
        logger.debug("Metric descriptors filter: %s", filter)
        return ListMetricDescriptorsRequest(name=self.config.project_path, filter=filter)

    def _validate_batch(self, objects: Sequence[ObjectRef], group_resource: GroupResource) -> None:
        if len(objects) == 0:
            raise InvalidSelector()
        if len(objects) > ONE_OF_MAX:
            raise BatchTooLarge(group_resource.resource, len(objects), ONE_OF_MAX)

    def _create_list_time_series_request(self, filter: str) -> ListTimeSeriesRequest:
        window = self.config.request_window
        # Whole seconds, the API has no use for sub-second precision here
        end_time = int(self.clock.now().timestamp())
        interval = monitoring_v3.TimeInterval(
            {
                "end_time": {"seconds": end_time},
                "start_time": {"seconds": end_time - window},
            }
        )
        aggregation = monitoring_v3.Aggregation(
            {
                # One alignment period spanning the whole window collapses each series to a single point
                "alignment_period": {"seconds": window},
                "per_series_aligner": Aligner.ALIGN_NEXT_OLDER,
            }
        )

        logger.debug("Time series filter: %s", filter)
        return ListTimeSeriesRequest(
            {
                "name": self.config.project_path,
                "filter": filter,
                "interval": interval,
                "aggregation": aggregation,
            }
        )

    # --------------------- Responses --------------------- #

    def get_response_for_single_object(
        self,
        response: ListTimeSeriesResponse,
        group_resource: GroupResource,
        metric_name: str,
        namespace: str,
        name: str,
    ) -> MetricValue:
        """Translates a Stackdriver response to the custom metric value of a single object."""

        values = self._get_metric_values(response, group_resource, metric_name)
        if len(values) != 1:
            raise BackendContractViolation(
                f"Expected exactly one value for resource {name!r} in namespace {namespace!r}, "
                f"but received {len(values)} values"
            )

        (value,) = values.values()
        return self._metric_for(value, group_resource, namespace, name, metric_name)

    def get_response_for_multiple_objects(
        self,
        response: ListTimeSeriesResponse,
        objects: Sequence[ObjectRef],
        group_resource: GroupResource,
        metric_name: str,
    ) -> list[MetricValue]:
        """
        Translates a Stackdriver response to the custom metric values of multiple objects.

        Values are returned in the order of `objects`. Objects without a matching time series are skipped.
        """

        values = self._get_metric_values(response, group_resource, metric_name)
        return self._metrics_for(values, group_resource, metric_name, objects)

    def get_metrics_from_descriptors_response(self, response: ListMetricDescriptorsResponse) -> list[MetricInfo]:
        """
        Returns the metrics exposed for all descriptors returned by Stackdriver that satisfy the requirements:
        - metricKind is "GAUGE"
        - valueType is "INT64" or "DOUBLE"
        - the metric name doesn't contain "/" after the metrics prefix
        """

        prefix = f"{self.config.metrics_prefix}/"
        metrics: list[MetricInfo] = []
        for descriptor in response.metric_descriptors:
            metric_name = descriptor.type.removeprefix(prefix)
            if (
                descriptor.metric_kind == MetricKind.GAUGE
                and descriptor.value_type in (ValueType.INT64, ValueType.DOUBLE)
                and "/" not in metric_name
            ):
                metrics.append(
                    MetricInfo(group_resource=GroupResource(group="", resource="*"), metric=metric_name, namespaced=True)
                )
            else:
                logger.debug("Skipping metric descriptor %s", descriptor.type)
        return metrics

    def _get_metric_values(
        self, response: ListTimeSeriesResponse, group_resource: GroupResource, metric_name: str
    ) -> MetricValues:
        return aggregate_time_series(response, self.resource_model, group_resource, metric_name)

    def _metric_for(
        self, value: Quantity, group_resource: GroupResource, namespace: str, name: str, metric_name: str
    ) -> MetricValue:
        # NOTE: Mapping errors are propagated as they are
        kind = self.mapper.kind_for(group_resource)

        return MetricValue(
            described_object=ObjectReference(
                api_version=f"{group_resource.group}/{API_VERSION_INTERNAL}",
                kind=kind,
                name=name,
                namespace=namespace,
            ),
            metric_name=metric_name,
            timestamp=self.clock.now(),
            value=value,
        )

    def _metrics_for(
        self,
        values: MetricValues,
        group_resource: GroupResource,
        metric_name: str,
        objects: Sequence[ObjectRef],
    ) -> list[MetricValue]:
        result: list[MetricValue] = []
        for object in objects:
            # An object the resource model can't identify never matches a series
            key = self.resource_model.resource_key(object)
            if key is None or key not in values:
                logger.debug("Metric '%s' not found for %s", metric_name, object)
                continue
            result.append(self._metric_for(values[key], group_resource, object.namespace, object.name, metric_name))
        return result


def split_into_batches(objects: Iterable[ObjectRef], n: int = ONE_OF_MAX) -> list[list[ObjectRef]]:
    """
    Splits objects into batches of at most n, so each batch fits into a single request.
    """

    if n < 1:
        raise ValueError("n must be at least one")

    it = iter(objects)
    batches = []
    while batch := list(itertools.islice(it, n)):
        batches.append(batch)
    return batches
