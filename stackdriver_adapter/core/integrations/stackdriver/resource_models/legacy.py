from __future__ import annotations

from typing import Optional, Sequence

from stackdriver_adapter.core.abstract.resource_models import BaseResourceModel
from stackdriver_adapter.core.integrations.stackdriver import filters
from stackdriver_adapter.core.integrations.stackdriver.exceptions import InvalidSelector, UnsupportedOperation
from stackdriver_adapter.core.models.objects import ObjectRef, ResourceModel
from stackdriver_adapter.core.models.stackdriver import TimeSeries


class LegacyResourceModel(BaseResourceModel):
    """
    The gke_container resource written by Heapster.

    Pods are identified by their uid only, and nodes have no resource of their own.
    """

    model = ResourceModel.Legacy
    supports_nodes = False

    def filter_for_cluster(self) -> str:
        # Location is skipped on purpose: Heapster may have set it incorrectly.
        return filters.join_filters(
            filters.equals("resource.label.project_id", self.config.project),
            filters.equals("resource.label.cluster_name", self.config.cluster),
            # Pod level rows only, container rows have a container name
            filters.equals("resource.label.container_name", ""),
        )

    def filter_for_any_pod(self) -> str:
        # Rows with an empty pod_id or the "machine" pod_id are node aggregates
        return filters.join_filters(
            filters.not_equals("resource.label.pod_id", ""),
            filters.not_equals("resource.label.pod_id", "machine"),
        )

    def filter_for_pods(self, pod_ids: Sequence[str]) -> str:
        return self.filter_for_names("resource.label.pod_id", pod_ids)

    def build_pods_filter(self, metric_name: str, pods: Sequence[ObjectRef], namespace: str) -> str:
        return filters.join_filters(
            self.filter_for_metric(metric_name),
            self.filter_for_cluster(),
            self.filter_for_pods([self.pod_id(pod) for pod in pods]),
        )

    def build_nodes_filter(self, metric_name: str, nodes: Sequence[ObjectRef]) -> str:
        raise UnsupportedOperation(
            "Root scoped metrics are not supported without new Stackdriver resource model enabled"
        )

    def build_descriptors_filter(self) -> str:
        return filters.join_filters(
            self.filter_for_metric_prefix(),
            self.filter_for_cluster(),
            self.filter_for_any_pod(),
        )

    def pod_id(self, pod: ObjectRef) -> str:
        if not pod.uid:
            raise InvalidSelector(f"{pod} has no uid, which the legacy resource model requires")
        return pod.uid

    def resource_key(self, object: ObjectRef) -> Optional[str]:
        return object.uid or None

    def metric_key(self, series: TimeSeries) -> str:
        return series.resource.labels.get("pod_id", "")
