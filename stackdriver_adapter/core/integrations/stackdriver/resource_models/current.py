from __future__ import annotations

from typing import Optional, Sequence

from stackdriver_adapter.core.abstract.resource_models import BaseResourceModel
from stackdriver_adapter.core.integrations.stackdriver import filters
from stackdriver_adapter.core.integrations.stackdriver.exceptions import BackendContractViolation
from stackdriver_adapter.core.models.objects import ObjectRef, ResourceModel
from stackdriver_adapter.core.models.stackdriver import TimeSeries

POD_RESOURCE_TYPE = "k8s_pod"
NODE_RESOURCE_TYPE = "k8s_node"


class CurrentResourceModel(BaseResourceModel):
    """
    The k8s_pod / k8s_node monitored resources.

    Series carry readable labels (namespace_name, pod_name, node_name) and are scoped by project, cluster and location.
    """

    model = ResourceModel.Current

    def filter_for_cluster(self) -> str:
        return filters.join_filters(
            filters.equals("resource.label.project_id", self.config.project),
            filters.equals("resource.label.cluster_name", self.config.cluster),
            filters.equals("resource.label.location", self.config.location),
        )

    def filter_for_pods(self, pod_names: Sequence[str], namespace: str) -> str:
        return filters.join_filters(
            filters.equals("resource.label.namespace_name", namespace),
            self.filter_for_names("resource.label.pod_name", pod_names),
        )

    def filter_for_nodes(self, node_names: Sequence[str]) -> str:
        return self.filter_for_names("resource.label.node_name", node_names)

    def build_pods_filter(self, metric_name: str, pods: Sequence[ObjectRef], namespace: str) -> str:
        return filters.join_filters(
            self.filter_for_metric(metric_name),
            self.filter_for_cluster(),
            self.filter_for_pods([pod.name for pod in pods], namespace),
            # Both schemas share label names, the type tells them apart
            filters.equals("resource.type", POD_RESOURCE_TYPE),
        )

    def build_nodes_filter(self, metric_name: str, nodes: Sequence[ObjectRef]) -> str:
        return filters.join_filters(
            self.filter_for_metric(metric_name),
            self.filter_for_cluster(),
            self.filter_for_nodes([node.name for node in nodes]),
            filters.equals("resource.type", NODE_RESOURCE_TYPE),
        )

    def build_descriptors_filter(self) -> str:
        return filters.join_filters(
            self.filter_for_metric_prefix(),
            self.filter_for_cluster(),
            filters.one_of("resource.type", [POD_RESOURCE_TYPE, NODE_RESOURCE_TYPE]),
        )

    def resource_key(self, object: ObjectRef) -> Optional[str]:
        return f"{object.namespace}:{object.name}"

    def metric_key(self, series: TimeSeries) -> str:
        labels = series.resource.labels
        if series.resource.type == POD_RESOURCE_TYPE:
            return f"{labels.get('namespace_name', '')}:{labels.get('pod_name', '')}"
        if series.resource.type == NODE_RESOURCE_TYPE:
            return f":{labels.get('node_name', '')}"

        raise BackendContractViolation(f"Stackdriver returned incorrect resource type {series.resource.type!r}")
