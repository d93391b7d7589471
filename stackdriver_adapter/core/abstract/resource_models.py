from __future__ import annotations

import abc
from typing import ClassVar, Optional, Sequence, TypeVar

from stackdriver_adapter.core.integrations.stackdriver import filters
from stackdriver_adapter.core.integrations.stackdriver.exceptions import InvariantViolation
from stackdriver_adapter.core.models.config import Config
from stackdriver_adapter.core.models.objects import ObjectRef, ResourceModel
from stackdriver_adapter.core.models.stackdriver import TimeSeries

SelfRM = TypeVar("SelfRM", bound="BaseResourceModel")


# An abstract base class for the ways Stackdriver labels Kubernetes time series.
# Each resource model decides how a query is filtered and how a returned series is attributed to an object.
class BaseResourceModel(abc.ABC):
    """An abstract base class for a Stackdriver resource model.

    A resource model knows:
    - how to phrase a filter that selects the time series of a list of pods or nodes,
    - how to phrase a filter that selects the metric descriptors exposed by the adapter,
    - how to derive a resource key both from a requested object and from a returned time series.

    The two keys must be equal for the object a series belongs to, this is what joins a response back to the request.

    Subclasses are registered automatically using the __subclasses__ mechanism and looked up by `model`.
    """

    model: ClassVar[ResourceModel]
    supports_nodes: ClassVar[bool] = True

    def __init__(self, config: Config) -> None:
        self.config = config

    def __str__(self) -> str:
        return f"{self.model.value} resource model"

    # --------------------- Filters --------------------- #

    def filter_for_metric(self, metric_name: str) -> str:
        return filters.equals("metric.type", f"{self.config.metrics_prefix}/{metric_name}")

    def filter_for_metric_prefix(self) -> str:
        return filters.starts_with("metric.type", f"{self.config.metrics_prefix}/")

    @staticmethod
    def filter_for_names(label: str, names: Sequence[str]) -> str:
        if len(names) == 0:
            raise InvariantViolation(f"Filter for {label} requested with an empty list of values")
        return filters.equals_any(label, names)

    @abc.abstractmethod
    def filter_for_cluster(self) -> str:
        ...

    @abc.abstractmethod
    def build_pods_filter(self, metric_name: str, pods: Sequence[ObjectRef], namespace: str) -> str:
        """
        Builds the filter selecting `metric_name` time series of the given pods.

        Args:
        metric_name (str): The metric name without the metrics prefix.
        pods (Sequence[ObjectRef]): The pods, all from `namespace`.
        namespace (str): The namespace of the pods.

        Returns:
        str: The filter expression.
        """

    @abc.abstractmethod
    def build_nodes_filter(self, metric_name: str, nodes: Sequence[ObjectRef]) -> str:
        ...

    @abc.abstractmethod
    def build_descriptors_filter(self) -> str:
        ...

    # --------------------- Resource Keys --------------------- #

    @abc.abstractmethod
    def resource_key(self, object: ObjectRef) -> Optional[str]:
        """The key of a requested object, None if this resource model can't identify it."""

    @abc.abstractmethod
    def metric_key(self, series: TimeSeries) -> str:
        """The key of the object a returned time series belongs to."""

    # --------------------- Registry --------------------- #

    @classmethod
    def find(cls: type[SelfRM], model: ResourceModel) -> type[SelfRM]:
        resource_models = cls.get_all()
        if model in resource_models:
            return resource_models[model]

        raise ValueError(
            f"Unknown resource model: {model}. Available resource models: {', '.join(m.value for m in resource_models)}"
        )

    @classmethod
    def get_all(cls: type[SelfRM]) -> dict[ResourceModel, type[SelfRM]]:
        from stackdriver_adapter.core.integrations.stackdriver import resource_models as _  # noqa: F401

        return {sub_cls.model: sub_cls for sub_cls in cls.__subclasses__()}
