from __future__ import annotations

import enum
from typing import Literal, Optional, Union

import pydantic as pd
from kubernetes.client.models import V1Node, V1ObjectMeta, V1Pod

KindLiteral = Literal["Pod", "Node"]


class ResourceModel(str, enum.Enum):
    """The labeling convention Stackdriver uses to attribute time series to Kubernetes objects."""

    Legacy = "legacy"
    Current = "current"


class GroupResource(pd.BaseModel):
    model_config = pd.ConfigDict(frozen=True)

    group: str = ""
    resource: str

    def __str__(self) -> str:
        return f"{self.resource}.{self.group}" if self.group else self.resource


PODS = GroupResource(resource="pods")
NODES = GroupResource(resource="nodes")


class ObjectRef(pd.BaseModel):
    model_config = pd.ConfigDict(frozen=True)

    kind: KindLiteral
    name: str
    # NOTE: Nodes are cluster scoped, so their namespace is always empty
    namespace: str = ""
    # NOTE: Only used by the legacy resource model, which identifies pods by uid
    uid: Optional[str] = None

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.kind} {self.namespace}/{self.name}"
        return f"{self.kind} {self.name}"

    @pd.model_validator(mode="after")
    def validate_namespace(self) -> ObjectRef:
        if self.kind == "Node" and self.namespace:
            raise ValueError("Nodes are not namespaced")
        return self

    @classmethod
    def pod(cls, name: str, namespace: str, uid: Optional[str] = None) -> ObjectRef:
        return cls(kind="Pod", name=name, namespace=namespace, uid=uid)

    @classmethod
    def node(cls, name: str) -> ObjectRef:
        return cls(kind="Node", name=name)

    @classmethod
    def from_k8s(cls, obj: Union[V1Pod, V1Node]) -> ObjectRef:
        """
        Builds a reference from an object returned by the kubernetes client.

        Args:
        obj (V1Pod | V1Node): The listed object.

        Returns:
        ObjectRef: The reference, carrying the uid so it can be used with either resource model.
        """

        if isinstance(obj, V1Pod):
            return cls.from_metadata("Pod", obj.metadata)
        if isinstance(obj, V1Node):
            return cls.from_metadata("Node", obj.metadata)
        raise TypeError(f"Unsupported object type {type(obj).__name__}")

    @classmethod
    def from_metadata(cls, kind: KindLiteral, metadata: V1ObjectMeta) -> ObjectRef:
        return cls(
            kind=kind,
            name=metadata.name,
            namespace=(metadata.namespace or "") if kind == "Pod" else "",
            uid=metadata.uid,
        )
