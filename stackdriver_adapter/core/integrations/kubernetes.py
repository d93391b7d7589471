from __future__ import annotations

from typing import Optional, Protocol

from stackdriver_adapter.core.models.objects import NODES, PODS, GroupResource


class RESTMapper(Protocol):
    """Resolves a group resource to the kind reported in described objects."""

    def kind_for(self, group_resource: GroupResource) -> str:
        ...


class NoKindMatchError(LookupError):
    def __init__(self, group_resource: GroupResource) -> None:
        super().__init__(f"no matches for {group_resource}")
        self.group_resource = group_resource


class StaticRESTMapper:
    """
    A mapper that knows a fixed set of resources.

    The API server's discovery based mapper should be used when serving, this one covers pods and nodes.
    """

    def __init__(self, kinds: Optional[dict[GroupResource, str]] = None) -> None:
        self.kinds = kinds if kinds is not None else {PODS: "Pod", NODES: "Node"}

    def kind_for(self, group_resource: GroupResource) -> str:
        try:
            return self.kinds[group_resource]
        except KeyError:
            raise NoKindMatchError(group_resource) from None
