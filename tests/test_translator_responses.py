import logging
from unittest.mock import Mock

import pytest

from stackdriver_adapter.core.integrations.kubernetes import NoKindMatchError, StaticRESTMapper
from stackdriver_adapter.core.integrations.stackdriver.exceptions import BackendContractViolation, MetricNotFound
from stackdriver_adapter.core.models.objects import NODES, PODS, GroupResource, ObjectRef
from stackdriver_adapter.core.models.quantity import Quantity
from stackdriver_adapter.core.translator import Translator

from .conftest import NOW
from .factories import legacy_series, node_series, pod_series, response


class TestSingleObject:
    def test_pod_value(self, translator):
        value = translator.get_response_for_single_object(
            response(pod_series("default", "pod-a", 3), pod_series("default", "pod-a", 4)),
            PODS,
            "my-metric",
            "default",
            "pod-a",
        )

        assert value.described_object.api_version == "/__internal"
        assert value.described_object.kind == "Pod"
        assert value.described_object.name == "pod-a"
        assert value.described_object.namespace == "default"
        assert value.metric_name == "my-metric"
        assert value.timestamp == NOW
        assert value.value == Quantity.from_int(7)

    def test_node_value(self, translator):
        value = translator.get_response_for_single_object(
            response(node_series("node-1", 0.5)), NODES, "my-metric", "", "node-1"
        )

        assert value.described_object.kind == "Node"
        assert value.described_object.namespace == ""
        assert str(value.value) == "500m"

    def test_more_than_one_object(self, translator):
        with pytest.raises(BackendContractViolation, match="received 2 values"):
            translator.get_response_for_single_object(
                response(pod_series("default", "pod-a", 1), pod_series("default", "pod-b", 1)),
                PODS,
                "my-metric",
                "default",
                "pod-a",
            )

    def test_no_series(self, translator):
        with pytest.raises(MetricNotFound):
            translator.get_response_for_single_object(response(), PODS, "my-metric", "default", "pod-a")

    def test_serialization(self, translator):
        value = translator.get_response_for_single_object(
            response(pod_series("default", "pod-a", 1.25)), PODS, "my-metric", "default", "pod-a"
        )

        assert value.model_dump(mode="json", by_alias=True) == {
            "describedObject": {"apiVersion": "/__internal", "kind": "Pod", "name": "pod-a", "namespace": "default"},
            "metricName": "my-metric",
            "timestamp": "2024-01-02T03:04:05Z",
            "value": "1250m",
        }


class TestMultipleObjects:
    def test_follows_requested_order(self, translator):
        objects = [ObjectRef.pod("pod-c", "default"), ObjectRef.pod("pod-a", "default"), ObjectRef.pod("pod-b", "default")]
        values = translator.get_response_for_multiple_objects(
            response(
                pod_series("default", "pod-a", 1),
                pod_series("default", "pod-b", 2),
                pod_series("default", "pod-c", 3),
            ),
            objects,
            PODS,
            "my-metric",
        )

        assert [value.described_object.name for value in values] == ["pod-c", "pod-a", "pod-b"]
        assert [value.value.value for value in values] == [3, 1, 2]

    def test_skips_objects_without_series(self, translator, caplog):
        caplog.set_level(logging.DEBUG, logger="stackdriver-adapter")
        objects = [ObjectRef.pod("pod-a", "default"), ObjectRef.pod("pod-b", "default")]
        values = translator.get_response_for_multiple_objects(
            response(pod_series("default", "pod-b", 2)), objects, PODS, "my-metric"
        )

        assert [value.described_object.name for value in values] == ["pod-b"]
        assert "Metric 'my-metric' not found for Pod default/pod-a" in caplog.text

    def test_ignores_series_of_other_namespaces(self, translator):
        objects = [ObjectRef.pod("pod-a", "default")]
        values = translator.get_response_for_multiple_objects(
            response(pod_series("other", "pod-a", 2)), objects, PODS, "my-metric"
        )

        assert values == []

    def test_nodes(self, translator):
        objects = [ObjectRef.node("node-1"), ObjectRef.node("node-2")]
        values = translator.get_response_for_multiple_objects(
            response(node_series("node-2", 10), node_series("node-1", 20)), objects, NODES, "my-metric"
        )

        assert [(value.described_object.name, value.value.value) for value in values] == [("node-1", 20), ("node-2", 10)]

    def test_legacy_model_matches_by_uid(self, legacy_translator):
        objects = [ObjectRef.pod("pod-a", "default", uid="uid-1"), ObjectRef.pod("pod-b", "default", uid="uid-2")]
        values = legacy_translator.get_response_for_multiple_objects(
            response(legacy_series("uid-2", 4)), objects, PODS, "my-metric"
        )

        assert len(values) == 1
        assert values[0].described_object.name == "pod-b"
        assert values[0].described_object.namespace == "default"

    def test_legacy_model_skips_pods_without_uid(self, legacy_translator, caplog):
        caplog.set_level(logging.DEBUG, logger="stackdriver-adapter")
        objects = [ObjectRef.pod("pod-a", "default"), ObjectRef.pod("pod-b", "default", uid="uid-2")]
        values = legacy_translator.get_response_for_multiple_objects(
            response(legacy_series("uid-2", 4)), objects, PODS, "my-metric"
        )

        assert [value.described_object.name for value in values] == ["pod-b"]
        assert values[0].value == Quantity.from_int(4)
        assert "Metric 'my-metric' not found for Pod default/pod-a" in caplog.text

    def test_no_series(self, translator):
        with pytest.raises(MetricNotFound):
            translator.get_response_for_multiple_objects(response(), [ObjectRef.node("node-1")], NODES, "my-metric")


class TestKindMapping:
    def test_mapper_is_used(self, config, clock):
        mapper = Mock()
        mapper.kind_for.return_value = "Widget"
        translator = Translator(config, clock=clock, mapper=mapper)
        widgets = GroupResource(group="example.com", resource="widgets")

        value = translator.get_response_for_single_object(
            response(pod_series("default", "w-1", 1)), widgets, "my-metric", "default", "w-1"
        )

        mapper.kind_for.assert_called_once_with(widgets)
        assert value.described_object.kind == "Widget"
        assert value.described_object.api_version == "example.com/__internal"

    def test_mapping_errors_propagate(self, config, clock):
        translator = Translator(config, clock=clock, mapper=StaticRESTMapper(kinds={}))

        with pytest.raises(NoKindMatchError):
            translator.get_response_for_single_object(
                response(pod_series("default", "pod-a", 1)), PODS, "my-metric", "default", "pod-a"
            )

    def test_mapping_errors_abort_batches(self, config, clock):
        mapper = Mock()
        mapper.kind_for.side_effect = RuntimeError("discovery failed")
        translator = Translator(config, clock=clock, mapper=mapper)

        with pytest.raises(RuntimeError, match="discovery failed"):
            translator.get_response_for_multiple_objects(
                response(pod_series("default", "pod-a", 1)), [ObjectRef.pod("pod-a", "default")], PODS, "my-metric"
            )
