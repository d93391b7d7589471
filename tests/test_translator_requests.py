from datetime import timedelta

import pytest

from stackdriver_adapter.core.integrations.stackdriver.exceptions import (
    BatchTooLarge,
    InvalidSelector,
    UnsupportedOperation,
)
from stackdriver_adapter.core.models.objects import ObjectRef
from stackdriver_adapter.core.models.stackdriver import Aligner, to_query_params
from stackdriver_adapter.core.translator import Translator, split_into_batches
from stackdriver_adapter.utils.clock import FixedClock

from .conftest import NOW


def make_pods(n: int, namespace: str = "default") -> list[ObjectRef]:
    return [ObjectRef.pod(f"pod-{i}", namespace, uid=f"uid-{i}") for i in range(n)]


def make_nodes(n: int) -> list[ObjectRef]:
    return [ObjectRef.node(f"node-{i}") for i in range(n)]


class TestPodsRequest:
    def test_request_window(self, translator):
        request = translator.get_request_for_pods(make_pods(1), "my-metric", "default")

        assert request.name == "projects/my-project"
        assert request.interval.end_time == NOW
        assert request.interval.start_time == NOW - timedelta(seconds=120)
        assert request.aggregation.alignment_period == timedelta(seconds=120)
        assert request.aggregation.per_series_aligner == Aligner.ALIGN_NEXT_OLDER

    def test_query_params(self, translator):
        request = translator.get_request_for_pods(make_pods(1), "my-metric", "default")

        assert to_query_params(request) == {
            "filter": request.filter,
            "interval.startTime": "2024-01-02T03:02:05Z",
            "interval.endTime": "2024-01-02T03:04:05Z",
            "aggregation.perSeriesAligner": "ALIGN_NEXT_OLDER",
            "aggregation.alignmentPeriod": "120s",
        }

    def test_interval_in_whole_seconds(self, config):
        translator = Translator(config, clock=FixedClock(NOW + timedelta(microseconds=750000)))
        params = to_query_params(translator.get_request_for_pods(make_pods(1), "my-metric", "default"))

        assert params["interval.startTime"] == "2024-01-02T03:02:05Z"
        assert params["interval.endTime"] == "2024-01-02T03:04:05Z"

    @pytest.mark.parametrize("n", [1, 2, 50, 100])
    def test_every_name_appears_once(self, translator, n):
        pods = make_pods(n)
        request = translator.get_request_for_pods(pods, "my-metric", "default")

        for pod in pods:
            assert request.filter.count(f'"{pod.name}"') == 1
        assert ("one_of(" in request.filter) == (n > 1)

    @pytest.mark.parametrize("n", [1, 2, 100])
    def test_every_uid_appears_once_in_legacy_model(self, legacy_translator, n):
        pods = make_pods(n)
        request = legacy_translator.get_request_for_pods(pods, "my-metric", "default")

        for pod in pods:
            assert request.filter.count(f'"{pod.uid}"') == 1
        assert ("one_of(" in request.filter) == (n > 1)

    def test_empty_list(self, translator):
        with pytest.raises(InvalidSelector) as exc_info:
            translator.get_request_for_pods([], "my-metric", "default")

        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize("n", [101, 250])
    def test_too_many_pods(self, translator, n):
        with pytest.raises(BatchTooLarge) as exc_info:
            translator.get_request_for_pods(make_pods(n), "my-metric", "default")

        assert exc_info.value.status_code == 500
        assert exc_info.value.count == n
        assert exc_info.value.limit == 100


class TestNodesRequest:
    def test_nodes_request(self, translator):
        request = translator.get_request_for_nodes(make_nodes(3), "my-metric")

        assert 'resource.label.node_name = one_of("node-0","node-1","node-2")' in request.filter
        assert request.filter.endswith('resource.type = "k8s_node"')

    def test_empty_list(self, translator):
        with pytest.raises(InvalidSelector):
            translator.get_request_for_nodes([], "my-metric")

    def test_too_many_nodes(self, translator):
        with pytest.raises(BatchTooLarge):
            translator.get_request_for_nodes(make_nodes(101), "my-metric")

    @pytest.mark.parametrize("n", [0, 1, 101])
    def test_not_supported_by_legacy_model(self, legacy_translator, n):
        with pytest.raises(UnsupportedOperation) as exc_info:
            legacy_translator.get_request_for_nodes(make_nodes(n), "my-metric")

        assert exc_info.value.status_code == 501


class TestDescriptorsRequest:
    def test_current_model(self, translator):
        request = translator.list_metric_descriptors()

        assert request.name == "projects/my-project"
        assert request.filter.startswith('metric.type = starts_with("custom.googleapis.com/")')
        assert to_query_params(request) == {"filter": request.filter}

    def test_legacy_model(self, legacy_translator):
        request = legacy_translator.list_metric_descriptors()

        assert 'resource.label.pod_id != "machine"' in request.filter
        assert "resource.type" not in request.filter


def test_split_into_batches():
    pods = make_pods(250)
    batches = split_into_batches(pods)

    assert [len(batch) for batch in batches] == [100, 100, 50]
    assert [pod for batch in batches for pod in batch] == pods
    assert split_into_batches([]) == []

    with pytest.raises(ValueError):
        split_into_batches(pods, 0)
