import dataclasses

import pytest

from shard_rebalancer.model import AllocationSettings, ClusterHealth, PassOutcome, PassReport, RoutingSnapshot


def test_allocation_settings_disable():
    assert AllocationSettings.disable().to_dict() == {"transient": {"cluster.routing.allocation.enable": "none"}}


def test_allocation_settings_enable():
    assert AllocationSettings.enable().to_dict() == {"transient": {"cluster.routing.allocation.enable": None}}


def test_allocation_settings_move():
    assert AllocationSettings.move("node-1", "node-2").to_dict() == {
        "transient": {
            "cluster.routing.allocation.exclude._name": "node-1",
            "cluster.routing.allocation.include._name": "node-2",
        }
    }


def test_routing_snapshot_from_dict():
    snapshot = RoutingSnapshot.from_dict({"routing_nodes": {"nodes": {"A": [{"shard": 0}], "B": []}}})
    assert list(snapshot.nodes.keys()) == ["A", "B"]
    assert len(snapshot.nodes["A"]) == 1
    assert len(snapshot.nodes["B"]) == 0


@pytest.mark.parametrize(
    "data",
    [
        {"routing_nodes": {"nodes": ["A", "B"]}},
        {"routing_nodes": {"nodes": {"A": "shard"}}},
    ],
)
def test_routing_snapshot_from_dict_unexpected_structure(data):
    with pytest.raises(TypeError):
        RoutingSnapshot.from_dict(data)


def test_routing_snapshot_is_immutable():
    entries = [{"shard": 0}]
    snapshot = RoutingSnapshot(nodes={"A": entries})
    entries.append({"shard": 1})
    assert len(snapshot.nodes["A"]) == 1
    with pytest.raises(TypeError):
        snapshot.nodes["B"] = []  # type: ignore[index]
    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot.nodes = {}  # type: ignore[misc]


def test_cluster_health_from_dict():
    health = ClusterHealth.from_dict({"status": "yellow", "cluster_name": "testdrive", "timed_out": False})
    assert health.status == "yellow"
    assert health.cluster_name == "testdrive"
    assert health.number_of_nodes is None


def test_pass_report_succeeded():
    assert PassReport(outcome=PassOutcome.BALANCED).succeeded is True
    assert PassReport(outcome=PassOutcome.MOVED, errors=["boom"]).succeeded is False
    assert PassReport(outcome=PassOutcome.FETCH_FAILED).succeeded is False
    assert PassReport().succeeded is False
