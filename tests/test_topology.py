"""Tests for host zone and aggregate labeling"""
from utils.topology import build_host_topology, is_zone_aggregate
from fakes import record


def aggregate(name, hosts, zone=None, metadata=None):
    return record(name=name, hosts=hosts, availability_zone=zone, metadata=metadata or {})


class TestHostTopology:
    """Test building host maps from aggregates"""

    def test_zone_marker_aggregate_excluded_from_label(self):
        topology = build_host_topology([
            aggregate("az1-marker", ["compute-1"], zone="az1", metadata={"availability_zone": "az1"}),
            aggregate("gpu", ["compute-1"], metadata={"gpu": "true"}),
        ])

        assert topology.zone("compute-1") == "az1"
        assert topology.aggregates_label("compute-1") == "gpu"

    def test_aggregates_are_sorted(self):
        topology = build_host_topology([
            aggregate("ssd", ["compute-1"], metadata={"disk": "ssd"}),
            aggregate("gpu", ["compute-1"], metadata={"gpu": "true"}),
            aggregate("big", ["compute-1", "compute-2"]),
        ])

        assert topology.aggregates_label("compute-1") == "big,gpu,ssd"
        assert topology.aggregates_label("compute-2") == "big"

    def test_zone_with_extra_metadata_is_labeled(self):
        topology = build_host_topology([
            aggregate("fast", ["compute-1"], zone="az2", metadata={"availability_zone": "az2", "tier": "fast"}),
        ])

        assert topology.zone("compute-1") == "az2"
        assert topology.aggregates_label("compute-1") == "fast"

    def test_last_zone_wins(self):
        topology = build_host_topology([
            aggregate("first", ["compute-1"], zone="az1", metadata={"availability_zone": "az1"}),
            aggregate("second", ["compute-1"], zone="az2", metadata={"availability_zone": "az2"}),
        ])

        assert topology.zone("compute-1") == "az2"

    def test_unknown_host(self):
        topology = build_host_topology([])

        assert topology.zone("compute-9") == ""
        assert topology.aggregates_label("compute-9") == ""
        assert topology.zone(None) == ""

    def test_aggregate_without_hosts(self):
        topology = build_host_topology([aggregate("empty", None, zone="az1")])

        assert topology.host_zone == {}


def test_is_zone_aggregate():
    assert is_zone_aggregate(aggregate("a", [], metadata={"availability_zone": "az1"}))
    assert not is_zone_aggregate(aggregate("b", [], metadata={"availability_zone": "az1", "x": "y"}))
    assert not is_zone_aggregate(aggregate("c", []))
