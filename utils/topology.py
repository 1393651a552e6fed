"""Host to availability zone and aggregate mapping for hypervisor labels"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

AZ_METADATA_KEY = "availability_zone"


def is_zone_aggregate(aggregate) -> bool:
    """True if the aggregate only exists to set the availability zone of its hosts"""
    metadata = getattr(aggregate, "metadata", None) or {}
    return len(metadata) == 1 and AZ_METADATA_KEY in metadata


@dataclass
class HostTopology:
    """Snapshot of which zone and which aggregates each compute host belongs to"""
    host_zone: Dict[str, str] = field(default_factory=dict)
    host_aggregates: Dict[str, List[str]] = field(default_factory=dict)

    def zone(self, host: Optional[str]) -> str:
        return self.host_zone.get(host, "")

    def aggregates_label(self, host: Optional[str]) -> str:
        """Sorted, comma-joined aggregate names; empty if the host is in none"""
        return ",".join(sorted(self.host_aggregates.get(host, [])))


def build_host_topology(aggregates: Iterable) -> HostTopology:
    """Build host maps from aggregate records (name, availability_zone, hosts, metadata)"""
    topology = HostTopology()
    for aggregate in aggregates:
        zone_only = is_zone_aggregate(aggregate)
        zone = getattr(aggregate, "availability_zone", None)
        for host in getattr(aggregate, "hosts", None) or []:
            # last aggregate with a zone wins
            if zone:
                topology.host_zone[host] = zone
            if not zone_only:
                topology.host_aggregates.setdefault(host, []).append(aggregate.name)
    return topology
