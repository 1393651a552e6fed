"""Nova (compute) exporter and its base metrics"""
from .base import BaseExporter, GIGABYTE, MEGABYTE
from metrics.models import Metric
from utils.topology import build_host_topology

HYPERVISOR_LABELS = ("hostname", "availability_zone", "aggregates")

SERVER_STATUSES = [
    "ACTIVE",
    "BUILD",              # not finished the original build process
    "BUILD(spawning)",    # still building but networking works (HP Cloud specific)
    "DELETED",
    "ERROR",
    "HARD_REBOOT",
    "PASSWORD",           # password is being reset
    "REBOOT",             # soft reboot
    "REBUILD",            # being rebuilt from an image
    "RESCUE",
    "RESIZE",
    "SHUTOFF",            # powered down, but not through the compute API
    "SUSPENDED",
    "UNKNOWN",
    "VERIFY_RESIZE",      # awaiting confirmation after a move or resize
    "MIGRATING",          # live migration in progress
    "PAUSED",
    "REVERT_RESIZE",      # failed resize or migration being cleaned up
    "SHELVED",
    "SHELVED_OFFLOADED",  # shelved and removed from the compute host
    "SOFT_DELETED",       # deleted but kept for a configurable amount of time
]


def map_server_status(status: str) -> int:
    """Index of status in SERVER_STATUSES, -1 if unknown"""
    try:
        return SERVER_STATUSES.index(status)
    except ValueError:
        return -1


def record_field(record, key: str, default=None):
    """Read key from a record that may be a mapping or an object"""
    if record is None:
        return default
    if isinstance(record, dict):
        return record.get(key, default)
    return getattr(record, key, default)


class NovaExporter(BaseExporter):
    """Exporter for the OpenStack compute API"""
    name = "nova"


def list_flavors(exporter, sink):
    exporter.emit(sink, "flavors", len(exporter.client.list("flavors")))


def list_availability_zones(exporter, sink):
    exporter.emit(sink, "availability_zones", len(exporter.client.list("availability_zones")))


def list_compute_security_groups(exporter, sink):
    exporter.emit(sink, "security_groups", len(exporter.client.list("security_groups")))


def list_agent_states(exporter, sink):
    """Report state of each compute service"""
    for service in exporter.client.list("compute_services"):
        state = 1 if service.state == "up" else 0
        exporter.emit(sink, "agent_state", state, service.id, service.host, service.binary,
                      service.status, service.availability_zone, service.disabled_reason)


def list_hypervisors(exporter, sink):
    """Per-hypervisor utilization labeled with its availability zone and aggregates"""
    hypervisors = exporter.client.list("hypervisors")
    topology = build_host_topology(exporter.client.list("aggregates"))

    for hypervisor in hypervisors:
        host = record_field(hypervisor.service_details, "host")
        labels = (hypervisor.name, topology.zone(host), topology.aggregates_label(host))

        exporter.emit(sink, "running_vms", hypervisor.running_vms or 0, *labels)
        exporter.emit(sink, "current_workload", hypervisor.current_workload or 0, *labels)
        exporter.emit(sink, "vcpus_available", hypervisor.vcpus or 0, *labels)
        exporter.emit(sink, "vcpus_used", hypervisor.vcpus_used or 0, *labels)
        exporter.emit(sink, "memory_available_bytes", (hypervisor.memory_size or 0) * MEGABYTE, *labels)
        exporter.emit(sink, "memory_used_bytes", (hypervisor.memory_used or 0) * MEGABYTE, *labels)
        exporter.emit(sink, "local_storage_available_bytes", (hypervisor.local_disk_size or 0) * GIGABYTE, *labels)
        exporter.emit(sink, "local_storage_used_bytes", (hypervisor.local_disk_used or 0) * GIGABYTE, *labels)
        exporter.emit(sink, "free_disk_bytes", (hypervisor.local_disk_free or 0) * GIGABYTE, *labels)


def list_usage(exporter, sink):
    """Local disk of every server, per tenant"""
    for tenant in exporter.client.list("usages", detailed=True):
        for server in tenant.server_usages or []:
            exporter.emit(sink, "server_local_gb", record_field(server, "local_gb", 0),
                          record_field(server, "name"), record_field(server, "instance_id"),
                          tenant.project_id)


COMPUTE_BASE_METRICS = [
    Metric("flavors", fn=list_flavors),
    Metric("availability_zones", fn=list_availability_zones),
    Metric("security_groups", fn=list_compute_security_groups),
    Metric("agent_state", ("id", "hostname", "service", "adminState", "zone", "disabledReason"),
           fn=list_agent_states),
    Metric("running_vms", HYPERVISOR_LABELS, fn=list_hypervisors),
    Metric("current_workload", HYPERVISOR_LABELS),
    Metric("vcpus_available", HYPERVISOR_LABELS),
    Metric("vcpus_used", HYPERVISOR_LABELS),
    Metric("memory_available_bytes", HYPERVISOR_LABELS),
    Metric("memory_used_bytes", HYPERVISOR_LABELS),
    Metric("local_storage_available_bytes", HYPERVISOR_LABELS),
    Metric("local_storage_used_bytes", HYPERVISOR_LABELS),
    Metric("free_disk_bytes", HYPERVISOR_LABELS),
    Metric("server_local_gb", ("name", "id", "tenant_id"), fn=list_usage, slow=True),
]
