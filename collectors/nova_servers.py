"""Server inventory metrics"""
from .nova import map_server_status, record_field
from metrics.models import Metric


def list_all_servers(exporter, sink):
    """Total number of servers plus a status series for each of them"""
    servers = exporter.client.list("servers")

    exporter.emit(sink, "total_vms", len(servers))

    for server in servers:
        exporter.emit(sink, "server_status", map_server_status(server.status), server.id, server.status,
                      server.name, server.project_id, server.user_id, server.access_ipv4, server.access_ipv6,
                      server.host_id, server.hypervisor_hostname, server.id, server.availability_zone,
                      record_field(server.flavor, "id"))


COMPUTE_TOTAL_VMS_METRICS = [
    Metric("total_vms", fn=list_all_servers),
    Metric("server_status", ("id", "status", "name", "tenant_id", "user_id", "address_ipv4", "address_ipv6",
                             "host_id", "hypervisor_hostname", "uuid", "availability_zone", "flavor_id")),
]
