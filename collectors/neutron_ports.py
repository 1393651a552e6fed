"""Neutron port metrics"""
from metrics.models import Metric

LOADBALANCER_DEVICE_OWNER = "neutron:LOADBALANCERV2"


def list_ports(exporter, sink):
    """Per-port info plus counts of ports without IPs and inactive load balancer ports"""
    ports = exporter.client.list("ports")

    ports_without_ip = 0
    lb_ports_inactive = 0
    for port in ports:
        if port.status == "ACTIVE" and not port.fixed_ips:
            ports_without_ip += 1

        if port.device_owner == LOADBALANCER_DEVICE_OWNER and port.status != "ACTIVE":
            lb_ports_inactive += 1

        exporter.emit(sink, "port", 1, port.id, port.network_id, port.mac_address, port.device_owner,
                      port.status, port.binding_vif_type, bool(port.is_admin_state_up))

    # ports and ports_lb_not_active can be derived from the port series with count()
    exporter.emit(sink, "ports", len(ports))
    exporter.emit(sink, "ports_lb_not_active", lb_ports_inactive)
    exporter.emit(sink, "ports_no_ips", ports_without_ip)


NETWORK_PORT_METRICS = [
    Metric("port", ("uuid", "network_id", "mac_address", "device_owner", "status", "binding_vif_type",
                    "admin_state_up"), fn=list_ports),
    Metric("ports"),
    Metric("ports_no_ips"),
    Metric("ports_lb_not_active"),
]
