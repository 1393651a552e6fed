"""Neutron (network) exporter and its base metrics"""
from .base import BaseExporter
from metrics.models import Metric
from utils.subnets import pools_with_subnets

IP_AVAILABILITY_LABELS = ("network_id", "network_name", "ip_version", "cidr", "subnet_name", "project_id")
SUBNET_POOL_LABELS = ("ip_version", "prefix", "prefix_length", "project_id", "subnet_pool_id", "subnet_pool_name")


class NeutronExporter(BaseExporter):
    """Exporter for the OpenStack network API"""
    name = "neutron"


def list_floating_ips(exporter, sink):
    """Count floating IPs and those associated to a fixed IP but not ACTIVE"""
    floating_ips = exporter.client.list("floating_ips")

    failed = 0
    for fip in floating_ips:
        exporter.emit(sink, "floating_ip", 1, fip.id, fip.floating_network_id, fip.router_id,
                      fip.status, fip.project_id, fip.floating_ip_address)
        if fip.fixed_ip_address and fip.status != "ACTIVE":
            failed += 1

    exporter.emit(sink, "floating_ips", len(floating_ips))
    exporter.emit(sink, "floating_ips_associated_not_active", failed)


def list_agent_states(exporter, sink):
    """Report liveness of each network agent"""
    for agent in exporter.client.list("network_agents"):
        state = 1 if agent.is_alive else 0
        admin_state = "up" if agent.is_admin_state_up else "down"
        agent_id = agent.id or exporter.uuid()
        exporter.emit(sink, "agent_state", state, agent_id, agent.host, agent.binary,
                      admin_state, agent.availability_zone)


def list_networks(exporter, sink):
    exporter.emit(sink, "networks", len(exporter.client.list("networks")))


def list_subnets(exporter, sink):
    exporter.emit(sink, "subnets", len(exporter.client.list("subnets")))


def list_network_ip_availabilities(exporter, sink):
    """Total and used IPs per subnet of every network"""
    for availability in exporter.client.list("network_ip_availabilities"):
        project_id = availability.project_id or getattr(availability, "tenant_id", None) or ""

        for subnet in availability.subnet_ip_availability or []:
            labels = (availability.network_id, availability.network_name, str(subnet.get("ip_version", "")),
                      subnet.get("cidr", ""), subnet.get("subnet_name", ""), project_id)
            exporter.emit(sink, "network_ip_availabilities_total", float(subnet.get("total_ips")), *labels)
            exporter.emit(sink, "network_ip_availabilities_used", float(subnet.get("used_ips")), *labels)


def list_subnets_per_pool(exporter, sink):
    """Used, free and total subnets of every allowed size in every subnet pool"""
    subnets = exporter.client.list("subnets")
    pools = exporter.client.list("subnet_pools")

    for pool in pools_with_subnets(pools, subnets):
        for usage in pool.usage():
            labels = (str(pool.ip_version), str(usage.prefix), str(usage.prefix_length),
                      pool.project_id, pool.id, pool.name)
            exporter.emit(sink, "subnets_total", usage.total, *labels)
            exporter.emit(sink, "subnets_used", usage.used, *labels)
            exporter.emit(sink, "subnets_free", usage.free, *labels)


def list_security_groups(exporter, sink):
    exporter.emit(sink, "security_groups", len(exporter.client.list("security_groups")))


NETWORK_BASE_METRICS = [
    Metric("floating_ips", fn=list_floating_ips),
    Metric("floating_ips_associated_not_active"),
    Metric("floating_ip", ("id", "floating_network_id", "router_id", "status", "project_id", "floating_ip_address")),
    Metric("networks", fn=list_networks),
    Metric("subnets", fn=list_subnets),
    Metric("agent_state", ("id", "hostname", "service", "adminState", "availability_zone"), fn=list_agent_states),
    Metric("network_ip_availabilities_total", IP_AVAILABILITY_LABELS, fn=list_network_ip_availabilities),
    Metric("network_ip_availabilities_used", IP_AVAILABILITY_LABELS),
    Metric("subnets_total", SUBNET_POOL_LABELS, fn=list_subnets_per_pool),
    Metric("subnets_used", SUBNET_POOL_LABELS),
    Metric("subnets_free", SUBNET_POOL_LABELS),
]

NETWORK_SG_METRICS = [
    Metric("security_groups", fn=list_security_groups),
]
