"""Neutron router metrics"""
from metrics.models import Metric


def _gateway_network_id(router) -> str:
    gateway = getattr(router, "external_gateway_info", None) or {}
    return gateway.get("network_id") or ""


def list_routers(exporter, sink):
    """Count routers and those not ACTIVE; report the L3 agents hosting each router"""
    routers = exporter.client.list("routers")

    failed = 0
    for router in routers:
        if router.status != "ACTIVE":
            failed += 1

        for agent in exporter.client.list("router_l3_agents", router):
            state = 1 if agent.is_alive else 0
            exporter.emit(sink, "l3_agent_of_router", state, router.id, agent.id, agent.ha_state,
                          bool(agent.is_alive), bool(agent.is_admin_state_up), agent.host)

        exporter.emit(sink, "router", 1, router.id, router.name, router.project_id,
                      bool(router.is_admin_state_up), router.status, _gateway_network_id(router))

    exporter.emit(sink, "routers", len(routers))
    exporter.emit(sink, "routers_not_active", failed)


NETWORK_ROUTER_METRICS = [
    Metric("router", ("id", "name", "project_id", "admin_state_up", "status", "external_network_id")),
    Metric("routers", fn=list_routers),
    Metric("routers_not_active"),
    Metric("l3_agent_of_router", ("router_id", "l3_agent_id", "ha_state", "agent_alive", "agent_admin_up",
                                  "agent_host")),
]
