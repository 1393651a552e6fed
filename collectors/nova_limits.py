"""Per-project compute limits"""
from metrics.models import Metric
from exceptions import ConfigurationError

LIMIT_LABELS = ("tenant", "tenant_id")

# metric name -> attribute of the absolute limits
ABSOLUTE_LIMITS = [
    ("limits_vcpus_max", "total_cores"),
    ("limits_vcpus_used", "total_cores_used"),
    ("limits_memory_max", "total_ram"),
    ("limits_memory_used", "total_ram_used"),
    ("limits_instances_used", "instances_used"),
    ("limits_instances_max", "instances"),
]


def list_compute_limits(exporter, sink):
    """Compute limits of every project.

    Projects come from the identity API, reached through the identity
    endpoint type configured for this exporter; the limits themselves come
    from the compute API.
    """
    endpoint_type = exporter.config.identity_endpoint_type
    if not endpoint_type:
        raise ConfigurationError("no endpoint type available to create identity client")

    identity = exporter.client.for_service_interface("identity", endpoint_type)
    for project in identity.list("projects"):
        limits = exporter.client.get("limits", tenant_id=project.id)
        for metric_name, attribute in ABSOLUTE_LIMITS:
            exporter.emit(sink, metric_name, getattr(limits.absolute, attribute) or 0, project.name, project.id)


COMPUTE_LIMIT_METRICS = [
    Metric("limits_vcpus_max", LIMIT_LABELS, fn=list_compute_limits, slow=True),
    Metric("limits_vcpus_used", LIMIT_LABELS, slow=True),
    Metric("limits_memory_max", LIMIT_LABELS, slow=True),
    Metric("limits_memory_used", LIMIT_LABELS, slow=True),
    Metric("limits_instances_used", LIMIT_LABELS, slow=True),
    Metric("limits_instances_max", LIMIT_LABELS, slow=True),
]
