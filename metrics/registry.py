"""Metrics registry for managing exporters and orchestrating collection"""
from typing import Dict, Iterable, List, Optional, Sequence
from prometheus_client.core import Metric as MetricFamily
from .models import Metric
from .sink import PrometheusSink
from collectors.base import BaseExporter, CollectionResult, ExporterConfig
from collectors.neutron import NeutronExporter, NETWORK_BASE_METRICS, NETWORK_SG_METRICS
from collectors.neutron_ports import NETWORK_PORT_METRICS
from collectors.neutron_routers import NETWORK_ROUTER_METRICS
from collectors.nova import NovaExporter, COMPUTE_BASE_METRICS
from collectors.nova_limits import COMPUTE_LIMIT_METRICS
from collectors.nova_servers import COMPUTE_TOTAL_VMS_METRICS
from exceptions import ConfigurationError
from logging_config import get_logger, log_error

logger = get_logger(__name__)


# service -> (exporter class, default metrics)
SERVICES = {
    "network-base": (NeutronExporter, NETWORK_BASE_METRICS),
    "network-sg": (NeutronExporter, NETWORK_SG_METRICS),
    "network-port": (NeutronExporter, NETWORK_PORT_METRICS),
    "network-router": (NeutronExporter, NETWORK_ROUTER_METRICS),
    "compute-base": (NovaExporter, COMPUTE_BASE_METRICS),
    "compute-limit": (NovaExporter, COMPUTE_LIMIT_METRICS),
    "compute-total-vms": (NovaExporter, COMPUTE_TOTAL_VMS_METRICS),
}


def build_exporters(exporter_config: ExporterConfig, services: Sequence[str]) -> List[BaseExporter]:
    """Build one exporter per exporter class from the enabled services.

    Services sharing an exporter class (e.g. network-base and network-port)
    are merged into a single exporter so each metric name is registered once.
    """
    grouped: Dict[type, List[Metric]] = {}
    for service in services:
        if service not in SERVICES:
            raise ConfigurationError(f"couldn't find a handler for {service} exporter")
        exporter_class, metrics = SERVICES[service]
        grouped.setdefault(exporter_class, []).extend(metrics)

    exporters = []
    for exporter_class, metrics in grouped.items():
        exporter = exporter_class(exporter_config, metrics)
        logger.info(f"Enabled exporter: {exporter.get_name()}", metrics=len(exporter.catalog))
        exporters.append(exporter)
    return exporters


class MetricsRegistry:
    """Central registry for all exporters.

    Registered in a prometheus_client CollectorRegistry; every call to
    collect() is one scrape that polls the cloud API afresh.
    """

    def __init__(self, exporters: Optional[Iterable[BaseExporter]] = None):
        self.exporters: Dict[str, BaseExporter] = {}
        for exporter in exporters or []:
            self.register_exporter(exporter)

    @classmethod
    def from_config(cls, config, client) -> "MetricsRegistry":
        exporter_config = ExporterConfig.from_config(config, client)
        return cls(build_exporters(exporter_config, config.get_services()))

    def register_exporter(self, exporter: BaseExporter):
        """Register a new exporter"""
        if not isinstance(exporter, BaseExporter):
            raise ValueError("Exporter must inherit from BaseExporter")
        if exporter.get_name() in self.exporters:
            raise ValueError(f"Exporter {exporter.get_name()} is already registered")

        self.exporters[exporter.get_name()] = exporter
        logger.info(f"Registered exporter: {exporter.get_name()}")

    def get_exporter(self, name: str) -> Optional[BaseExporter]:
        """Get exporter by full name"""
        return self.exporters.get(name)

    def list_exporters(self) -> List[str]:
        """List all registered exporter names"""
        return list(self.exporters.keys())

    def collect_into(self, sink: PrometheusSink) -> Dict[str, CollectionResult]:
        """Run every exporter once, one after the other, into sink"""
        results = {}
        for name, exporter in self.exporters.items():
            try:
                results[name] = exporter.collect(sink)
            except Exception as e:
                # collect() isolates metric failures; reaching here is an emission bug
                log_error(logger, e, {"component": "metrics_registry", "exporter": name})
        return results

    def collect(self) -> Iterable[MetricFamily]:
        """prometheus_client collector hook"""
        sink = PrometheusSink()
        self.collect_into(sink)
        return sink.families()

    def get_exporter_status(self) -> Dict[str, Dict]:
        """Get catalog information for all exporters"""
        status = {}

        for name, exporter in self.exporters.items():
            status[name] = {
                "class": exporter.__class__.__name__,
                "metrics": {
                    descriptor.name: {
                        "fq_name": descriptor.fq_name,
                        "labels": list(descriptor.label_names),
                        "collectible": descriptor.is_collectible,
                    }
                    for descriptor in exporter.describe()
                },
            }

        return status
