"""Base exporter: metric catalog plus the per-exporter collection engine"""
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence
from metrics.catalog import MetricCatalog, UP_METRIC, COLLECT_SECONDS_METRIC, build_fq_name
from metrics.models import CollectFunc, Metric, MetricDescriptor
from metrics.sink import PrometheusSink
from logging_config import get_logger, log_collection

logger = get_logger(__name__)

MEGABYTE = 1 << 20
GIGABYTE = 1 << 30


def generate_uuid() -> str:
    return str(uuid.uuid4())


@dataclass
class ExporterConfig:
    """Settings shared by every exporter built from one configuration"""
    client: Any
    prefix: str = "openstack"
    disabled_metrics: List[str] = field(default_factory=list)
    collect_time: bool = False
    disable_slow_metrics: bool = False
    disable_deprecated_metrics: bool = False
    const_labels: Dict[str, str] = field(default_factory=dict)
    identity_endpoint_type: Optional[str] = None
    uuid_gen: Callable[[], str] = generate_uuid

    @classmethod
    def from_config(cls, config, client, uuid_gen: Optional[Callable[[], str]] = None) -> "ExporterConfig":
        return cls(
            client=client,
            prefix=config.prefix,
            disabled_metrics=config.get_disabled_metrics(),
            collect_time=config.collect_time,
            disable_slow_metrics=config.disable_slow_metrics,
            disable_deprecated_metrics=config.disable_deprecated_metrics,
            const_labels=config.get_const_labels(),
            identity_endpoint_type=config.get_identity_endpoint_type(),
            uuid_gen=uuid_gen or generate_uuid,
        )


@dataclass
class CollectionResult:
    """Outcome of one collection pass of an exporter"""
    metrics_count: int
    metrics_down: int
    duration: float

    @property
    def up(self) -> int:
        # Down only when every collectible metric failed
        return 0 if self.metrics_down >= self.metrics_count else 1


class BaseExporter(ABC):
    """Base class for all resource-domain exporters"""

    def __init__(self, config: ExporterConfig, metrics: Optional[Sequence[Metric]] = None):
        self.config = config
        self.catalog = MetricCatalog(
            exporter_name=self.name,
            full_name=self.get_name(),
            disabled_metrics=config.disabled_metrics,
            const_labels=config.const_labels,
        )
        for metric in metrics if metrics is not None else self.default_metrics():
            if self._is_deprecated_metric(metric):
                logger.debug(f"Skipping deprecated metric {metric.name}", exporter=self.name)
                continue
            if self._is_slow_metric(metric):
                logger.debug(f"Skipping slow metric {metric.name}", exporter=self.name)
                continue
            self.add_metric(metric.name, metric.fn, metric.labels, metric.deprecated_version)
        self.catalog.seal()

    @property
    @abstractmethod
    def name(self) -> str:
        """Exporter name, e.g. the API it polls"""
        pass

    def default_metrics(self) -> Sequence[Metric]:
        """Metrics registered when none are passed explicitly"""
        return ()

    @property
    def client(self):
        return self.config.client

    def get_name(self) -> str:
        return build_fq_name(self.config.prefix, self.name)

    def metric_is_disabled(self, name: str) -> bool:
        return self.catalog.is_disabled(name)

    def _is_slow_metric(self, metric: Metric) -> bool:
        return self.config.disable_slow_metrics and metric.slow

    def _is_deprecated_metric(self, metric: Metric) -> bool:
        return self.config.disable_deprecated_metrics and bool(metric.deprecated_version)

    def add_metric(self, name: str, fn: Optional[CollectFunc] = None, labels: Sequence[str] = (),
                   deprecated_version: str = "", const_labels: Optional[Dict[str, str]] = None) -> None:
        self.catalog.register(name, fn, labels, deprecated_version, const_labels)

    def describe(self) -> List[MetricDescriptor]:
        return list(self.catalog)

    def uuid(self) -> str:
        return self.config.uuid_gen()

    def emit(self, sink: PrometheusSink, name: str, value: float, *label_values) -> None:
        """Send one sample of metric name to the sink.

        Samples of metrics disabled in configuration are dropped; a name that
        was never part of the catalog raises MetricNotRegisteredError.
        """
        if name not in self.catalog and self.catalog.is_disabled(name):
            return
        sink.add(self.catalog.get(name), value, label_values)

    def run_collection(self, descriptor: MetricDescriptor, sink: PrometheusSink) -> None:
        logger.info(f"Collecting metrics for exporter: {self.get_name()}, metric: {descriptor.name}")
        start = time.perf_counter()
        descriptor.fn(self, sink)
        logger.info(f"Collected metrics for exporter: {self.get_name()}, metric: {descriptor.name}")
        if self.config.collect_time:
            sink.add(self.catalog.get(COLLECT_SECONDS_METRIC), time.perf_counter() - start, (descriptor.name,))

    def collect(self, sink: PrometheusSink) -> CollectionResult:
        """Run every collectible metric once and finish with the up sample"""
        start = time.perf_counter()
        metrics_down = 0
        collectible = self.catalog.collectible()

        for descriptor in collectible:
            try:
                self.run_collection(descriptor, sink)
            except Exception as e:
                logger.error(
                    f"Failed to collect metric for exporter: {self.name}, error: "
                    f"failed to collect metric: {descriptor.name}, error: {e}",
                    exporter=self.get_name(),
                    metric=descriptor.name,
                    error_type=type(e).__name__,
                    exc_info=True
                )
                metrics_down += 1

        result = CollectionResult(
            metrics_count=len(collectible),
            metrics_down=metrics_down,
            duration=time.perf_counter() - start,
        )
        if UP_METRIC in self.catalog:
            sink.add(self.catalog.get(UP_METRIC), result.up)
        log_collection(logger, self.get_name(), result.metrics_count, result.metrics_down, result.duration)
        return result
