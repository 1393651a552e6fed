"""Per-exporter metric catalog"""
from typing import Dict, Iterator, List, Optional, Sequence
from .models import CollectFunc, MetricDescriptor
from exceptions import CatalogSealedError, MetricNotRegisteredError
from logging_config import get_logger

logger = get_logger(__name__)

UP_METRIC = "up"
COLLECT_SECONDS_METRIC = "openstack_metric_collect_seconds"


def build_fq_name(*parts: str) -> str:
    """Join non-empty name parts with underscores"""
    return "_".join(part for part in parts if part)


class MetricCatalog:
    """Mapping from metric name to descriptor for a single exporter.

    The catalog is filled once while its exporter is constructed and then
    sealed; scrapes only read it. Two implicit descriptors are created on the
    first registration: ``up`` for the exporter health and the shared
    collection time gauge labeled by metric name.
    """

    def __init__(self, exporter_name: str, full_name: str,
                 disabled_metrics: Optional[Sequence[str]] = None,
                 const_labels: Optional[Dict[str, str]] = None):
        self.exporter_name = exporter_name
        self.full_name = full_name
        self.const_labels = dict(const_labels or {})
        self._disabled = set(disabled_metrics or [])
        self._descriptors: Dict[str, MetricDescriptor] = {}
        self._sealed = False

    def is_disabled(self, name: str) -> bool:
        """Check if <exporter>-<name> was disabled in configuration"""
        return f"{self.exporter_name}-{name}" in self._disabled

    def register(self, name: str, fn: Optional[CollectFunc] = None,
                 label_names: Sequence[str] = (), deprecated_since: str = "",
                 const_labels: Optional[Dict[str, str]] = None) -> None:
        """Register a metric; re-registering an existing name is a no-op"""
        if self._sealed:
            raise CatalogSealedError(f"catalog of exporter {self.full_name} is sealed, cannot add {name}")

        if self.is_disabled(name):
            logger.warning(
                f"metric: {name} has been disabled on {self.exporter_name} exporter, not collecting metrics",
                exporter=self.exporter_name,
                metric=name
            )
            return

        if deprecated_since:
            logger.warning(
                f"metric: {name} has been deprecated on {self.exporter_name} exporter in version "
                f"{deprecated_since} and it will be removed in next release",
                exporter=self.exporter_name,
                metric=name,
                deprecated_since=deprecated_since
            )

        labels = dict(self.const_labels)
        labels.update(const_labels or {})

        if not self._descriptors:
            self._add_implicit_descriptors(labels)

        if name in self._descriptors:
            return

        logger.info(f"Adding metric: {name} to exporter: {self.exporter_name}")
        self._descriptors[name] = MetricDescriptor(
            name=name,
            fq_name=build_fq_name(self.full_name, name),
            documentation=name,
            label_names=tuple(label_names),
            const_labels=labels,
            fn=fn
        )

    def _add_implicit_descriptors(self, const_labels: Dict[str, str]) -> None:
        self._descriptors[UP_METRIC] = MetricDescriptor(
            name=UP_METRIC,
            fq_name=build_fq_name(self.full_name, UP_METRIC),
            documentation="up",
            const_labels=dict(const_labels)
        )
        self._descriptors[COLLECT_SECONDS_METRIC] = MetricDescriptor(
            name=COLLECT_SECONDS_METRIC,
            fq_name=COLLECT_SECONDS_METRIC,
            documentation="Time needed to collect metric from OpenStack API",
            label_names=("openstack_metric",),
            const_labels={"openstack_service": self.full_name}
        )

    def seal(self) -> None:
        """Finish construction; later registrations raise CatalogSealedError"""
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def get(self, name: str) -> MetricDescriptor:
        try:
            return self._descriptors[name]
        except KeyError:
            raise MetricNotRegisteredError(self.full_name, name) from None

    def __contains__(self, name: str) -> bool:
        return name in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)

    def __iter__(self) -> Iterator[MetricDescriptor]:
        return iter(list(self._descriptors.values()))

    def names(self) -> List[str]:
        return list(self._descriptors.keys())

    def collectible(self) -> List[MetricDescriptor]:
        """Descriptors that carry a collection function"""
        return [d for d in self._descriptors.values() if d.is_collectible]
