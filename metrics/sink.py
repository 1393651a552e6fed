"""Per-scrape sample sink backed by prometheus_client metric families"""
from typing import Dict, Iterable, List, Sequence, Tuple
from prometheus_client.core import GaugeMetricFamily, Metric
from .models import MetricDescriptor
from exceptions import LabelArityError


def _label_value(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class PrometheusSink:
    """Accumulate samples for one scrape, grouped into one gauge family per metric name.

    Every series is a gauge, including agent states: prometheus_client would
    expose a counter as ``<name>_total``.
    """

    def __init__(self):
        self._families: Dict[str, Metric] = {}
        self._order: List[str] = []

    def add(self, descriptor: MetricDescriptor, value: float, label_values: Sequence = ()) -> None:
        """Add one sample for descriptor; the label count must match its arity"""
        if len(label_values) != descriptor.arity:
            raise LabelArityError(
                f"metric {descriptor.fq_name} expects {descriptor.arity} labels "
                f"{list(descriptor.label_names)}, got {len(label_values)}"
            )

        labels = dict(descriptor.const_labels)
        labels.update(zip(descriptor.label_names, (_label_value(v) for v in label_values)))
        self._family(descriptor).add_sample(descriptor.fq_name, labels, float(value))

    def _family(self, descriptor: MetricDescriptor) -> Metric:
        family = self._families.get(descriptor.fq_name)
        if family is None:
            family = GaugeMetricFamily(descriptor.fq_name, descriptor.documentation)
            self._families[descriptor.fq_name] = family
            self._order.append(descriptor.fq_name)
        return family

    def families(self) -> Iterable[Metric]:
        """Metric families in the order they were first emitted"""
        for name in self._order:
            yield self._families[name]

    def samples(self) -> List[Tuple[str, Dict[str, str], float]]:
        """Flat (name, labels, value) view, mostly useful for inspection"""
        result = []
        for family in self.families():
            for sample in family.samples:
                result.append((sample.name, dict(sample.labels), sample.value))
        return result

    def __len__(self) -> int:
        return sum(len(family.samples) for family in self._families.values())
