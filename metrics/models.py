"""Metric data models"""
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple

# fn(exporter, sink) -> None; raises on any listing or data error
CollectFunc = Callable[..., None]


@dataclass(frozen=True)
class Metric:
    """Static default definition of a metric, before configuration filtering"""
    name: str
    labels: Tuple[str, ...] = ()
    fn: Optional[CollectFunc] = None
    slow: bool = False
    deprecated_version: str = ""


@dataclass
class MetricDescriptor:
    """Registered identity and shape of a metric"""
    name: str
    fq_name: str
    documentation: str
    label_names: Tuple[str, ...] = ()
    const_labels: Dict[str, str] = field(default_factory=dict)
    fn: Optional[CollectFunc] = None

    def __post_init__(self):
        # Ensure const labels is never None
        if self.const_labels is None:
            self.const_labels = {}
        self.label_names = tuple(self.label_names)

    @property
    def arity(self) -> int:
        return len(self.label_names)

    @property
    def is_collectible(self) -> bool:
        """Descriptors without a function are filled in by another metric's function"""
        return self.fn is not None
