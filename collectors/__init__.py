"""Resource-domain exporters"""
from .base import BaseExporter, ExporterConfig, CollectionResult
from .neutron import NeutronExporter
from .nova import NovaExporter

__all__ = [
    'BaseExporter',
    'ExporterConfig',
    'CollectionResult',
    'NeutronExporter',
    'NovaExporter'
]
