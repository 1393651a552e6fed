"""Configuration management for the OpenStack metrics exporter"""
from pathlib import Path
from typing import Dict, List, Optional, Literal
from pydantic import Field, validator
from pydantic_settings import BaseSettings


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(',') if item.strip()]


class Config(BaseSettings):
    """Configuration class with Pydantic validation and environment-based settings"""

    # Cloud connection
    cloud: str = Field(default="", description="clouds.yaml entry to connect to")
    endpoint_type: str = Field(default="public", description="Endpoint interface for service clients")
    identity_endpoint_type: Optional[str] = Field(
        default=None,
        description="Endpoint interface for the identity client used by compute limits"
    )
    compute_api_version: Optional[str] = Field(default=None, description="Compute API microversion")

    # Exporter catalog settings
    services: str = Field(default="network-base,compute-base", description="Enabled services (comma-separated)")
    prefix: str = Field(default="openstack", description="Metric name prefix")
    disabled_metrics: str = Field(
        default="",
        description="Disabled metrics as <exporter>-<metric> (comma-separated)"
    )
    disable_slow_metrics: bool = Field(default=False, description="Skip metrics that need expensive sub-queries")
    disable_deprecated_metrics: bool = Field(default=False, description="Skip deprecated metrics")
    collect_time: bool = Field(default=False, description="Emit per-metric collection time")
    const_labels: str = Field(default="", description="Static labels as key=value (comma-separated)")

    # Server settings
    metrics_port: int = Field(default=9180, ge=1, le=65535, description="Metrics server port")
    metrics_host: str = Field(default="0.0.0.0", description="Metrics server host")
    enable_request_logging: bool = Field(default=True, description="Enable HTTP request logging")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", description="Log level")
    log_file: Optional[Path] = Field(default=None, description="Log file path")

    # Service settings
    service_name: str = Field(default="openstack-metrics-exporter", description="Service name")
    service_version: str = Field(default="1.0.0", description="Service version")

    class Config:
        env_prefix = "OPENSTACK_EXPORTER_"
        case_sensitive = False

    @validator('log_level', pre=True)
    def normalize_log_level(cls, v):
        """Accept log levels in any case"""
        if isinstance(v, str):
            return v.upper()
        return v

    @validator('const_labels')
    def validate_const_labels(cls, v):
        """Every const label must be a key=value pair"""
        for pair in _split_csv(v):
            key, sep, _ = pair.partition('=')
            if not sep or not key.strip():
                raise ValueError(f"const label {pair!r} must be key=value")
        return v

    @validator('services')
    def validate_services(cls, v):
        if not _split_csv(v):
            raise ValueError("at least one service must be enabled")
        return v

    def get_services(self) -> List[str]:
        """Get enabled services as a list"""
        return _split_csv(self.services)

    def get_disabled_metrics(self) -> List[str]:
        """Get disabled metric identifiers as a list"""
        return _split_csv(self.disabled_metrics)

    def get_const_labels(self) -> Dict[str, str]:
        """Get const labels as a mapping"""
        labels = {}
        for pair in _split_csv(self.const_labels):
            key, _, value = pair.partition('=')
            labels[key.strip()] = value.strip()
        return labels

    def get_identity_endpoint_type(self) -> str:
        """Interface for the identity client, falling back to the service endpoint type"""
        return self.identity_endpoint_type or self.endpoint_type
