"""Resource lister backed by an openstacksdk connection"""
import threading
from typing import Any, Dict, List, Optional, Tuple
import openstack
from openstack import exceptions as sdk_exceptions
from keystoneauth1 import exceptions as ks_exceptions
from exceptions import ListingError
from logging_config import get_logger

logger = get_logger(__name__)


# kind -> (proxy attribute, proxy method, default query)
LISTINGS: Dict[str, Tuple[str, str, Dict[str, Any]]] = {
    # network
    "floating_ips": ("network", "ips", {}),
    "networks": ("network", "networks", {}),
    "subnets": ("network", "subnets", {}),
    "subnet_pools": ("network", "subnet_pools", {}),
    "network_agents": ("network", "agents", {}),
    "network_ip_availabilities": ("network", "network_ip_availabilities", {}),
    "ports": ("network", "ports", {}),
    "routers": ("network", "routers", {}),
    "router_l3_agents": ("network", "routers_hosting_l3_agents", {}),
    "security_groups": ("network", "security_groups", {}),
    # compute
    "flavors": ("compute", "flavors", {"details": True}),
    "availability_zones": ("compute", "availability_zones", {}),
    "compute_services": ("compute", "services", {}),
    "hypervisors": ("compute", "hypervisors", {"details": True}),
    "aggregates": ("compute", "aggregates", {}),
    "servers": ("compute", "servers", {"all_projects": True}),
    "usages": ("compute", "usages", {}),
    # identity
    "projects": ("identity", "projects", {}),
}

# keystoneauth raises its own errors for transport and token failures
API_ERRORS = (sdk_exceptions.SDKException, ks_exceptions.ClientException)

GETTERS: Dict[str, Tuple[str, str]] = {
    "limits": ("compute", "get_limits"),
}


class ResourceLister:
    """List every page of a resource collection through an openstacksdk connection.

    All SDK failures (transport, authentication, pagination) surface as
    ListingError so the collection engine can count them against a metric.
    """

    def __init__(self, connection, cloud: str = "", interface: str = "public",
                 compute_api_version: Optional[str] = None):
        self.connection = connection
        self.cloud = cloud
        self.interface = interface
        self.compute_api_version = compute_api_version
        # (service_type, interface) -> lister, opened at most once
        self._interface_listers: Dict[Tuple[str, str], "ResourceLister"] = {}
        self._interface_lock = threading.Lock()

    @classmethod
    def connect(cls, cloud: str, interface: str = "public",
                compute_api_version: Optional[str] = None) -> "ResourceLister":
        """Open a connection for a clouds.yaml entry"""
        kwargs = {"interface": interface}
        if compute_api_version:
            kwargs["compute_api_version"] = compute_api_version
        connection = openstack.connect(cloud=cloud or None, **kwargs)
        logger.info("Connected to cloud", cloud=cloud, interface=interface,
                    compute_api_version=compute_api_version)
        return cls(connection, cloud=cloud, interface=interface,
                   compute_api_version=compute_api_version)

    @classmethod
    def from_config(cls, config) -> "ResourceLister":
        return cls.connect(config.cloud, config.endpoint_type, config.compute_api_version)

    def for_service_interface(self, service_type: str, interface: str) -> "ResourceLister":
        """Return a lister whose service_type endpoint uses another interface.

        The extra connection is opened on first use and reused by every
        later scrape.
        """
        if interface == self.interface:
            return self

        key = (service_type, interface)
        with self._interface_lock:
            lister = self._interface_listers.get(key)
            if lister is None:
                kwargs = {"interface": self.interface, f"{service_type}_interface": interface}
                if self.compute_api_version:
                    kwargs["compute_api_version"] = self.compute_api_version
                connection = openstack.connect(cloud=self.cloud or None, **kwargs)
                logger.info("Connected to cloud", cloud=self.cloud, service_type=service_type,
                            interface=interface)
                lister = ResourceLister(connection, cloud=self.cloud, interface=self.interface,
                                        compute_api_version=self.compute_api_version)
                self._interface_listers[key] = lister
        return lister

    def list(self, kind: str, *args, **query) -> List[Any]:
        """List all resources of kind, following pagination"""
        service, method, defaults = self._resolve(LISTINGS, kind)
        params = dict(defaults)
        params.update(query)
        logger.debug("Listing resources", kind=kind, query=params)
        try:
            return list(getattr(getattr(self.connection, service), method)(*args, **params))
        except API_ERRORS as e:
            raise ListingError(kind, e) from e

    def get(self, kind: str, **query) -> Any:
        """Fetch a single resource of kind"""
        service, method = self._resolve(GETTERS, kind)
        try:
            return getattr(getattr(self.connection, service), method)(**query)
        except API_ERRORS as e:
            raise ListingError(kind, e) from e

    @staticmethod
    def _resolve(table, kind):
        try:
            return table[kind]
        except KeyError:
            raise ValueError(f"unknown resource kind: {kind}") from None
