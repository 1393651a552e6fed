"""Tests for the openstacksdk-backed resource lister"""
from unittest.mock import MagicMock, patch
import pytest
from openstack import exceptions as sdk_exceptions
from keystoneauth1 import exceptions as ks_exceptions

from cloud.lister import ResourceLister
from collectors.nova import NovaExporter
from collectors.nova_limits import COMPUTE_LIMIT_METRICS
from config import Config
from exceptions import ListingError
from metrics.sink import PrometheusSink
from fakes import make_config


class TestResourceLister:
    """Test listing through a mocked connection"""

    def setup_method(self):
        self.connection = MagicMock()
        self.lister = ResourceLister(self.connection, cloud="test", interface="public")

    def test_list_follows_generator(self):
        self.connection.network.ips.return_value = iter(["fip-1", "fip-2"])

        assert self.lister.list("floating_ips") == ["fip-1", "fip-2"]
        self.connection.network.ips.assert_called_once_with()

    def test_list_applies_default_query(self):
        self.connection.compute.servers.return_value = []

        self.lister.list("servers")
        self.lister.list("hypervisors")

        self.connection.compute.servers.assert_called_once_with(all_projects=True)
        self.connection.compute.hypervisors.assert_called_once_with(details=True)

    def test_list_passes_arguments(self):
        self.connection.network.routers_hosting_l3_agents.return_value = []

        self.lister.list("router_l3_agents", "router-1")

        self.connection.network.routers_hosting_l3_agents.assert_called_once_with("router-1")

    def test_sdk_errors_become_listing_errors(self):
        self.connection.network.networks.side_effect = sdk_exceptions.HttpException("service unavailable")

        with pytest.raises(ListingError) as excinfo:
            self.lister.list("networks")

        assert excinfo.value.kind == "networks"
        assert isinstance(excinfo.value.cause, sdk_exceptions.SDKException)

    def test_get_limits(self):
        self.connection.compute.get_limits.return_value = "limits"

        assert self.lister.get("limits", tenant_id="proj") == "limits"
        self.connection.compute.get_limits.assert_called_once_with(tenant_id="proj")

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            self.lister.list("volumes")
        with pytest.raises(ValueError):
            self.lister.get("quotas")

    def test_same_interface_reuses_lister(self):
        assert self.lister.for_service_interface("identity", "public") is self.lister

    def test_other_interface_opens_connection(self):
        with patch("cloud.lister.openstack.connect") as connect:
            identity = self.lister.for_service_interface("identity", "internal")

        connect.assert_called_once_with(cloud="test", interface="public", identity_interface="internal")
        assert identity.connection is connect.return_value

    def test_other_interface_connection_is_reused(self):
        with patch("cloud.lister.openstack.connect") as connect:
            first = self.lister.for_service_interface("identity", "internal")
            second = self.lister.for_service_interface("identity", "internal")
            admin = self.lister.for_service_interface("identity", "admin")

        assert first is second
        assert admin is not first
        assert connect.call_count == 2

    def test_keystoneauth_errors_become_listing_errors(self):
        self.connection.network.ports.side_effect = ks_exceptions.ConnectFailure("connection refused")
        self.connection.compute.get_limits.side_effect = ks_exceptions.Unauthorized("token expired")

        with pytest.raises(ListingError) as excinfo:
            self.lister.list("ports")
        assert isinstance(excinfo.value.cause, ks_exceptions.ConnectFailure)

        with pytest.raises(ListingError) as excinfo:
            self.lister.get("limits", tenant_id="proj")
        assert excinfo.value.kind == "limits"


def test_limits_reuse_identity_connection_across_scrapes():
    connection = MagicMock()
    lister = ResourceLister(connection, cloud="test", interface="public")
    exporter = NovaExporter(make_config(lister, identity_endpoint_type="internal"), COMPUTE_LIMIT_METRICS)

    with patch("cloud.lister.openstack.connect") as connect:
        connect.return_value.identity.projects.return_value = []
        for _ in range(5):
            result = exporter.collect(PrometheusSink())
            assert result.metrics_down == 0

    connect.assert_called_once_with(cloud="test", interface="public", identity_interface="internal")


def test_from_config():
    config = Config(cloud="prod", endpoint_type="internal", compute_api_version="2.87")

    with patch("cloud.lister.openstack.connect") as connect:
        lister = ResourceLister.from_config(config)

    connect.assert_called_once_with(cloud="prod", interface="internal", compute_api_version="2.87")
    assert lister.interface == "internal"
    assert lister.compute_api_version == "2.87"
