"""Tests for the collection engine in collectors.base"""
import pytest

from collectors.base import BaseExporter, CollectionResult, ExporterConfig
from exceptions import LabelArityError, ListingError, MetricNotRegisteredError
from metrics.models import Metric
from metrics.sink import PrometheusSink
from fakes import make_config, samples_named, value_of


def ok_fn(exporter, sink):
    exporter.emit(sink, "healthy", 1)


def failing_fn(exporter, sink):
    raise ListingError("things", RuntimeError("boom"))


def multi_fn(exporter, sink):
    exporter.emit(sink, "primary", 2)
    exporter.emit(sink, "secondary", 3, "a")


class DummyExporter(BaseExporter):
    name = "dummy"


class TestCollectionResult:
    """Test the mostly-up health policy"""

    def test_up_when_some_metrics_succeed(self):
        assert CollectionResult(metrics_count=3, metrics_down=1, duration=0.1).up == 1
        assert CollectionResult(metrics_count=3, metrics_down=2, duration=0.1).up == 1

    def test_down_when_every_metric_failed(self):
        assert CollectionResult(metrics_count=3, metrics_down=3, duration=0.1).up == 0

    def test_down_with_no_collectible_metrics(self):
        assert CollectionResult(metrics_count=0, metrics_down=0, duration=0.0).up == 0


class TestBaseExporter:
    """Test catalog construction and collection of BaseExporter"""

    def setup_method(self):
        self.sink = PrometheusSink()

    def build(self, metrics, **overrides):
        return DummyExporter(make_config(**overrides), metrics)

    def test_names(self):
        exporter = self.build([Metric("healthy", fn=ok_fn)])

        assert exporter.get_name() == "openstack_dummy"
        assert exporter.catalog.get("healthy").fq_name == "openstack_dummy_healthy"
        assert exporter.catalog.sealed

    def test_custom_prefix(self):
        exporter = self.build([Metric("healthy", fn=ok_fn)], prefix="cloud")

        assert exporter.get_name() == "cloud_dummy"

    def test_partial_failure_keeps_exporter_up(self):
        exporter = self.build([
            Metric("healthy", fn=ok_fn),
            Metric("broken", fn=failing_fn),
            Metric("primary", fn=multi_fn),
            Metric("secondary", ("name",)),
        ])

        result = exporter.collect(self.sink)

        assert result.metrics_count == 3
        assert result.metrics_down == 1
        assert result.up == 1
        assert value_of(self.sink, "openstack_dummy_up") == 1
        assert value_of(self.sink, "openstack_dummy_healthy") == 1
        assert value_of(self.sink, "openstack_dummy_secondary", name="a") == 3
        assert samples_named(self.sink, "openstack_dummy_broken") == []

    def test_every_metric_failing_reports_down(self):
        exporter = self.build([Metric("broken", fn=failing_fn), Metric("also_broken", fn=failing_fn)])

        result = exporter.collect(self.sink)

        assert result.up == 0
        assert value_of(self.sink, "openstack_dummy_up") == 0

    def test_placeholders_are_not_counted(self):
        exporter = self.build([
            Metric("broken", fn=failing_fn),
            Metric("placeholder_one"),
            Metric("placeholder_two"),
        ])

        result = exporter.collect(self.sink)

        assert result.metrics_count == 1
        assert result.up == 0

    def test_up_is_emitted_last(self):
        exporter = self.build([Metric("healthy", fn=ok_fn), Metric("primary", fn=multi_fn),
                               Metric("secondary", ("name",))])

        exporter.collect(self.sink)

        names = [name for name, _, _ in self.sink.samples()]
        assert names[-1] == "openstack_dummy_up"
        assert names.count("openstack_dummy_up") == 1

    def test_collect_time_enabled(self):
        exporter = self.build([Metric("healthy", fn=ok_fn), Metric("broken", fn=failing_fn)],
                              collect_time=True)

        exporter.collect(self.sink)

        timings = samples_named(self.sink, "openstack_metric_collect_seconds")
        assert len(timings) == 1
        labels, value = timings[0]
        assert labels == {"openstack_service": "openstack_dummy", "openstack_metric": "healthy"}
        assert value >= 0

    def test_collect_time_disabled(self):
        exporter = self.build([Metric("healthy", fn=ok_fn)])

        exporter.collect(self.sink)

        assert samples_named(self.sink, "openstack_metric_collect_seconds") == []

    def test_slow_metrics_filtered(self):
        exporter = self.build([Metric("healthy", fn=ok_fn), Metric("slow", fn=ok_fn, slow=True)],
                              disable_slow_metrics=True)

        assert "healthy" in exporter.catalog
        assert "slow" not in exporter.catalog

    def test_slow_metrics_kept_by_default(self):
        exporter = self.build([Metric("slow", fn=ok_fn, slow=True)])

        assert "slow" in exporter.catalog

    def test_deprecated_metrics_filtered(self):
        exporter = self.build([Metric("healthy", fn=ok_fn), Metric("old", fn=ok_fn, deprecated_version="1.0.0")],
                              disable_deprecated_metrics=True)

        assert "old" not in exporter.catalog

    def test_disabled_metric_is_never_invoked(self):
        calls = []

        def tracked(exporter, sink):
            calls.append(1)

        exporter = self.build([Metric("healthy", fn=ok_fn), Metric("tracked", fn=tracked)],
                              disabled_metrics=["dummy-tracked"])
        exporter.collect(self.sink)

        assert calls == []
        assert exporter.metric_is_disabled("tracked")

    def test_disabled_secondary_samples_are_dropped(self):
        exporter = self.build([Metric("primary", fn=multi_fn), Metric("secondary", ("name",))],
                              disabled_metrics=["dummy-secondary"])

        result = exporter.collect(self.sink)

        assert result.metrics_down == 0
        assert value_of(self.sink, "openstack_dummy_primary") == 2
        assert samples_named(self.sink, "openstack_dummy_secondary") == []

    def test_emit_unregistered_metric_fails(self):
        exporter = self.build([Metric("healthy", fn=ok_fn)])

        with pytest.raises(MetricNotRegisteredError):
            exporter.emit(self.sink, "unknown", 1)

    def test_emit_wrong_label_count_fails(self):
        exporter = self.build([Metric("secondary", ("name",), fn=ok_fn)])

        with pytest.raises(LabelArityError):
            exporter.emit(self.sink, "secondary", 1, "a", "b")

    def test_emission_errors_count_as_failures(self):
        def unregistered(exporter, sink):
            exporter.emit(sink, "unknown", 1)

        exporter = self.build([Metric("healthy", fn=ok_fn), Metric("bad", fn=unregistered)])

        result = exporter.collect(self.sink)

        assert result.metrics_down == 1
        assert result.up == 1

    def test_no_up_sample_when_everything_disabled(self):
        exporter = self.build([Metric("healthy", fn=ok_fn)], disabled_metrics=["dummy-healthy"])

        result = exporter.collect(self.sink)

        assert len(exporter.catalog) == 0
        assert result.up == 0
        assert len(self.sink) == 0

    def test_uuid_uses_injected_generator(self):
        exporter = self.build([Metric("healthy", fn=ok_fn)])

        assert exporter.uuid() == "generated-uuid"

    def test_default_uuid_generator(self):
        exporter = DummyExporter(ExporterConfig(client=None), [Metric("healthy", fn=ok_fn)])

        first, second = exporter.uuid(), exporter.uuid()
        assert len(first) == 36
        assert first != second

    def test_describe_lists_catalog(self):
        exporter = self.build([Metric("healthy", fn=ok_fn)])

        names = [d.name for d in exporter.describe()]
        assert names == ["up", "openstack_metric_collect_seconds", "healthy"]


class TestExporterConfig:
    """Test ExporterConfig.from_config"""

    def test_from_config(self):
        from config import Config

        config = Config(
            prefix="cloud",
            disabled_metrics="nova-flavors,neutron-networks",
            collect_time=True,
            const_labels="region=RegionOne",
            endpoint_type="internal",
        )

        exporter_config = ExporterConfig.from_config(config, client="client")

        assert exporter_config.client == "client"
        assert exporter_config.prefix == "cloud"
        assert exporter_config.disabled_metrics == ["nova-flavors", "neutron-networks"]
        assert exporter_config.collect_time is True
        assert exporter_config.const_labels == {"region": "RegionOne"}
        assert exporter_config.identity_endpoint_type == "internal"
