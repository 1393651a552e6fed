"""Exception hierarchy for the OpenStack metrics exporter"""


class ExporterError(Exception):
    """Base class for all exporter errors"""


class ConfigurationError(ExporterError):
    """Raised when the exporter is configured with values it cannot use"""


class ListingError(ExporterError):
    """Raised when listing a resource collection from the cloud API fails"""

    def __init__(self, kind: str, cause: Exception):
        self.kind = kind
        self.cause = cause
        super().__init__(f"failed to list {kind}: {cause}")


class InvalidPrefixError(ExporterError, ValueError):
    """Raised when an address prefix string cannot be parsed"""

    def __init__(self, prefix: str, reason: str = ""):
        self.prefix = prefix
        message = f"invalid prefix: {prefix!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class MetricNotRegisteredError(ExporterError, KeyError):
    """Raised when a metric is looked up that was never registered"""

    def __init__(self, exporter: str, name: str):
        self.exporter = exporter
        self.name = name
        super().__init__(f"metric {name} is not registered on exporter {exporter}")

    def __str__(self) -> str:
        return self.args[0]


class LabelArityError(ExporterError, ValueError):
    """Raised when a sample carries a different number of labels than its descriptor"""


class CatalogSealedError(ExporterError, RuntimeError):
    """Raised when registering into a catalog after construction has finished"""
