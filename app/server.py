"""FastAPI server setup and routes"""
import time
import os
from fastapi import FastAPI, Request, Response, HTTPException
from prometheus_client import CollectorRegistry, CONTENT_TYPE_LATEST, generate_latest
from config import Config
from metrics.registry import MetricsRegistry
from logging_config import get_logger, log_error


logger = get_logger(__name__)


class MetricsServer:
    """FastAPI server exposing the OpenStack metrics catalog"""

    def __init__(self, config: Config, registry: MetricsRegistry):
        self.config = config
        self.registry = registry
        self.app = FastAPI(
            title="OpenStack Metrics Exporter",
            version=config.service_version,
            docs_url=None,  # Disable docs for security
            redoc_url=None,  # Disable redoc for security
            openapi_url=None  # Disable OpenAPI schema for security
        )

        # Exposition registry; scrapes run the exporters synchronously
        self.prometheus_registry = CollectorRegistry(auto_describe=False)
        self.prometheus_registry.register(self.registry)

        # Scrape state
        self.start_time = time.time()
        self.last_scrape_time = 0
        self.scrape_count = 0
        self.scrape_errors = 0

        if self.config.enable_request_logging:
            self._setup_middleware()

        self._setup_routes()

    def _setup_middleware(self):
        """Setup request logging middleware"""

        @self.app.middleware("http")
        async def log_requests(request: Request, call_next):
            start = time.time()
            response = await call_next(request)
            logger.info(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                client_ip=request.client.host if request.client else None,
                duration_seconds=round(time.time() - start, 3),
                event_type="http_request"
            )
            return response

    def _setup_routes(self):
        """Setup FastAPI routes"""

        @self.app.get('/metrics', response_class=Response)
        def get_metrics():
            """Scrape every exporter and serve the result in Prometheus format"""
            self.scrape_count += 1
            try:
                content = generate_latest(self.prometheus_registry)
            except Exception as e:
                self.scrape_errors += 1
                log_error(logger, e, {"component": "scrape", "endpoint": "/metrics"})
                raise HTTPException(status_code=500, detail={"error": str(e)})
            self.last_scrape_time = time.time()
            return Response(content, media_type=CONTENT_TYPE_LATEST)

        @self.app.get('/health')
        def health_check():
            """Health check endpoint"""
            exporters = self.registry.list_exporters()
            health_data = {
                "status": "healthy" if exporters else "unhealthy",
                "exporters": exporters,
                "total_scrapes": self.scrape_count,
                "scrape_errors": self.scrape_errors,
            }

            if not exporters:
                raise HTTPException(status_code=503, detail=health_data)

            return health_data

        @self.app.get('/status')
        def get_status():
            """Detailed status information"""
            age = time.time() - self.last_scrape_time if self.last_scrape_time > 0 else None

            return {
                "service": {
                    "name": self.config.service_name,
                    "version": self.config.service_version,
                    "uptime_seconds": round(time.time() - self.start_time, 1),
                    "hostname": os.uname().nodename
                },
                "cloud": {
                    "name": self.config.cloud,
                    "endpoint_type": self.config.endpoint_type,
                    "services": self.config.get_services(),
                },
                "scrapes": {
                    "last_scrape_seconds_ago": round(age, 1) if age is not None else None,
                    "total_scrapes": self.scrape_count,
                    "scrape_errors": self.scrape_errors,
                    "collect_time": self.config.collect_time,
                },
            }

        @self.app.get('/exporters')
        def list_exporters():
            """List all exporters and their metric catalogs"""
            return {
                "exporters": self.registry.get_exporter_status(),
                "disabled_metrics": self.config.get_disabled_metrics()
            }

    def get_app(self) -> FastAPI:
        """Get the FastAPI application"""
        return self.app
