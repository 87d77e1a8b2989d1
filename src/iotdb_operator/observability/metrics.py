"""
Prometheus metrics for the IoTDB operator.

This module provides metrics collection for monitoring admission decisions
and the node inventory reads they depend on.
"""

import logging

# aiohttp is also what Kopf serves its webhooks and probes with.
from aiohttp.web import (
    Application,
    AppRunner,
    Request,
    Response,
    TCPSite,
)
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)

# Global metrics registry
_metrics_registry: CollectorRegistry | None = None

# Metrics definitions
ADMISSION_REQUESTS_TOTAL = Counter(
    "iotdb_operator_admission_requests_total",
    "Total number of admission requests evaluated",
    ["resource_type", "operation", "result"],
    registry=None,  # Will be set during initialization
)

ADMISSION_REJECTIONS_TOTAL = Counter(
    "iotdb_operator_admission_rejections_total",
    "Total number of rejected admission requests by reason",
    ["resource_type", "reason"],
    registry=None,
)

NODE_LIST_DURATION = Histogram(
    "iotdb_operator_node_list_duration_seconds",
    "Time spent listing cluster nodes during admission",
    ["result"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
    registry=None,
)

ELIGIBLE_WORKER_NODES = Gauge(
    "iotdb_operator_eligible_worker_nodes",
    "Schedulable worker nodes observed by the most recent validation",
    [],
    registry=None,
)


def get_metrics_registry() -> CollectorRegistry:
    """Get or create the global metrics registry."""
    global _metrics_registry

    if _metrics_registry is None:
        _metrics_registry = CollectorRegistry()

        for metric in [
            ADMISSION_REQUESTS_TOTAL,
            ADMISSION_REJECTIONS_TOTAL,
            NODE_LIST_DURATION,
            ELIGIBLE_WORKER_NODES,
        ]:
            _metrics_registry.register(metric)

    return _metrics_registry


class MetricsCollector:
    """Collects and manages metrics for the IoTDB operator."""

    def __init__(self):
        """Initialize metrics collector."""
        self.registry = get_metrics_registry()

    def record_admission(
        self,
        resource_type: str,
        operation: str,
        allowed: bool,
        reason: str | None = None,
    ) -> None:
        """
        Record the outcome of an admission request.

        Args:
            resource_type: Type of resource (e.g. confignode)
            operation: Admission operation (CREATE, UPDATE, DELETE)
            allowed: Whether the request was admitted
            reason: Rejection reason when denied
        """
        ADMISSION_REQUESTS_TOTAL.labels(
            resource_type=resource_type,
            operation=operation,
            result="allowed" if allowed else "denied",
        ).inc()
        if not allowed:
            ADMISSION_REJECTIONS_TOTAL.labels(
                resource_type=resource_type, reason=reason or "unknown"
            ).inc()

    def record_node_list(self, duration: float, result: str) -> None:
        """Record how long a node list call took."""
        NODE_LIST_DURATION.labels(result=result).observe(duration)

    def update_eligible_nodes(self, count: int) -> None:
        """Publish the eligible worker node count."""
        ELIGIBLE_WORKER_NODES.set(count)


class MetricsServer:
    """HTTP server for exposing Prometheus metrics."""

    def __init__(self, port: int = 8081, host: str = "0.0.0.0"):
        """
        Initialize metrics server.

        Args:
            port: Port to serve metrics on
            host: Host interface to bind to
        """
        self.port = port
        self.host = host
        self.app = Application()
        self.runner: AppRunner | None = None
        self.site: TCPSite | None = None
        self._setup_routes()

    def _setup_routes(self) -> None:
        """Set up HTTP routes for the metrics server."""
        self.app.router.add_get("/metrics", self._metrics_handler)
        self.app.router.add_get("/healthz", self._healthz_handler)

    async def _metrics_handler(self, request: Request) -> Response:
        """Handle /metrics endpoint for Prometheus scraping."""
        try:
            registry = get_metrics_registry()
            metrics_data = generate_latest(registry)
            return Response(
                body=metrics_data,
                headers={"Content-Type": CONTENT_TYPE_LATEST},
            )
        except Exception as e:
            logger.error(f"Failed to generate metrics: {e}")
            return Response(
                text=f"Error generating metrics: {type(e).__name__}. Check logs for details.",
                status=500,
            )

    async def _healthz_handler(self, request: Request) -> Response:
        """Handle /healthz endpoint for Kubernetes compatibility."""
        return Response(text="ok")

    async def start(self) -> None:
        """Start the metrics server."""
        try:
            self.runner = AppRunner(self.app)
            await self.runner.setup()

            self.site = TCPSite(self.runner, self.host, self.port)
            await self.site.start()

            logger.info(f"Metrics server started on {self.host}:{self.port}")
        except Exception as e:
            logger.error(f"Failed to start metrics server: {e}")
            raise

    async def stop(self) -> None:
        """Stop the metrics server."""
        try:
            if self.site:
                await self.site.stop()
                self.site = None

            if self.runner:
                await self.runner.cleanup()
                self.runner = None

            logger.info("Metrics server stopped")
        except Exception as e:
            logger.error(f"Error stopping metrics server: {e}")


# Global metrics collector instance
metrics_collector = MetricsCollector()
