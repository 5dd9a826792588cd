"""HTTP server for the health check endpoint."""

import logging
from typing import Callable, Dict, Optional

from aiohttp import web

from src.web.auth import allow_anonymous, create_auth_middleware

from .check_registry import HealthCheckRegistry
from .health_writer import write_health_ui_response
from .models import AggregatedReport, HealthStatus
from .report_serializer import SerializationError

logger = logging.getLogger(__name__)

DEFAULT_HEALTH_PATH = '/healthz'

RESULT_STATUS_CODES = {
    HealthStatus.HEALTHY: 200,
    HealthStatus.DEGRADED: 200,
    HealthStatus.UNHEALTHY: 503,
}

ResponseWriter = Callable[[web.Response, Optional[AggregatedReport]], None]


def map_health_checks(app: web.Application, path: str, registry: HealthCheckRegistry,
                      response_writer: ResponseWriter = write_health_ui_response,
                      result_status_codes: Optional[Dict[HealthStatus, int]] = None,
                      allow_anonymous_access: bool = True):
    """
    Register a GET route serving health reports.

    The status code comes from the status table fixed here; the body comes
    from the response writer.

    Args:
        app: Application to register the route on
        path: Route path
        registry: Check runner producing the report
        response_writer: Callable writing the report into the response
        result_status_codes: Status table replacing RESULT_STATUS_CODES
        allow_anonymous_access: Exempt the route from authentication

    Returns:
        The registered request handler

    Raises:
        ValueError: If the status table does not cover every HealthStatus
    """
    if result_status_codes is None:
        result_status_codes = RESULT_STATUS_CODES
    status_codes = dict(result_status_codes)

    missing = [status.value for status in HealthStatus if status not in status_codes]
    if missing:
        raise ValueError(f"No status code configured for health status: {missing}")

    async def handle_health_checks(request: web.Request) -> web.Response:
        report = await registry.run()
        status_code = 200 if report is None else status_codes[report.status]

        response = web.Response(status=status_code)
        try:
            response_writer(response, report)
        except SerializationError as e:
            logger.error(f"Error writing health report for {request.path}: {e}")
            return web.json_response(
                {'status': 'error', 'message': 'Health report could not be serialized'},
                status=500,
            )
        return response

    if allow_anonymous_access:
        allow_anonymous(handle_health_checks)

    app.router.add_get(path, handle_health_checks)
    return handle_health_checks


class HealthCheckServer:
    """HTTP server providing the health check endpoint."""

    def __init__(self, registry: HealthCheckRegistry, host: str = '0.0.0.0', port: int = 8080,
                 path: str = DEFAULT_HEALTH_PATH, auth_token: Optional[str] = None):
        """
        Initialize health check server.

        Args:
            registry: Check runner for the endpoint
            host: Host to bind to (default: 0.0.0.0)
            port: Port to bind to (default: 8080)
            path: Endpoint path (default: /healthz)
            auth_token: Bearer token for protected routes
        """
        self.registry = registry
        self.host = host
        self.port = port
        self.path = path
        self.app = web.Application(middlewares=[create_auth_middleware(auth_token)])
        self.handle_health = map_health_checks(self.app, path, registry)
        self.runner: Optional[web.AppRunner] = None
        self.site: Optional[web.TCPSite] = None

        logger.info(f"Health check server initialized on {host}:{port}")

    async def start(self):
        """Start the health check server."""
        try:
            self.runner = web.AppRunner(self.app)
            await self.runner.setup()
            self.site = web.TCPSite(self.runner, self.host, self.port)
            await self.site.start()
            logger.info(f"Health check server started on http://{self.host}:{self.port}{self.path}")
        except Exception as e:
            logger.error(f"Failed to start health check server: {e}")
            raise

    async def stop(self):
        """Stop the health check server."""
        try:
            if self.site:
                await self.site.stop()
            if self.runner:
                await self.runner.cleanup()
            logger.info("Health check server stopped")
        except Exception as e:
            logger.error(f"Error stopping health check server: {e}")
        finally:
            self.site = None
            self.runner = None
