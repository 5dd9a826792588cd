"""Health report aggregation, serialization and endpoint package."""

from .check_registry import HealthCheckRegistry, HealthCheckResult
from .duration_codec import DurationCodec, format_duration, parse_duration
from .health_server import HealthCheckServer, map_health_checks, RESULT_STATUS_CODES
from .health_writer import write_health_ui_response, render_health_ui_response
from .models import AggregatedReport, CheckResult, HealthStatus
from .process_identity import ProcessIdentity, get_process_identity
from .report_projector import EMPTY_DOCUMENT, project_report
from .report_serializer import SerializationError, serialize_document

__all__ = [
    'HealthCheckRegistry',
    'HealthCheckResult',
    'DurationCodec',
    'format_duration',
    'parse_duration',
    'HealthCheckServer',
    'map_health_checks',
    'RESULT_STATUS_CODES',
    'write_health_ui_response',
    'render_health_ui_response',
    'AggregatedReport',
    'CheckResult',
    'HealthStatus',
    'ProcessIdentity',
    'get_process_identity',
    'EMPTY_DOCUMENT',
    'project_report',
    'SerializationError',
    'serialize_document',
]
