"""Response writer for the health check endpoint."""

import io
from typing import Optional

from aiohttp import web

from .models import AggregatedReport
from .report_projector import project_report
from .report_serializer import serialize_document


DEFAULT_CONTENT_TYPE = 'application/json'


def render_health_ui_response(report: Optional[AggregatedReport]) -> bytes:
    """
    Project and serialize a health report.

    Args:
        report: Aggregated report, or None when checks are disabled

    Returns:
        JSON document bytes (b'{}' when report is None)
    """
    return serialize_document(project_report(report))


def open_health_ui_response(report: Optional[AggregatedReport]) -> io.BytesIO:
    """Return the serialized report as a stream positioned at the start."""
    return io.BytesIO(render_health_ui_response(report))


def write_health_ui_response(response: web.Response, report: Optional[AggregatedReport]) -> None:
    """
    Write a health report as the body of an HTTP response.

    Only the body and content type are set. The status code belongs to the
    route that owns the response.

    Args:
        response: Response to write into
        report: Aggregated report, or None when checks are disabled

    Raises:
        SerializationError: If the report contains values that cannot be encoded
    """
    body = render_health_ui_response(report)
    response.content_type = DEFAULT_CONTENT_TYPE
    response.body = body
