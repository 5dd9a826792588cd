"""JSON encoding of projected health documents."""

import base64
import dataclasses
import json
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from typing import Any, Mapping, Union
from uuid import UUID

from .duration_codec import format_duration
from .models import HealthStatus
from .report_projector import EMPTY_DOCUMENT, EmptyDocument, ProjectedDocument


EMPTY_RESPONSE = b'{}'


class SerializationError(Exception):
    """A health document could not be encoded as JSON."""
    pass


def _encode_value(value: Any) -> Any:
    """Convert values json cannot encode natively, or refuse them."""
    if isinstance(value, timedelta):
        return format_duration(value)
    if isinstance(value, HealthStatus):
        return value.value
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        try:
            return sorted(value)
        except TypeError:
            # Mixed element types
            return sorted(value, key=repr)
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode('ascii')
    if isinstance(value, (Decimal, UUID, PurePath)):
        return str(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize_document(document: Union[ProjectedDocument, EmptyDocument]) -> bytes:
    """
    Encode a projected document as compact UTF-8 JSON.

    Args:
        document: ProjectedDocument or EMPTY_DOCUMENT

    Returns:
        Encoded document; exactly b'{}' for EMPTY_DOCUMENT

    Raises:
        SerializationError: If any value in the document cannot be encoded
    """
    if document is EMPTY_DOCUMENT:
        return EMPTY_RESPONSE

    try:
        return json.dumps(
            document.to_dict(),
            separators=(',', ':'),
            ensure_ascii=False,
            allow_nan=False,
            default=_encode_value,
        ).encode('utf-8')
    except (TypeError, ValueError, RecursionError) as e:
        raise SerializationError(f"Failed to serialize health report: {e}") from e
