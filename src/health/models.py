"""Health report data structures."""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple


class HealthStatus(Enum):
    """Health status levels. The value is the name written on the wire."""
    UNHEALTHY = "Unhealthy"
    DEGRADED = "Degraded"
    HEALTHY = "Healthy"


@dataclass(frozen=True)
class CheckResult:
    """
    Outcome of one named health check.

    Tags are kept as an insertion-ordered tuple without duplicates so the
    serialized report is deterministic. Data is stored as a read-only copy.
    """
    name: str
    status: HealthStatus
    duration: timedelta
    description: Optional[str] = None
    tags: Tuple[str, ...] = ()
    data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("Check name must be a non-empty string")
        if not isinstance(self.status, HealthStatus):
            raise ValueError(f"Invalid status for check '{self.name}': {self.status!r}")
        if self.duration < timedelta(0):
            raise ValueError(f"Duration for check '{self.name}' must be non-negative")
        object.__setattr__(self, 'tags', tuple(dict.fromkeys(self.tags or ())))
        object.__setattr__(self, 'data', MappingProxyType(dict(self.data or {})))


@dataclass(frozen=True)
class AggregatedReport:
    """Snapshot of all check results for one evaluation cycle."""
    status: HealthStatus
    total_duration: timedelta
    entries: Tuple[CheckResult, ...] = ()

    def __post_init__(self):
        if not isinstance(self.status, HealthStatus):
            raise ValueError(f"Invalid overall status: {self.status!r}")
        if self.total_duration < timedelta(0):
            raise ValueError("Total duration must be non-negative")
        entries = tuple(self.entries)
        names = [entry.name for entry in entries]
        if len(names) != len(set(names)):
            duplicates = sorted({name for name in names if names.count(name) > 1})
            raise ValueError(f"Duplicate check names in report: {duplicates}")
        object.__setattr__(self, 'entries', entries)
