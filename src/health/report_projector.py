"""Projection of aggregated health reports into the wire document shape."""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .duration_codec import format_duration
from .models import AggregatedReport, CheckResult
from .process_identity import ProcessIdentity, get_process_identity


class EmptyDocument:
    """Sentinel document written when no report is available."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'EMPTY_DOCUMENT'


EMPTY_DOCUMENT = EmptyDocument()


@dataclass(frozen=True)
class ProjectedEntry:
    """One check entry, with every value already in wire form."""
    name: str
    status: str
    duration: str
    tags: Tuple[str, ...]
    data: Mapping[str, Any]
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary.

        ``description`` is only included when present; tags and data are
        always included.
        """
        result = {
            'name': self.name,
            'status': self.status,
        }

        if self.description is not None:
            result['description'] = self.description

        result['duration'] = self.duration
        result['tags'] = list(self.tags)
        result['data'] = dict(self.data)
        return result


@dataclass(frozen=True)
class ProjectedDocument:
    """Serialization-ready health document."""
    status: str
    total_duration: str
    assembly: str
    assemblies: Tuple[str, ...]
    entries: Tuple[ProjectedEntry, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status,
            'totalDuration': self.total_duration,
            'assembly': self.assembly,
            'assemblies': list(self.assemblies),
            'entries': [entry.to_dict() for entry in self.entries],
        }


def project_entry(entry: CheckResult) -> ProjectedEntry:
    return ProjectedEntry(
        name=entry.name,
        status=entry.status.value,
        description=entry.description,
        duration=format_duration(entry.duration),
        tags=tuple(entry.tags),
        data=entry.data,
    )


def project_report(report: Optional[AggregatedReport],
                   identity: Optional[ProcessIdentity] = None) -> Union[ProjectedDocument, EmptyDocument]:
    """
    Project an aggregated report into the document written to monitors.

    Args:
        report: Aggregated report, or None when checks are disabled
        identity: Process identity to attach (defaults to the process-wide snapshot)

    Returns:
        ProjectedDocument, or EMPTY_DOCUMENT when report is None
    """
    if report is None:
        return EMPTY_DOCUMENT

    if identity is None:
        identity = get_process_identity()

    return ProjectedDocument(
        status=report.status.value,
        total_duration=format_duration(report.total_duration),
        assembly=identity.assembly,
        assemblies=tuple(identity.assemblies),
        entries=tuple(project_entry(entry) for entry in report.entries),
    )
