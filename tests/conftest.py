"""Pytest fixtures and configuration for testing the health report pipeline."""

import pytest
from datetime import timedelta

from src.health import process_identity as identity_module
from src.health.models import AggregatedReport, CheckResult, HealthStatus
from src.health.process_identity import ProcessIdentity, ProcessIdentityCache


# ============================================================================
# Process Identity Fixtures
# ============================================================================

@pytest.fixture
def fixed_identity():
    """A fixed process identity for deterministic documents."""
    return ProcessIdentity(
        assembly='MyService, Version=1.0.0',
        assemblies=('MyService', 'Core.Lib'),
    )


class ComponentListerStub:
    """Component lister returning a configurable list and counting calls."""

    def __init__(self, components):
        self.components = list(components)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return list(self.components)


@pytest.fixture
def component_lister():
    """Component lister stub starting with two components."""
    return ComponentListerStub(['MyService', 'Core.Lib'])


@pytest.fixture
def identity_cache(monkeypatch, component_lister):
    """
    Replace the process-wide identity cache with one backed by stubs.

    The stub lister is reachable as ``identity_cache.lister``.
    """
    cache = ProcessIdentityCache(
        entry_resolver=lambda: 'MyService, Version=1.0.0',
        component_lister=component_lister,
    )
    cache.lister = component_lister
    monkeypatch.setattr(identity_module, 'process_identity', cache)
    return cache


# ============================================================================
# Report Fixtures
# ============================================================================

def _make_entry(name, status=HealthStatus.HEALTHY, description=None,
                duration=timedelta(microseconds=1), tags=(), data=None):
    """Helper to build a CheckResult with sensible defaults."""
    return CheckResult(
        name=name,
        status=status,
        description=description,
        duration=duration,
        tags=tags,
        data=data or {},
    )


def _make_report(*entries, status=HealthStatus.HEALTHY, total_duration=timedelta(microseconds=1234)):
    """Helper to build an AggregatedReport from entries."""
    return AggregatedReport(status=status, total_duration=total_duration, entries=tuple(entries))


@pytest.fixture
def self_report():
    """Report holding only the 'self' check."""
    return _make_report(_make_entry('self'))


@pytest.fixture
def unordered_report():
    """Report whose entries are deliberately not in alphabetical order."""
    return _make_report(
        _make_entry('zeta', HealthStatus.HEALTHY),
        _make_entry('alpha', HealthStatus.DEGRADED, description='slow responses'),
        _make_entry('mid', HealthStatus.UNHEALTHY, description='connection refused'),
        status=HealthStatus.UNHEALTHY,
    )


@pytest.fixture
def make_entry():
    """Factory fixture building CheckResult objects."""
    return _make_entry


@pytest.fixture
def make_report():
    """Factory fixture building AggregatedReport objects."""
    return _make_report
