"""Health check registration and execution."""

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from .models import AggregatedReport, CheckResult, HealthStatus


logger = logging.getLogger(__name__)

# Worst status first
_SEVERITY = {
    HealthStatus.UNHEALTHY: 0,
    HealthStatus.DEGRADED: 1,
    HealthStatus.HEALTHY: 2,
}


@dataclass(frozen=True)
class HealthCheckResult:
    """Value returned by a single health check callable."""
    status: HealthStatus
    description: Optional[str] = None
    data: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def healthy(cls, description: Optional[str] = None,
                data: Optional[Mapping[str, Any]] = None) -> 'HealthCheckResult':
        return cls(HealthStatus.HEALTHY, description, data or {})

    @classmethod
    def degraded(cls, description: Optional[str] = None,
                 data: Optional[Mapping[str, Any]] = None) -> 'HealthCheckResult':
        return cls(HealthStatus.DEGRADED, description, data or {})

    @classmethod
    def unhealthy(cls, description: Optional[str] = None,
                  data: Optional[Mapping[str, Any]] = None) -> 'HealthCheckResult':
        return cls(HealthStatus.UNHEALTHY, description, data or {})


@dataclass(frozen=True)
class HealthCheckRegistration:
    """A registered health check."""
    name: str
    check: Callable[[], Any]
    tags: tuple = ()
    failure_status: HealthStatus = HealthStatus.UNHEALTHY


def worst_status(statuses: Iterable[HealthStatus]) -> HealthStatus:
    """Return the most severe status, or HEALTHY when there are none."""
    return min(statuses, key=_SEVERITY.__getitem__, default=HealthStatus.HEALTHY)


class HealthCheckRegistry:
    """
    Ordered collection of health checks.

    Checks run concurrently on each ``run()``; entries in the resulting report
    keep registration order.
    """

    def __init__(self, enabled: bool = True):
        """
        Initialize health check registry.

        Args:
            enabled: When False, run() returns None and no checks execute
        """
        self.enabled = enabled
        self._registrations: Dict[str, HealthCheckRegistration] = {}

    @property
    def registrations(self) -> List[HealthCheckRegistration]:
        return list(self._registrations.values())

    def add_check(self, name: str, check: Callable[[], Any],
                  tags: Optional[Iterable[str]] = None,
                  failure_status: HealthStatus = HealthStatus.UNHEALTHY) -> 'HealthCheckRegistry':
        """
        Register a health check.

        Args:
            name: Unique, non-empty check name
            check: Sync or async callable returning a HealthCheckResult
            tags: Optional tags reported with the check
            failure_status: Status reported when the check raises

        Returns:
            This registry, for chaining

        Raises:
            ValueError: If the name is empty or already registered
            TypeError: If check is not callable
        """
        if not isinstance(name, str) or not name:
            raise ValueError("Health check name must be a non-empty string")
        if name in self._registrations:
            raise ValueError(f"Health check '{name}' is already registered")
        if not callable(check):
            raise TypeError(f"Health check '{name}' must be callable")

        self._registrations[name] = HealthCheckRegistration(
            name=name,
            check=check,
            tags=tuple(dict.fromkeys(tags or ())),
            failure_status=failure_status,
        )
        logger.debug(f"Registered health check '{name}'")
        return self

    def add_self_check(self) -> 'HealthCheckRegistry':
        """Register the 'self' check, which always reports healthy."""
        return self.add_check('self', lambda: HealthCheckResult.healthy())

    @staticmethod
    def _entry(registration: HealthCheckRegistration, outcome: HealthCheckResult,
               started: float) -> CheckResult:
        return CheckResult(
            name=registration.name,
            status=outcome.status,
            description=outcome.description,
            duration=timedelta(seconds=time.perf_counter() - started),
            tags=registration.tags,
            data=outcome.data,
        )

    async def _run_one(self, registration: HealthCheckRegistration) -> CheckResult:
        started = time.perf_counter()
        try:
            outcome = registration.check()
            if inspect.isawaitable(outcome):
                outcome = await outcome
            if not isinstance(outcome, HealthCheckResult):
                raise TypeError(
                    f"Health check returned {type(outcome).__name__}, expected HealthCheckResult"
                )
            # Malformed status or data fails here
            return self._entry(registration, outcome, started)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Health check '{registration.name}' failed: {type(e).__name__}: {e}")
            failure = HealthCheckResult(registration.failure_status, str(e) or type(e).__name__)
            return self._entry(registration, failure, started)

    async def run(self, predicate: Optional[Callable[[HealthCheckRegistration], bool]] = None
                  ) -> Optional[AggregatedReport]:
        """
        Run the registered checks and aggregate their results.

        Args:
            predicate: Optional filter selecting which registrations run

        Returns:
            AggregatedReport, or None when the registry is disabled
        """
        if not self.enabled:
            return None

        selected = [r for r in self._registrations.values() if predicate is None or predicate(r)]

        started = time.perf_counter()
        entries = await asyncio.gather(*(self._run_one(r) for r in selected))
        total_duration = timedelta(seconds=time.perf_counter() - started)

        return AggregatedReport(
            status=worst_status(entry.status for entry in entries),
            total_duration=total_duration,
            entries=tuple(entries),
        )
