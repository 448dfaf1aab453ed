from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

from ..schemas.health import HealthStatus, SystemHealth

logger = logging.getLogger(__name__)

CheckFunction = Callable[[], Awaitable[Optional[SystemHealth]]]

_SEVERITY = {
    HealthStatus.active: 0,
    HealthStatus.unknown: 1,
    HealthStatus.impaired: 2,
    HealthStatus.failure: 3,
}

_ESCALATION_MESSAGES = {
    HealthStatus.failure: "Failure because of failing subsystem",
    HealthStatus.impaired: "Failure because of impaired subsystem",
    HealthStatus.unknown: "Unknown because subsystem status is unknown",
}


class ProbeError(Exception):
    """Base for errors a probe raises to say how its dependency is broken."""


class MissingDependencyError(ProbeError):
    """The dependency is not configured or not installed; reported as impaired."""


class ProbeUnavailableError(ProbeError):
    """The dependency is configured but cannot be reached; reported as failure."""


@dataclass
class Subsystem:
    name: str
    minimum_minutes_between_requests: int
    check: CheckFunction
    active_message: Optional[str] = None


def escalate(current: HealthStatus, incoming: HealthStatus) -> HealthStatus:
    """Return the more severe of two statuses (failure > impaired > unknown > active)."""
    return incoming if _SEVERITY[incoming] > _SEVERITY[current] else current


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HealthAggregator:
    """Probes subsystems, caching each result for a minimum number of minutes.

    The cache lives for the life of the instance. Concurrent probes of a stale
    entry may both run; the last one to finish wins.
    """

    def __init__(
        self,
        system_name: str,
        subsystems: Iterable[Subsystem] = (),
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.system_name = system_name
        self.subsystems: List[Subsystem] = list(subsystems)
        self._clock = clock
        self._cache: Dict[str, SystemHealth] = {}

    def cached(self, system_name: str) -> Optional[SystemHealth]:
        return self._cache.get(system_name)

    def _is_fresh(self, health: SystemHealth, minimum_minutes_between_requests: int) -> bool:
        elapsed_minutes = math.floor((self._clock() - health.timeStamp).total_seconds() / 60)
        return elapsed_minutes < minimum_minutes_between_requests

    async def probe(
        self,
        system_name: str,
        minimum_minutes_between_requests: int,
        check_function: CheckFunction,
        active_message: Optional[str] = None,
    ) -> SystemHealth:
        current = self._cache.get(system_name)
        if current is not None and self._is_fresh(current, minimum_minutes_between_requests):
            return current

        try:
            result = await check_function()
        except MissingDependencyError as exc:
            logger.warning("health probe %s impaired: %s", system_name, exc)
            current = SystemHealth(
                name=system_name,
                status=HealthStatus.impaired,
                statusMessage=str(exc) or f"Reference error {system_name}",
                timeStamp=self._clock(),
            )
        except Exception as exc:
            logger.warning("health probe %s failed: %s", system_name, exc)
            current = SystemHealth(
                name=system_name,
                status=HealthStatus.failure,
                statusMessage=str(exc) or f"Failed to access {system_name}",
                timeStamp=self._clock(),
            )
        else:
            if result is not None:
                current = SystemHealth(
                    name=result.name,
                    status=result.status,
                    statusMessage=result.statusMessage,
                    subsystems=result.subsystems,
                    timeStamp=self._clock(),
                )
            else:
                current = SystemHealth(
                    name=system_name,
                    status=HealthStatus.active,
                    statusMessage=active_message,
                    timeStamp=self._clock(),
                )

        self._cache[system_name] = current
        return current

    async def check_system(self) -> SystemHealth:
        health = SystemHealth(
            name=self.system_name,
            status=HealthStatus.active,
            timeStamp=self._clock(),
            subsystems=[],
        )

        for subsystem in self.subsystems:
            subsystem_health = await self.probe(
                subsystem.name,
                subsystem.minimum_minutes_between_requests,
                subsystem.check,
                subsystem.active_message,
            )
            health.subsystems.append(subsystem_health)

            status = escalate(health.status, subsystem_health.status)
            if status != health.status:
                health.status = status
                health.statusMessage = _ESCALATION_MESSAGES[status]

        return health
