import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from work_order_service.app.schemas.health import HealthStatus, SystemHealth
from work_order_service.app.services.health import (
    HealthAggregator,
    MissingDependencyError,
    Subsystem,
    escalate,
)


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 5, 2, 8, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class CountingCheck:
    def __init__(self, error=None):
        self.calls = 0
        self.error = error

    async def __call__(self):
        self.calls += 1
        if self.error is not None:
            raise self.error


def test_probe_is_throttled_by_minimum_minutes():
    clock = FakeClock()
    aggregator = HealthAggregator("work-order", clock=clock)
    check = CountingCheck()

    async def run():
        first = await aggregator.probe("odoo", 1, check)
        clock.advance(seconds=59)
        second = await aggregator.probe("odoo", 1, check)
        clock.advance(seconds=1)
        third = await aggregator.probe("odoo", 1, check)
        return first, second, third

    first, second, third = asyncio.run(run())

    assert check.calls == 2
    assert second is first
    assert third.timeStamp == clock.now


def test_probe_with_zero_minutes_always_runs():
    aggregator = HealthAggregator("work-order", clock=FakeClock())
    check = CountingCheck()

    async def run():
        await aggregator.probe("odoo", 0, check)
        await aggregator.probe("odoo", 0, check)

    asyncio.run(run())

    assert check.calls == 2


def test_probe_reports_active_with_message():
    aggregator = HealthAggregator("work-order", clock=FakeClock())

    health = asyncio.run(aggregator.probe("odoo", 1, CountingCheck(), "Connected"))

    assert health.status == HealthStatus.active
    assert health.statusMessage == "Connected"
    assert aggregator.cached("odoo") is health


def test_missing_dependency_is_impaired():
    aggregator = HealthAggregator("work-order", clock=FakeClock())
    check = CountingCheck(MissingDependencyError("driver not installed"))

    health = asyncio.run(aggregator.probe("xpand", 1, check))

    assert health.status == HealthStatus.impaired
    assert health.statusMessage == "driver not installed"


def test_other_errors_are_failure():
    aggregator = HealthAggregator("work-order", clock=FakeClock())
    check = CountingCheck(ConnectionError("connection refused"))

    health = asyncio.run(aggregator.probe("xpand", 1, check))

    assert health.status == HealthStatus.failure
    assert health.statusMessage == "connection refused"


def test_error_without_message_gets_default():
    aggregator = HealthAggregator("work-order", clock=FakeClock())

    health = asyncio.run(aggregator.probe("xpand", 1, CountingCheck(RuntimeError())))

    assert health.statusMessage == "Failed to access xpand"


def test_check_returning_health_is_used_as_is():
    clock = FakeClock()
    aggregator = HealthAggregator("work-order", clock=clock)

    async def check():
        return SystemHealth(
            name="odoo-db",
            status=HealthStatus.unknown,
            statusMessage="not sure",
            timeStamp=clock.now - timedelta(hours=1),
        )

    health = asyncio.run(aggregator.probe("odoo", 1, check))

    assert health.name == "odoo-db"
    assert health.status == HealthStatus.unknown
    assert health.timeStamp == clock.now


@pytest.mark.parametrize(
    "current, incoming, expected",
    [
        (HealthStatus.active, HealthStatus.failure, HealthStatus.failure),
        (HealthStatus.failure, HealthStatus.impaired, HealthStatus.failure),
        (HealthStatus.active, HealthStatus.impaired, HealthStatus.impaired),
        (HealthStatus.impaired, HealthStatus.unknown, HealthStatus.impaired),
        (HealthStatus.active, HealthStatus.unknown, HealthStatus.unknown),
        (HealthStatus.unknown, HealthStatus.active, HealthStatus.unknown),
    ],
)
def test_escalate(current, incoming, expected):
    assert escalate(current, incoming) == expected


def test_check_system_all_active():
    aggregator = HealthAggregator(
        "work-order",
        [Subsystem("odoo", 1, CountingCheck()), Subsystem("xpand", 1, CountingCheck())],
        clock=FakeClock(),
    )

    health = asyncio.run(aggregator.check_system())

    assert health.name == "work-order"
    assert health.status == HealthStatus.active
    assert health.statusMessage is None
    assert [s.name for s in health.subsystems] == ["odoo", "xpand"]


def test_check_system_failure_wins_over_impaired():
    aggregator = HealthAggregator(
        "work-order",
        [
            Subsystem("odoo", 1, CountingCheck(ConnectionError("down"))),
            Subsystem("xpand", 1, CountingCheck(MissingDependencyError("no driver"))),
        ],
        clock=FakeClock(),
    )

    health = asyncio.run(aggregator.check_system())

    assert health.status == HealthStatus.failure
    assert health.statusMessage == "Failure because of failing subsystem"
    assert [s.status for s in health.subsystems] == [HealthStatus.failure, HealthStatus.impaired]


def test_check_system_impaired():
    aggregator = HealthAggregator(
        "work-order",
        [
            Subsystem("odoo", 1, CountingCheck()),
            Subsystem("xpand", 1, CountingCheck(MissingDependencyError("no driver"))),
        ],
        clock=FakeClock(),
    )

    health = asyncio.run(aggregator.check_system())

    assert health.status == HealthStatus.impaired
    assert health.statusMessage == "Failure because of impaired subsystem"


def test_check_system_unknown():
    clock = FakeClock()

    async def unsure():
        return SystemHealth(name="xpand", status=HealthStatus.unknown, timeStamp=clock.now)

    aggregator = HealthAggregator(
        "work-order",
        [Subsystem("odoo", 1, CountingCheck()), Subsystem("xpand", 1, unsure)],
        clock=clock,
    )

    health = asyncio.run(aggregator.check_system())

    assert health.status == HealthStatus.unknown
    assert health.statusMessage == "Unknown because subsystem status is unknown"
    assert [s.status for s in health.subsystems] == [HealthStatus.active, HealthStatus.unknown]
