from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from .. import database
from ..config import settings
from ..schemas.health import SystemHealth
from ..services import odoo_adapter, xpand_adapter
from ..services.health import (
    HealthAggregator,
    MissingDependencyError,
    ProbeUnavailableError,
    Subsystem,
)
from ..services.odoo_client import OdooClient, OdooError

router = APIRouter(tags=["Health"])


async def check_odoo() -> None:
    async with OdooClient.from_settings() as client:
        try:
            await odoo_adapter.health_check(client)
        except OdooError as exc:
            raise ProbeUnavailableError(f"Failed to access Odoo: {exc}") from exc


def _check_xpand_sync() -> None:
    try:
        db = database.SessionLocal()
    except ImportError as exc:
        # the ODBC driver (pyodbc) is an optional install
        raise MissingDependencyError(f"Xpand database driver unavailable: {exc}") from exc
    try:
        xpand_adapter.health_check(db)
    except SQLAlchemyError as exc:
        raise ProbeUnavailableError(f"Failed to access Xpand: {exc}") from exc
    finally:
        db.close()


async def check_xpand() -> None:
    await run_in_threadpool(_check_xpand_sync)


def build_health_aggregator() -> HealthAggregator:
    return HealthAggregator(
        settings.PROJECT_NAME,
        [
            Subsystem(
                settings.HEALTH_ODOO_SYSTEM_NAME,
                settings.HEALTH_ODOO_MINIMUM_MINUTES,
                check_odoo,
            ),
            Subsystem(
                settings.HEALTH_XPAND_SYSTEM_NAME,
                settings.HEALTH_XPAND_MINIMUM_MINUTES,
                check_xpand,
            ),
        ],
    )


# one cache per process, shared by every request
health_aggregator = build_health_aggregator()


def get_health_aggregator() -> HealthAggregator:
    return health_aggregator


@router.get("/health", response_model=SystemHealth, response_model_exclude_none=True)
async def health(aggregator: HealthAggregator = Depends(get_health_aggregator)):
    """
    Health of the service and its subsystems (Odoo, Xpand).
    Always answers 200; the status field reflects health:
    active, impaired, failure or unknown.
    """
    return await aggregator.check_system()
