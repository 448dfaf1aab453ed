"""Read-only queries against the Xpand database.

Both reads return an AdapterResult so routes can tell a missing work order
from a row that does not match our schema from a database failure.
"""

from __future__ import annotations

import logging
from typing import List

from pydantic import ValidationError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..schemas.work_order import XpandWorkOrder, XpandWorkOrderDetails
from ..schemas.xpand import XpandDbWorkOrder, XpandDbWorkOrderDetails
from .result import AdapterError, AdapterResult
from .xpand_transform import XpandSchemaError, transform_row, transform_row_details, trim_strings

logger = logging.getLogger(__name__)

_WORK_ORDER_COLUMNS = """
    aoupp.code AS code,
    aoupp.caption AS caption,
    cmctc.cmctckod AS contactCode,
    aotlt.caption AS masterKey,
    aoupp.status AS status,
    resource.cmctcben AS resource,
    cmrgr.caption AS resourceGroup,
    aoupp.time AS createdAt,
    aoupp.lastchged AS lastChanged,
    aopri.code AS priority,
    babuf.hyresid AS residenceId
"""

_WORK_ORDER_JOINS = """
FROM aoupp
INNER JOIN babuf ON babuf.keycmobj = aoupp.keycmobj
INNER JOIN aotlt ON aotlt.keyaotlt = aoupp.keyaotlt
LEFT JOIN cmctc ON cmctc.keycmctc = aoupp.keycmctc
LEFT JOIN cmctc AS resource ON resource.keycmctc = aoupp.keycmctc2
LEFT JOIN cmrgr ON cmrgr.keycmrgr = aoupp.keycmrgr
LEFT JOIN aopri ON aopri.keyaopri = aoupp.keyaopri
"""

# one JSON array of sub-rows per work order
_ROWS_COLUMN = """
    JSON_QUERY((
        SELECT
            aoupr.caption AS caption,
            aopla.caption AS locationCaption,
            aopla.code AS locationCode,
            aobdl.caption AS equipmentCaption,
            aobdl.code AS equipmentCode
        FROM aoupr
        LEFT JOIN aopla ON aoupr.keyaopla = aopla.keyaopla
        LEFT JOIN aobdl ON aoupr.keyaobdl = aobdl.keyaobdl
        WHERE aoupr.keyaoupp = aoupp.keyaoupp
        FOR JSON PATH
    )) AS [rows]
"""

WORK_ORDERS_BY_RESIDENCE_SQL = (
    "SELECT" + _WORK_ORDER_COLUMNS + _WORK_ORDER_JOINS
    + "WHERE babuf.hyresid = :residence_id\n"
    + "ORDER BY aoupp.time {direction}\n"
    + "OFFSET :skip ROWS FETCH NEXT :limit ROWS ONLY"
)

WORK_ORDER_DETAILS_SQL = (
    "SELECT TOP 1" + _WORK_ORDER_COLUMNS + "," + _ROWS_COLUMN + _WORK_ORDER_JOINS
    + "WHERE aoupp.code = :code"
)

DEFAULT_LIMIT = 100


def get_work_orders_by_residence_id(
    db: Session,
    residence_id: str,
    *,
    skip: int = 0,
    limit: int = DEFAULT_LIMIT,
    sort_ascending: bool = False,
) -> AdapterResult[List[XpandWorkOrder]]:
    logger.info("getting xpand work orders for residence id %s", residence_id)

    sql = WORK_ORDERS_BY_RESIDENCE_SQL.format(direction="ASC" if sort_ascending else "DESC")
    try:
        rows = (
            db.execute(text(sql), {"residence_id": residence_id, "skip": skip, "limit": limit})
            .mappings()
            .all()
        )
    except SQLAlchemyError as exc:
        logger.exception("failed to query work orders from xpand")
        return AdapterResult.failure(AdapterError.unknown, str(exc))

    try:
        work_orders = [
            transform_row(XpandDbWorkOrder.model_validate(trim_strings(dict(row)))) for row in rows
        ]
    except ValidationError as exc:
        logger.error("failed to parse work orders from xpand: %s", exc.errors())
        return AdapterResult.failure(AdapterError.schema_error)

    return AdapterResult.success(work_orders)


def get_work_order_details(db: Session, code: str) -> AdapterResult[XpandWorkOrderDetails]:
    logger.info("getting xpand details for work order code %s", code)

    try:
        row = db.execute(text(WORK_ORDER_DETAILS_SQL), {"code": code}).mappings().first()
    except SQLAlchemyError as exc:
        logger.exception("failed to query work order %s from xpand", code)
        return AdapterResult.failure(AdapterError.unknown, str(exc))

    if row is None:
        return AdapterResult.failure(AdapterError.not_found)

    try:
        raw = XpandDbWorkOrderDetails.model_validate(trim_strings(dict(row)))
        details = transform_row_details(raw)
    except ValidationError as exc:
        logger.error("failed to parse work order %s from xpand: %s", code, exc.errors())
        return AdapterResult.failure(AdapterError.schema_error)
    except XpandSchemaError as exc:
        logger.error("failed to parse rows of work order %s from xpand: %s", code, exc)
        return AdapterResult.failure(AdapterError.schema_error)

    return AdapterResult.success(details)


def health_check(db: Session) -> None:
    db.execute(text("SELECT 1"))
