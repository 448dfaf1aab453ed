from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import ValidationError

from ..schemas.work_order import WorkOrderRow, XpandWorkOrder, XpandWorkOrderDetails
from ..schemas.xpand import XpandDbWorkOrder, XpandDbWorkOrderDetails, XpandDbWorkOrderRow
from .status import translate_status


class XpandSchemaError(ValueError):
    """Raised when a row from Xpand does not have the shape we expect."""


def trim_strings(data: Any) -> Any:
    """Recursively strip whitespace from every string in data.

    Xpand pads char columns, so this runs over each fetched row (including
    the decoded sub-rows). Dates and other scalars are returned unchanged.
    """
    if isinstance(data, str):
        return data.strip()
    if isinstance(data, (datetime, date)):
        return data
    if isinstance(data, dict):
        return {key: trim_strings(value) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [trim_strings(item) for item in data]
    return data


def parse_rows(raw_rows: Optional[str]) -> List[XpandDbWorkOrderRow]:
    if not raw_rows:
        return []

    try:
        decoded = json.loads(raw_rows)
    except json.JSONDecodeError as exc:
        raise XpandSchemaError(f"rows is not valid JSON: {exc}") from exc

    if not isinstance(decoded, list):
        raise XpandSchemaError("rows is not a JSON array")

    try:
        return [XpandDbWorkOrderRow.model_validate(trim_strings(item)) for item in decoded]
    except ValidationError as exc:
        raise XpandSchemaError(f"invalid work order row: {exc}") from exc


def _row_summary(row: XpandDbWorkOrderRow) -> str:
    if row.locationCaption and row.equipmentCaption:
        return f"{row.locationCaption}, {row.equipmentCaption}: {row.caption}"
    return row.caption


def _to_work_order_row(row: XpandDbWorkOrderRow) -> WorkOrderRow:
    return WorkOrderRow(
        Description=f"{row.locationCaption}: {row.caption}" if row.locationCaption else row.caption,
        LocationCode=row.locationCode,
        EquipmentCode=row.equipmentCode,
    )


def transform_row(db_work_order: XpandDbWorkOrder) -> XpandWorkOrder:
    return XpandWorkOrder(
        AccessCaption=db_work_order.masterKey,
        Caption=db_work_order.caption,
        Code=db_work_order.code,
        ContactCode=db_work_order.contactCode,
        Id=db_work_order.code,
        LastChanged=db_work_order.lastChanged,
        Priority=db_work_order.priority,
        Registered=db_work_order.createdAt,
        DueDate=db_work_order.expiresAt,
        RentalObjectCode=db_work_order.residenceId,
        Status=translate_status(db_work_order.status),
    )


def transform_row_details(db_work_order: XpandDbWorkOrderDetails) -> XpandWorkOrderDetails:
    """Build the detail view of a work order, including its rows.

    Raises XpandSchemaError when the embedded rows cannot be decoded.
    """
    rows = parse_rows(db_work_order.rows)

    return XpandWorkOrderDetails(
        **transform_row(db_work_order).model_dump(),
        Description="\n".join(_row_summary(row) for row in rows),
        WorkOrderRows=[_to_work_order_row(row) for row in rows],
    )
