from __future__ import annotations

import re
from typing import Iterable, List, Optional

from ..schemas.odoo import OdooWorkOrder, OdooWorkOrderMessage
from ..schemas.work_order import WorkOrder, WorkOrderMessage, WorkOrderRow

SPACE_CODES = {
    "TV": "Tvättstuga",
    "BWC": "Badrum/WC",
    "KÖ": "Kök",
}

EQUIPMENT_CODES = {
    "TM": "Tvättmaskin",
    "TT": "Torktumlare",
    "TS": "Torkskåp",
    "MA": "Mangel",
    "TÅ": "Torkskåp",
    "SP": "Spis/ugn",
    "KY": "Kyl",
    "FR": "Frys",
    "KF": "Kyl/frys",
    "MU": "Microvågsugn",
    "DM": "Diskmaskin",
}

# spaces shared by all tenants; these carry no personal contact details
COMMON_SPACE_CODES = frozenset({"TV"})

COMMON_SPACE_ACCESS_CAPTION = "Gemensamt utrymme"
MASTER_KEY_ACCESS_CAPTION = "Huvudnyckel"

_TAG_RE = re.compile(r"<\s*/?\s*([a-zA-Z][a-zA-Z0-9]*)\b[^>]*>")
# comments, doctype and other declarations never survive stripping
_DECLARATION_RE = re.compile(r"<!--.*?-->|<![^>]*>", re.DOTALL)
_P_TAG_RE = re.compile(r"</?p>")
_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)


def strip_tags(text: Optional[str], allowed: Iterable[str] = ()) -> str:
    """Remove HTML tags from text, keeping tags whose name is in ``allowed``."""
    keep = {name.lower() for name in allowed}

    def _replace(match: re.Match) -> str:
        return match.group(0) if match.group(1).lower() in keep else ""

    return _TAG_RE.sub(_replace, _DECLARATION_RE.sub("", text or ""))


def remove_p_tags(text: Optional[str]) -> str:
    return _P_TAG_RE.sub("", text) if text else ""


def transform_space_code(space_code: Optional[str]) -> str:
    return SPACE_CODES.get(space_code or "", "")


def transform_equipment_code(equipment_code: Optional[str]) -> str:
    return EQUIPMENT_CODES.get(equipment_code or "", "")


def _describe(work_order: OdooWorkOrder, description: str, is_common_space: bool) -> str:
    if is_common_space:
        return description

    text = f"{description}\r\n Husdjur: {work_order.pet}"
    if work_order.call_between:
        text += (
            f"\r\n Kund nås enklast mellan {work_order.call_between} "
            f"\r\n på telefonnummer: {work_order.phone_number}."
        )
    return text


def transform_work_order(work_order: OdooWorkOrder) -> WorkOrder:
    """Convert one Odoo maintenance.request into the normalized WorkOrder.

    Captions are built from the translated space and equipment names when
    both are known, otherwise from the request's own name. Odoo stores a
    single row per request, so exactly one WorkOrderRow is emitted.
    """
    space = transform_space_code(work_order.space_code)
    equipment = transform_equipment_code(work_order.equipment_code)
    description = remove_p_tags(work_order.description)

    is_common_space = work_order.space_code in COMMON_SPACE_CODES
    description_with_more_info = _describe(work_order, description, is_common_space)

    if space and equipment:
        caption = f"WEBB: {space}, {equipment}"
        full_description = f"{space}, {equipment}: {description_with_more_info}"
        details_caption = f"{space}, {equipment}"
    else:
        caption = f"WEBB: {work_order.name}"
        full_description = f"{work_order.name} {description_with_more_info}"
        details_caption = f"{work_order.name}: {description}"

    rental_object_code = work_order.rental_property_id[1] if work_order.rental_property_id else ""

    return WorkOrder(
        AccessCaption=COMMON_SPACE_ACCESS_CAPTION if is_common_space else MASTER_KEY_ACCESS_CAPTION,
        Caption=caption,
        Code=f"od-{work_order.id}",
        ContactCode=work_order.contact_code,
        Description=full_description,
        DetailsCaption=details_caption,
        ExternalResource=False,
        Id=work_order.uuid,
        LastChanged=work_order.write_date or work_order.create_date,
        Priority=work_order.priority or "",
        Registered=work_order.create_date,
        DueDate=work_order.due_date,
        RentalObjectCode=rental_object_code,
        Status=work_order.stage_id[1],
        HiddenFromMyPages=work_order.hidden_from_my_pages,
        UseMasterKey=work_order.master_key,
        WorkOrderRows=[
            WorkOrderRow(
                Description=work_order.description,
                LocationCode=work_order.space_code,
                EquipmentCode=work_order.equipment_code,
            )
        ],
    )


def _author_name(message: OdooWorkOrderMessage) -> str:
    # author is formatted "Company, Person Name"
    if not message.author_id:
        return ""
    return message.author_id[1].split(", ")[-1]


def transform_messages(
    messages: Optional[List[OdooWorkOrderMessage]] = None,
) -> List[WorkOrderMessage]:
    return [
        WorkOrderMessage(
            id=message.id,
            body=_BR_RE.sub("\n", strip_tags(message.body, allowed=("br",))),
            messageType=message.message_type,
            author=_author_name(message),
            createDate=message.create_date,
        )
        for message in messages or []
    ]
