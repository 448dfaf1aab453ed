from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Dict, List

from ..schemas.odoo import OdooWorkOrder, OdooWorkOrderMessage
from ..schemas.work_order import WorkOrder
from .health import MissingDependencyError
from .odoo_client import OdooClient, OdooError
from .odoo_transform import strip_tags, transform_messages, transform_work_order

logger = logging.getLogger(__name__)

WORK_ORDER_MODEL = "maintenance.request"
WORK_ORDER_FIELDS = [
    "id",
    "uuid",
    "contact_code",
    "name",
    "description",
    "priority",
    "pet",
    "call_between",
    "space_code",
    "equipment_code",
    "rental_property_id",
    "create_date",
    "write_date",
    "due_date",
    "stage_id",
    "phone_number",
    "hidden_from_my_pages",
    "master_key",
    "maintenance_unit_code",
    "maintenance_unit_caption",
]

MESSAGE_MODEL = "mail.message"
MESSAGE_FIELDS = ["id", "res_id", "body", "message_type", "author_id", "create_date"]
TENANT_MESSAGE_TYPES = [
    "from_tenant",
    "tenant_sms",
    "tenant_mail",
    "tenant_sms_error",
    "tenant_mail_error",
]

DONE_STAGE_NAME = "Avslutad"


def _message_domain(work_order_ids: List[int]) -> List[Any]:
    return [
        ["res_id", "in", work_order_ids],
        ["model", "=", WORK_ORDER_MODEL],
        ["message_type", "in", TENANT_MESSAGE_TYPES],
    ]


async def _get_work_orders(client: OdooClient, domain: List[Any]) -> List[WorkOrder]:
    raw_work_orders = await client.search_read(WORK_ORDER_MODEL, domain, WORK_ORDER_FIELDS)
    work_orders = [OdooWorkOrder.model_validate(raw) for raw in raw_work_orders]
    if not work_orders:
        return []

    raw_messages = await client.search_read(
        MESSAGE_MODEL, _message_domain([w.id for w in work_orders]), MESSAGE_FIELDS
    )
    messages_by_work_order: Dict[int, List[OdooWorkOrderMessage]] = defaultdict(list)
    for raw in raw_messages:
        message = OdooWorkOrderMessage.model_validate(raw)
        messages_by_work_order[message.res_id].append(message)

    result = []
    for work_order in work_orders:
        transformed = transform_work_order(work_order)
        transformed.Messages = transform_messages(messages_by_work_order.get(work_order.id))
        result.append(transformed)
    return result


async def get_work_orders_by_contact_code(client: OdooClient, contact_code: str) -> List[WorkOrder]:
    logger.info("getting work orders for contact code %s", contact_code)
    return await _get_work_orders(client, [["contact_code", "=", contact_code]])


async def get_work_orders_by_residence_id(client: OdooClient, residence_id: str) -> List[WorkOrder]:
    logger.info("getting work orders for residence id %s", residence_id)
    # rental property records are named after the residence id on creation
    return await _get_work_orders(client, [["rental_property_id.name", "=", residence_id]])


async def add_message_to_work_order(client: OdooClient, work_order_id: int, message: str) -> int:
    body = strip_tags(message).replace("\n", "<br>")
    return await client.execute_kw(
        WORK_ORDER_MODEL,
        "message_post",
        [[work_order_id]],
        {"body": body, "message_type": "from_tenant", "body_is_html": True},
    )


async def close_work_order(client: OdooClient, work_order_id: int) -> bool:
    done_stages = await client.search_read(
        "maintenance.stage", [["done", "=", True], ["name", "=", DONE_STAGE_NAME]], ["id"]
    )
    if not done_stages:
        raise OdooError("No done maintenance stages found", model="maintenance.stage")

    return await client.update(WORK_ORDER_MODEL, work_order_id, {"stage_id": done_stages[0]["id"]})


async def health_check(client: OdooClient) -> None:
    if not client.is_configured:
        raise MissingDependencyError("Odoo connection is not configured")
    await client.connect()
    await client.search_read("maintenance.team", [], ["id"])
