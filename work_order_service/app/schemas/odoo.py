"""Raw record shapes as returned by Odoo's search_read.

Odoo returns ``False`` for every empty field regardless of type, and
many2one fields as ``[id, display_name]`` pairs. Records are validated here
as soon as they are received so the transformers never see unchecked data.
"""

from datetime import datetime
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

WORK_ORDER_TEXT_FIELDS = (
    "uuid",
    "phone_number",
    "name",
    "contact_code",
    "description",
    "priority",
    "pet",
    "call_between",
    "space_code",
    "equipment_code",
)


class OdooWorkOrder(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    uuid: str = ""
    phone_number: str = ""
    name: str = ""
    contact_code: str = ""
    description: str = ""
    priority: str = ""
    pet: str = ""
    call_between: str = ""
    space_code: str = ""
    equipment_code: str = ""
    rental_property_id: Optional[Tuple[int, str]] = None
    create_date: datetime
    write_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    stage_id: Tuple[int, str]
    hidden_from_my_pages: bool = False
    master_key: bool = True

    @field_validator(*WORK_ORDER_TEXT_FIELDS, mode="before")
    @classmethod
    def empty_text(cls, v):
        if v is False or v is None:
            return ""
        return v

    @field_validator("rental_property_id", "write_date", "due_date", mode="before")
    @classmethod
    def empty_optional(cls, v):
        return None if v is False else v


class OdooWorkOrderMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    res_id: int
    body: str = ""
    message_type: str
    author_id: Optional[Tuple[int, str]] = None
    create_date: datetime

    @field_validator("body", mode="before")
    @classmethod
    def empty_body(cls, v):
        if v is False or v is None:
            return ""
        return v

    @field_validator("author_id", mode="before")
    @classmethod
    def empty_author(cls, v):
        return None if v is False else v
