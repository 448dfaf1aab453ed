"""Turns a CreateWorkOrderBody into the records Odoo needs for a new request.

A request may report several rows (one per broken appliance); they are
merged into a single maintenance.request. Dependent records are created one
by one and are not rolled back if a later step fails.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from ..schemas.create import (
    CreateWorkOrderBody,
    CreateWorkOrderDetails,
    CreateWorkOrderRow,
    Lease,
    MaintenanceUnit,
    RentalProperty,
    Tenant,
)
from .odoo_client import OdooClient, OdooError
from .odoo_transform import transform_equipment_code, transform_space_code
from .result import AdapterError, AdapterResult

logger = logging.getLogger(__name__)

SUPPORTED_LOCATION_CODES = ("TV", "BWC", "KÖ")

LAUNDRY_ROOM_CAPTION = "Tvättstuga"
LAUNDRY_ROOM_PREFIX = "TVÄTTSTUGA "
LAUNDRY_ROOM_CATEGORY = "Tvättstuga"
APPLIANCE_CATEGORY = "Vitvaror"

PROTECTED_IDENTITY_NAME = "Skyddad identitet"
CREATION_ORIGIN = "mimer-nu"


@dataclass
class WorkOrderSummary:
    space_codes: List[str]
    equipment_codes: List[str]
    captions: List[str]
    title: str
    description: str

    @property
    def category_name(self) -> str:
        if LAUNDRY_ROOM_CAPTION in self.captions:
            return LAUNDRY_ROOM_CATEGORY
        return APPLIANCE_CATEGORY


def unique(values: Iterable[Optional[str]]) -> List[str]:
    """Distinct non-empty values in first-seen order."""
    seen: Dict[str, None] = {}
    for value in values:
        if value:
            seen.setdefault(value, None)
    return list(seen)


def unsupported_location_codes(rows: Iterable[CreateWorkOrderRow]) -> List[str]:
    return unique(row.LocationCode for row in rows if row.LocationCode not in SUPPORTED_LOCATION_CODES)


def summarize_rows(rows: List[CreateWorkOrderRow]) -> WorkOrderSummary:
    space_codes = unique(row.LocationCode for row in rows)
    equipment_codes = unique(row.PartOfBuildingCode for row in rows)
    captions = unique(transform_space_code(code) for code in space_codes)

    if len(equipment_codes) > 1:
        names = ", ".join(transform_equipment_code(code) for code in equipment_codes)
        title = f"Felanmälda vitvaror - {names}"
    else:
        space_caption = captions[0] if captions else ""
        equipment = transform_equipment_code(equipment_codes[0]) if equipment_codes else ""
        title = f"Felanmäld {space_caption.lower()} - {equipment}"

    if len(rows) > 1:
        description = "\n".join(
            f"{transform_equipment_code(row.PartOfBuildingCode)}: {row.Description}" for row in rows
        )
    else:
        description = rows[0].Description

    return WorkOrderSummary(
        space_codes=space_codes,
        equipment_codes=equipment_codes,
        captions=captions,
        title=title,
        description=description,
    )


def _odoo_date(value: Optional[datetime]) -> Union[str, bool]:
    # Odoo clears a date field when given False
    return value.strftime("%Y-%m-%d") if value else False


def _select_maintenance_unit(
    rental_property: RentalProperty, row: CreateWorkOrderRow
) -> Optional[MaintenanceUnit]:
    units = rental_property.maintenanceUnits or []
    for unit in units:
        if row.MaintenanceUnitCode and unit.code == row.MaintenanceUnitCode:
            return unit
    return units[0] if units else None


def rental_property_values(
    rental_property: RentalProperty, maintenance_unit: Optional[MaintenanceUnit]
) -> Dict[str, Any]:
    prop = rental_property.property
    address = prop.address
    if maintenance_unit is not None:
        # the property is reported at the address of its maintenance unit
        address = maintenance_unit.caption.replace(LAUNDRY_ROOM_PREFIX, "", 1)

    return {
        "name": rental_property.id,
        "rental_property_id": rental_property.id,
        "property_type": rental_property.type,
        "address": address,
        "code": prop.code,
        "area": prop.area,
        "entrance": prop.entrance,
        "floor": prop.floor,
        "has_elevator": "Ja" if prop.hasElevator else "Nej",
        "wash_space": prop.washSpace or False,
        "estate_code": prop.estateCode,
        "estate": prop.estate,
        "building_code": prop.buildingCode,
        "building": prop.building,
    }


def lease_values(lease: Lease) -> Dict[str, Any]:
    return {
        "name": lease.leaseId,
        "lease_id": lease.leaseId,
        "lease_number": lease.leaseNumber,
        "lease_type": lease.type,
        "lease_start_date": _odoo_date(lease.leaseStartDate),
        "lease_end_date": _odoo_date(lease.leaseEndDate),
        "contract_date": _odoo_date(lease.contractDate),
        "approval_date": _odoo_date(lease.approvalDate),
    }


def tenant_values(tenant: Tenant, details: CreateWorkOrderDetails) -> Dict[str, Any]:
    name = " ".join(part for part in (tenant.firstName, tenant.lastName) if part)
    access = details.AccessOptions
    phone_number = access.PhoneNumber
    if not phone_number and tenant.phoneNumbers:
        phone_number = tenant.phoneNumbers[0].phoneNumber

    return {
        "name": name or PROTECTED_IDENTITY_NAME,
        "contact_code": tenant.contactCode,
        "contact_key": tenant.contactKey,
        "national_registration_number": tenant.nationalRegistrationNumber or False,
        "email_address": access.Email or tenant.emailAddress or False,
        "phone_number": phone_number or "",
        "is_tenant": True,
    }


def maintenance_unit_values(unit: MaintenanceUnit, row: CreateWorkOrderRow) -> Dict[str, Any]:
    caption = row.MaintenanceUnitCaption or unit.caption
    return {
        "name": caption,
        "caption": caption,
        "type": unit.type,
        "code": row.MaintenanceUnitCode or unit.code,
        "estate_code": unit.estateCode,
    }


def work_order_values(
    details: CreateWorkOrderDetails,
    summary: WorkOrderSummary,
    *,
    rental_property_id: int,
    lease_id: int,
    tenant_id: int,
    maintenance_unit_id: Optional[int],
    maintenance_team_id: int,
    category_id: int,
) -> Dict[str, Any]:
    access = details.AccessOptions
    return {
        "rental_property_id": rental_property_id,
        "lease_id": lease_id,
        "tenant_id": tenant_id,
        "maintenance_unit_id": maintenance_unit_id or False,
        "hearing_impaired": details.HearingImpaired,
        "call_between": access.CallBetween,
        "phone_number": access.PhoneNumber or "",
        "pet": details.Pet,
        "space_code": ", ".join(summary.space_codes),
        "equipment_code": ", ".join(summary.equipment_codes),
        "description": summary.description,
        "images": [image.model_dump() for image in details.Images],
        "name": summary.title,
        "master_key": access.Type == 0,
        "space_caption": ", ".join(summary.captions),
        "maintenance_team_id": maintenance_team_id,
        "category_id": category_id,
        "creation_origin": CREATION_ORIGIN,
    }


async def find_id_by_name(client: OdooClient, model: str, name: str) -> int:
    ids = await client.search(model, [["name", "=", name]], limit=1)
    if not ids:
        raise OdooError(f'{model} with name "{name}" not found', model=model)
    return ids[0]


async def create_work_order(
    client: OdooClient, body: CreateWorkOrderBody, maintenance_team_name: str
) -> AdapterResult[int]:
    rental_property, tenant, lease, details = (
        body.rentalProperty,
        body.tenant,
        body.lease,
        body.details,
    )

    unsupported = unsupported_location_codes(details.Rows)
    if unsupported:
        message = f"Unsupported location code(s): {', '.join(unsupported)}"
        logger.warning("create_work_order: %s", message)
        return AdapterResult.failure(AdapterError.validation_error, message)

    maintenance_team_id = await find_id_by_name(client, "maintenance.team", maintenance_team_name)

    first_row = details.Rows[0]
    maintenance_unit = _select_maintenance_unit(rental_property, first_row)

    rental_property_id = await client.create(
        "maintenance.rental.property", rental_property_values(rental_property, maintenance_unit)
    )
    lease_id = await client.create("maintenance.lease", lease_values(lease))
    tenant_id = await client.create("maintenance.tenant", tenant_values(tenant, details))

    maintenance_unit_id = None
    if maintenance_unit is not None:
        maintenance_unit_id = await client.create(
            "maintenance.maintenance.unit", maintenance_unit_values(maintenance_unit, first_row)
        )

    summary = summarize_rows(details.Rows)
    category_id = await find_id_by_name(
        client, "maintenance.request.category", summary.category_name
    )

    new_work_order_id = await client.create(
        "maintenance.request",
        work_order_values(
            details,
            summary,
            rental_property_id=rental_property_id,
            lease_id=lease_id,
            tenant_id=tenant_id,
            maintenance_unit_id=maintenance_unit_id,
            maintenance_team_id=maintenance_team_id,
            category_id=category_id,
        ),
    )
    logger.info("create_work_order: created maintenance.request %s", new_work_order_id)
    return AdapterResult.success(new_work_order_id)
