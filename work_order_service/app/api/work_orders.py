from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..config import settings
from ..core.security import verify_bearer_token
from ..database import get_db
from ..exceptions import (
    NotFoundError,
    SchemaError,
    UpstreamError,
    ValidationFailedError,
    create_error_response,
)
from ..schemas.create import CreateWorkOrderBody
from ..schemas.error import ErrorResponse, ReasonResponse
from ..schemas.work_order import (
    AddMessageBody,
    MessageResponse,
    NewWorkOrderContent,
    NewWorkOrderResponse,
    WorkOrdersContent,
    WorkOrdersResponse,
    XpandWorkOrderDetailsResponse,
    XpandWorkOrdersContent,
    XpandWorkOrdersResponse,
)
from ..services import composer, odoo_adapter, xpand_adapter
from ..services.odoo_client import OdooClient, get_odoo_client
from ..services.result import AdapterError, AdapterResult
from .metadata import route_metadata

router = APIRouter(
    tags=["Work Order Service"],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        500: {"model": ErrorResponse, "description": "Upstream failure"},
    },
)


def _raise_for_xpand_failure(result: AdapterResult, message: str) -> None:
    detail = f"{message}: {result.err.value}"
    if result.err == AdapterError.schema_error:
        raise SchemaError(detail)
    raise UpstreamError(detail)


@router.get("/workOrders/contactCode/{contactCode}", response_model=WorkOrdersResponse)
async def get_work_orders_by_contact_code(
    contactCode: str,
    request: Request,
    client: OdooClient = Depends(get_odoo_client),
):
    """Work orders registered in Odoo for a tenant contact code, with tenant messages."""
    work_orders = await odoo_adapter.get_work_orders_by_contact_code(client, contactCode)
    return {"content": WorkOrdersContent(workOrders=work_orders), **route_metadata(request)}


@router.get("/workOrders/residenceId/{residenceId}", response_model=WorkOrdersResponse)
async def get_work_orders_by_residence_id(
    residenceId: str,
    request: Request,
    client: OdooClient = Depends(get_odoo_client),
):
    """Work orders registered in Odoo for a residence (rental property) id."""
    work_orders = await odoo_adapter.get_work_orders_by_residence_id(client, residenceId)
    return {"content": WorkOrdersContent(workOrders=work_orders), **route_metadata(request)}


@router.get(
    "/workOrders/xpand/residenceId/{residenceId}",
    response_model=XpandWorkOrdersResponse,
)
def get_xpand_work_orders_by_residence_id(
    residenceId: str,
    request: Request,
    skip: Optional[int] = Query(None, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    sortAscending: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """
    Work orders stored in Xpand for a residence id.
    Query params:
      - skip: number of work orders to skip (default 0)
      - limit: number of work orders to fetch (default 100)
      - sortAscending: "true" sorts oldest first, anything else newest first
    """
    result = xpand_adapter.get_work_orders_by_residence_id(
        db,
        residenceId,
        skip=skip or 0,
        limit=limit or xpand_adapter.DEFAULT_LIMIT,
        sort_ascending=sortAscending == "true",
    )
    if not result.ok:
        _raise_for_xpand_failure(result, "Failed to fetch work orders from Xpand")

    return {"content": XpandWorkOrdersContent(workOrders=result.data), **route_metadata(request)}


@router.get(
    "/workOrders/xpand/{code}",
    response_model=XpandWorkOrderDetailsResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_xpand_work_order_details(code: str, request: Request, db: Session = Depends(get_db)):
    """Details, including rows, of one Xpand work order."""
    result = xpand_adapter.get_work_order_details(db, code)
    if not result.ok:
        if result.err == AdapterError.not_found:
            raise NotFoundError(f"Work order with code {code} not found")
        _raise_for_xpand_failure(result, "Failed to fetch work order from Xpand")

    return {"content": result.data, **route_metadata(request)}


@router.post(
    "/workOrders",
    response_model=NewWorkOrderResponse,
    responses={401: {"model": ErrorResponse}},
)
async def create_work_order(
    body: CreateWorkOrderBody,
    request: Request,
    client: OdooClient = Depends(get_odoo_client),
    _token: str = Depends(verify_bearer_token),
):
    """Create a work order in Odoo together with its rental property, lease and tenant."""
    result = await composer.create_work_order(client, body, settings.MAINTENANCE_TEAM_NAME)
    if not result.ok:
        raise ValidationFailedError(result.message or result.err.value)

    return {"content": NewWorkOrderContent(newWorkOrderId=result.data), **route_metadata(request)}


@router.post(
    "/workOrders/{workOrderId}/update",
    response_model=MessageResponse,
    responses={400: {"model": ReasonResponse}, 401: {"model": ErrorResponse}},
)
async def add_message_to_work_order(
    workOrderId: int,
    request: Request,
    body: Optional[AddMessageBody] = Body(None),
    client: OdooClient = Depends(get_odoo_client),
    _token: str = Depends(verify_bearer_token),
):
    metadata = route_metadata(request)
    if body is None or not body.message:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=create_error_response(
                "Message is missing from the request body", metadata, key="reason"
            ),
        )

    await odoo_adapter.add_message_to_work_order(client, workOrderId, body.message)
    return {"message": f"Message added to work order with ID {workOrderId}", **metadata}


@router.post(
    "/workOrders/{workOrderId}/close",
    response_model=MessageResponse,
    responses={401: {"model": ErrorResponse}},
)
async def close_work_order(
    workOrderId: int,
    request: Request,
    client: OdooClient = Depends(get_odoo_client),
    _token: str = Depends(verify_bearer_token),
):
    await odoo_adapter.close_work_order(client, workOrderId)
    return {
        "message": f"Work order with ID {workOrderId} updated successfully",
        **route_metadata(request),
    }
