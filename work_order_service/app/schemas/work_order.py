"""Normalized work order shapes returned to clients."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class WorkOrderRow(BaseModel):
    Description: Optional[str] = None
    LocationCode: Optional[str] = None
    EquipmentCode: Optional[str] = None


class WorkOrderMessage(BaseModel):
    id: int
    body: str
    messageType: str
    author: str
    createDate: datetime


class WorkOrder(BaseModel):
    AccessCaption: str
    Caption: str
    Code: str
    ContactCode: str
    Description: str
    DetailsCaption: str
    ExternalResource: bool
    Id: str
    LastChanged: datetime
    Priority: str
    Registered: datetime
    DueDate: Optional[datetime] = None
    RentalObjectCode: str
    Status: str
    UseMasterKey: bool
    HiddenFromMyPages: Optional[bool] = None
    WorkOrderRows: List[WorkOrderRow]
    Messages: Optional[List[WorkOrderMessage]] = None
    Url: Optional[str] = None


class XpandWorkOrder(BaseModel):
    """List projection of a work order stored in Xpand."""

    AccessCaption: str
    Caption: Optional[str] = None
    Code: str
    ContactCode: Optional[str] = None
    Id: str
    LastChanged: datetime
    Priority: Optional[str] = None
    Registered: datetime
    DueDate: Optional[datetime] = None
    RentalObjectCode: str
    Status: str


class XpandWorkOrderDetails(XpandWorkOrder):
    Description: str
    WorkOrderRows: List[WorkOrderRow]


class WorkOrdersContent(BaseModel):
    workOrders: List[WorkOrder]


class XpandWorkOrdersContent(BaseModel):
    workOrders: List[XpandWorkOrder]


class NewWorkOrderContent(BaseModel):
    newWorkOrderId: int


class AddMessageBody(BaseModel):
    message: Optional[str] = None


class RouteMetadata(BaseModel):
    """Tracing fields merged into every response body."""

    request_id: Optional[str] = None
    path: Optional[str] = None


class WorkOrdersResponse(RouteMetadata):
    content: WorkOrdersContent


class XpandWorkOrdersResponse(RouteMetadata):
    content: XpandWorkOrdersContent


class XpandWorkOrderDetailsResponse(RouteMetadata):
    content: XpandWorkOrderDetails


class NewWorkOrderResponse(RouteMetadata):
    content: NewWorkOrderContent


class MessageResponse(RouteMetadata):
    message: str
