"""Inbound payload for POST /workOrders.

Several fields are nullable here even though the upstream systems document
them as required; the values seen in practice are what counts.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class MaintenanceUnit(BaseModel):
    id: str
    rentalPropertyId: str
    code: str
    caption: str
    type: str
    estateCode: str
    estate: str


class Property(BaseModel):
    address: str
    code: str
    entrance: str
    floor: str
    hasElevator: bool
    washSpace: Optional[str] = None
    area: float
    estateCode: str
    estate: str
    buildingCode: str
    building: str


class RentalProperty(BaseModel):
    id: str
    type: str
    property: Property
    maintenanceUnits: Optional[List[MaintenanceUnit]] = None


class Lease(BaseModel):
    leaseId: str
    leaseNumber: str
    type: str
    leaseStartDate: datetime
    leaseEndDate: Optional[datetime] = None
    contractDate: Optional[datetime] = None
    approvalDate: Optional[datetime] = None


class PhoneNumber(BaseModel):
    phoneNumber: str
    type: str
    isMainNumber: int


class Tenant(BaseModel):
    contactCode: str
    contactKey: str
    # absent for tenants with a protected identity
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    nationalRegistrationNumber: Optional[str] = None
    phoneNumbers: Optional[List[PhoneNumber]] = None
    emailAddress: Optional[str] = None


class AccessOptions(BaseModel):
    Type: int
    PhoneNumber: Optional[str] = None
    Email: str
    CallBetween: str


class CreateWorkOrderRow(BaseModel):
    LocationCode: str
    PartOfBuildingCode: str
    Description: str
    MaintenanceUnitCode: Optional[str] = None
    MaintenanceUnitCaption: Optional[str] = None


class WorkOrderImage(BaseModel):
    Filename: str
    ImageType: int
    Base64String: str


class CreateWorkOrderDetails(BaseModel):
    ContactCode: str
    RentalObjectCode: str
    AccessOptions: AccessOptions
    HearingImpaired: bool
    Pet: str
    Rows: List[CreateWorkOrderRow] = Field(..., min_length=1)
    Images: List[WorkOrderImage] = Field(default_factory=list)


class CreateWorkOrderBody(BaseModel):
    rentalProperty: RentalProperty
    tenant: Tenant
    lease: Lease
    details: CreateWorkOrderDetails
