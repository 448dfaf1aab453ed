"""Raw row shapes as projected by the Xpand SQL queries."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class XpandDbWorkOrder(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: str
    caption: Optional[str] = None
    contactCode: Optional[str] = None
    masterKey: str
    status: int
    resource: Optional[str] = None
    resourceGroup: Optional[str] = None
    createdAt: datetime
    lastChanged: datetime
    expiresAt: Optional[datetime] = None
    priority: Optional[str] = None
    residenceId: str


class XpandDbWorkOrderDetails(XpandDbWorkOrder):
    # JSON array produced by FOR JSON PATH; NULL when the order has no rows
    rows: Optional[str] = None


class XpandDbWorkOrderRow(BaseModel):
    caption: str
    locationCaption: Optional[str] = None
    locationCode: Optional[str] = None
    equipmentCaption: Optional[str] = None
    equipmentCode: Optional[str] = None
