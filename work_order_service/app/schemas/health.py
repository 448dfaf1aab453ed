from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class HealthStatus(str, Enum):
    active = "active"
    impaired = "impaired"
    failure = "failure"
    unknown = "unknown"


class SystemHealth(BaseModel):
    name: str
    status: HealthStatus
    statusMessage: Optional[str] = None
    timeStamp: datetime
    subsystems: Optional[List[SystemHealth]] = None
