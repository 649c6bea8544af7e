from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime

PROJECT_STATUS_PATTERN = "^(INITIATED|IN PROGRESS|COMPLETE|ON HOLD)$"


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    domain: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    location: Optional[str] = Field(None, max_length=255)
    status: str = Field("INITIATED", pattern=PROJECT_STATUS_PATTERN)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    domain: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    location: Optional[str] = Field(None, max_length=255)
    status: Optional[str] = Field(None, pattern=PROJECT_STATUS_PATTERN)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class ProjectResponse(ProjectCreate):
    uuid: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ResourceAllocationCreate(BaseModel):
    project_id: str
    customer_id: str
    employee_id: str
    role: str = Field(..., min_length=1, max_length=255)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    customer_approver: bool = False


class ResourceAllocationUpdate(BaseModel):
    role: Optional[str] = Field(None, min_length=1, max_length=255)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    customer_approver: Optional[bool] = None
    status: Optional[str] = Field(None, pattern="^(ACTIVE|INACTIVE)$")


class ResourceAllocationResponse(BaseModel):
    uuid: str
    allocation_code: str
    project_id: str
    customer_id: str
    employee_id: str
    role: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    customer_approver: bool
    status: str

    class Config:
        from_attributes = True
