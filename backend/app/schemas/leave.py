from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Any
from datetime import date, datetime


class LeaveApplyRequest(BaseModel):
    employee_id: str
    leave_type: str = Field(..., min_length=1, max_length=50)
    reason: Optional[str] = Field(None, max_length=100)
    leave_start_date: date
    leave_end_date: date
    is_half_day: bool = False
    secondary_approver_id: Optional[str] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.leave_end_date < self.leave_start_date:
            raise ValueError("Leave end date cannot be before start date")
        return self


class LeaveStatusUpdate(BaseModel):
    approval_status: str = Field(..., pattern="^(APPROVED|REJECTED)$")
    comment: Optional[str] = None


class LeaveApprover(BaseModel):
    approver_id: str
    approver_name: Optional[str] = None
    approver_email: Optional[str] = None
    approver_role: Optional[str] = None
    status: str = "REQUESTED"
    approver_comments: Optional[str] = None
    approval_date: Optional[str] = None


class LeaveResponse(BaseModel):
    uuid: str
    request_number: int
    employee_id: str
    leave_type: str
    reason: Optional[str] = None
    leave_start_date: date
    leave_end_date: date
    leave_days: float
    is_half_day: bool
    requested_date: Optional[datetime] = None
    leave_approvers: List[Any]
    leave_approval_status: str
    employee_name: Optional[str] = None

    class Config:
        from_attributes = True


class LeaveBalance(BaseModel):
    leave_type: str
    allocated: float
    carry_forwarded: float = 0
    applied: float
    balance: float


class LeaveAllocationItem(BaseModel):
    leave_type: str = Field(..., min_length=1, max_length=50)
    leaves_allocated: float = Field(..., ge=0)
    leaves_carry_forwarded: float = Field(0, ge=0)


class LeaveAllocationUpdate(BaseModel):
    year: Optional[str] = Field(None, pattern=r"^\d{4}$")
    allocations: List[LeaveAllocationItem]


class LeaveAllocationResponse(BaseModel):
    uuid: str
    employee_id: str
    year: str
    leave_type: str
    leaves_applied: float
    leaves_allocated: float
    leaves_carry_forwarded: float

    class Config:
        from_attributes = True
