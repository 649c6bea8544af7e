from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Any
from datetime import date

MAX_DAILY_HOURS = 24
MAX_WEEKLY_HOURS = 168
HOURS_PATTERN = r"^\d{1,2}:[0-5]\d$"


class TaskDetail(BaseModel):
    model_config = ConfigDict(extra="allow")

    task: Optional[str] = None
    task_id: Optional[str] = Field(None, max_length=50)
    customer: Optional[str] = Field(None, max_length=100)
    project: Optional[str] = Field(None, max_length=100)
    task_brief: Optional[str] = None
    task_status: Optional[str] = Field(None, pattern="^(Not Started|In Progress|Completed|On Hold)$")
    task_hours: Optional[str] = Field(None, pattern=HOURS_PATTERN)
    remarks: Optional[str] = None


class DailyTimesheetCreate(BaseModel):
    employee_id: str
    # YYYY-MM-DD or DD/MM/YYYY
    timesheet_date: str
    task_details: List[TaskDetail]
    total_hours: float = Field(..., ge=0, le=MAX_DAILY_HOURS)


class DailyTimesheetUpdate(BaseModel):
    task_details: List[TaskDetail] = Field(..., min_length=1)
    total_hours: float = Field(..., ge=0, le=MAX_DAILY_HOURS)


class TimesheetApproval(BaseModel):
    approval_status: str
    comment: Optional[str] = None


class BulkTimesheetApproval(BaseModel):
    timesheet_ids: List[str] = Field(..., min_length=1)
    approval_status: str
    comment: Optional[str] = None


class DailyTimesheetResponse(BaseModel):
    uuid: str
    employee_id: str
    request_number: int
    timesheet_date: date
    task_details: List[Any]
    total_hours: float
    task_id: Optional[str] = None
    approval_status: str
    approver_id: Optional[str] = None
    approval_date: Optional[date] = None
    approver_comments: Optional[str] = None
    employee_name: Optional[str] = None

    class Config:
        from_attributes = True


class NextTaskIdResponse(BaseModel):
    task_id: str
    task_number: int
    current_task_count: int


class WeeklyTaskRow(BaseModel):
    model_config = ConfigDict(extra="allow")

    task: Optional[str] = None
    task_id: Optional[str] = None
    # {"mon": "08:00", ...}
    hours: dict[str, Any] = Field(default_factory=dict)
    is_locked: bool = False


class WeeklyTimesheetCreate(BaseModel):
    employee_id: str
    week_start_date: date
    week_end_date: date
    task_details: List[WeeklyTaskRow] = Field(..., min_length=1)
    total_hours: float = Field(..., ge=0, le=MAX_WEEKLY_HOURS)
    time_sheet_status: str = Field("REQUESTED", pattern="^(SAVED|REQUESTED)$")


class WeeklyTimesheetResponse(BaseModel):
    uuid: str
    employee_id: str
    request_number: int
    week_start_date: date
    week_end_date: date
    task_details: List[Any]
    total_hours: float
    task_id: Optional[str] = None
    approval_status: str
    approver_id: Optional[str] = None
    approver_role: Optional[str] = None
    approval_date: Optional[date] = None
    approver_comments: Optional[str] = None
    time_sheet_status: str
    employee_name: Optional[str] = None

    class Config:
        from_attributes = True
