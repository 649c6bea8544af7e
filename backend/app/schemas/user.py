from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ApplicationUserCreate(BaseModel):
    employee_id: str
    role: str = Field(..., pattern="^(super_user|admin|hr|manager|director|employee)$")
    password: str = Field(..., min_length=8, max_length=128)


class ApplicationUserUpdate(BaseModel):
    role: Optional[str] = Field(None, pattern="^(super_user|admin|hr|manager|director|employee)$")
    status: Optional[str] = Field(None, pattern="^(ACTIVE|INACTIVE)$")


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=8, max_length=128)


class ApplicationUserResponse(BaseModel):
    uuid: str
    employee_id: str
    role: str
    status: str
    is_system_generated: bool
    last_login: Optional[datetime] = None
    employee_name: Optional[str] = None
    official_email: Optional[str] = None

    class Config:
        from_attributes = True


class CustomerAccessCreate(BaseModel):
    customer_id: str
    password: Optional[str] = Field(None, min_length=8, max_length=128)


class CustomerAccessResponse(BaseModel):
    uuid: str
    customer_id: str
    status: str
    is_system_generated: bool

    class Config:
        from_attributes = True


class ProfileResponse(BaseModel):
    uuid: str
    type: str
    role: str
    name: Optional[str] = None
    email: Optional[str] = None
    designation: Optional[str] = None
    department: Optional[str] = None
    last_login: Optional[datetime] = None
