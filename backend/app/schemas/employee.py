from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import date, datetime
import re


_PAN_RE = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$")
_AADHAAR_RE = re.compile(r"^\d{12}$")


class EmployeeBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    gender: str = Field(..., pattern="^(Male|Female|Other)$")
    date_of_birth: Optional[date] = None
    contact_number: str = Field(..., min_length=7, max_length=15)
    personal_email: Optional[EmailStr] = None
    blood_group: Optional[str] = Field(None, max_length=10)
    marital_status: Optional[str] = Field(None, max_length=20)
    permanent_address: Optional[str] = Field(None, max_length=255)
    temporary_address: Optional[str] = Field(None, max_length=255)
    skills: Optional[str] = None
    highest_qualification: Optional[str] = Field(None, max_length=200)
    total_work_experience: Optional[str] = Field(None, max_length=100)
    linkedin: Optional[str] = Field(None, max_length=255)
    ifsc_code: Optional[str] = Field(None, max_length=20)


class SensitiveFields(BaseModel):
    pan_card_number: Optional[str] = None
    bank_account_number: Optional[str] = None
    aadhaar_card_number: Optional[str] = None
    pf_account_number: Optional[str] = None

    @field_validator("pan_card_number")
    @classmethod
    def validate_pan(cls, v: Optional[str]) -> Optional[str]:
        if v and not _PAN_RE.match(v.upper()):
            raise ValueError("Invalid PAN card number")
        return v.upper() if v else v

    @field_validator("aadhaar_card_number")
    @classmethod
    def validate_aadhaar(cls, v: Optional[str]) -> Optional[str]:
        if v and not _AADHAAR_RE.match(v.replace(" ", "")):
            raise ValueError("Aadhaar number must be 12 digits")
        return v.replace(" ", "") if v else v


class EmployeeCreate(EmployeeBase, SensitiveFields):
    official_email: EmailStr
    employee_code: Optional[str] = Field(None, max_length=15)
    date_of_joining: Optional[date] = None
    reporting_manager_id: Optional[str] = None
    reporting_director_id: Optional[str] = None
    designation: Optional[str] = Field(None, max_length=50)
    department: Optional[str] = Field(None, max_length=50)


class EmployeeUpdate(SensitiveFields):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    gender: Optional[str] = Field(None, pattern="^(Male|Female|Other)$")
    date_of_birth: Optional[date] = None
    contact_number: Optional[str] = Field(None, min_length=7, max_length=15)
    personal_email: Optional[EmailStr] = None
    blood_group: Optional[str] = Field(None, max_length=10)
    marital_status: Optional[str] = Field(None, max_length=20)
    permanent_address: Optional[str] = Field(None, max_length=255)
    temporary_address: Optional[str] = Field(None, max_length=255)
    skills: Optional[str] = None
    highest_qualification: Optional[str] = Field(None, max_length=200)
    total_work_experience: Optional[str] = Field(None, max_length=100)
    linkedin: Optional[str] = Field(None, max_length=255)
    ifsc_code: Optional[str] = Field(None, max_length=20)
    official_email: Optional[EmailStr] = None
    employee_code: Optional[str] = Field(None, max_length=15)
    date_of_joining: Optional[date] = None
    # HR-only fields
    reporting_manager_id: Optional[str] = None
    reporting_director_id: Optional[str] = None
    designation: Optional[str] = Field(None, max_length=50)
    department: Optional[str] = Field(None, max_length=50)
    employment_status: Optional[str] = Field(None, pattern="^(ACTIVE|INACTIVE)$")


class EmployeeResponse(EmployeeBase, SensitiveFields):
    uuid: str
    official_email: Optional[str] = None
    employee_code: Optional[str] = None
    date_of_joining: Optional[date] = None
    reporting_manager_id: Optional[str] = None
    reporting_director_id: Optional[str] = None
    designation: Optional[str] = None
    department: Optional[str] = None
    employment_status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EmployeeSummary(BaseModel):
    uuid: str
    name: str
    official_email: Optional[str] = None
    employee_code: Optional[str] = None
    designation: Optional[str] = None
    department: Optional[str] = None
    employment_status: str

    class Config:
        from_attributes = True


class ApproverSearchResult(BaseModel):
    uuid: str
    name: str
    official_email: Optional[str] = None
    role: str
