from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


class CustomerBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    primary_contact: str = Field(..., min_length=7, max_length=15)
    secondary_contact: Optional[str] = Field(None, max_length=15)
    email: EmailStr
    country: str = Field(..., min_length=1, max_length=200)
    timezone: str = Field(..., min_length=1, max_length=200)


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    primary_contact: Optional[str] = Field(None, min_length=7, max_length=15)
    secondary_contact: Optional[str] = Field(None, max_length=15)
    email: Optional[EmailStr] = None
    country: Optional[str] = Field(None, max_length=200)
    timezone: Optional[str] = Field(None, max_length=200)
    status: Optional[str] = Field(None, pattern="^(ACTIVE|INACTIVE)$")


class CustomerResponse(CustomerBase):
    uuid: str
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
