from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class SubjectInfo(BaseModel):
    id: str
    type: str
    role: str
    email: Optional[str] = None


class LoginResponse(BaseModel):
    token: str
    token_type: str = "Bearer"
    expires_in: int
    subject: SubjectInfo


class ExtendSessionResponse(BaseModel):
    token: str
    token_type: str = "Bearer"
    expires_in: int


class AuthContext(BaseModel):
    """Authenticated caller resolved from the access token."""
    uuid: str
    role: str
    email: Optional[str] = None
    type: str = "employee"
    name: Optional[str] = None


class GenerateResetLinkRequest(BaseModel):
    email: EmailStr


class ValidateResetLinkRequest(BaseModel):
    token: str = Field(..., min_length=1)


class ValidateResetLinkResponse(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)


class MessageResponse(BaseModel):
    success: bool = True
    message: str
