from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

# bcrypt only looks at the first 72 bytes of its input
PASSWORD_MAX_BYTES = 72


def check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"The password may not be greater than {PASSWORD_MAX_BYTES} bytes.")
    return value


class AdminRegister(BaseModel):
    """Schema for registering a new admin."""
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8)

    @field_validator("password")
    @classmethod
    def check_password_length(cls, value: str) -> str:
        return check_password_bytes(value)


class AdminLogin(BaseModel):
    email: EmailStr
    password: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Schema for completing a password reset."""
    token: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=8)
    password_confirmation: str

    @field_validator("password")
    @classmethod
    def check_password_length(cls, value: str) -> str:
        return check_password_bytes(value)

    @model_validator(mode="after")
    def check_confirmation(self):
        if self.password != self.password_confirmation:
            raise ValueError("The password confirmation does not match.")
        return self


class AdminResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int
