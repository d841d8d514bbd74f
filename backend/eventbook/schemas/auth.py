"""Registration, verification, login and token schemas."""

from typing import Optional

from pydantic import EmailStr, Field, field_validator

from ._strict_base import StrictRequestModel, StrictModel
from .user import UserResponse


class RegisterRequest(StrictRequestModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    phone: Optional[str] = Field(None, max_length=30)

    @field_validator("email")
    @classmethod
    def _lowercase_email(cls, v: str) -> str:
        return v.lower()


class VerifyEmailRequest(StrictRequestModel):
    email: EmailStr
    otp: str = Field(..., min_length=4, max_length=10, pattern=r"^\d+$")


class ResendOtpRequest(StrictRequestModel):
    email: EmailStr


class LoginRequest(StrictRequestModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RegistrationPendingResponse(StrictModel):
    email: str
    message: str = "Please check your email for verification OTP"


class RefreshTokenRequest(StrictRequestModel):
    refresh_token: str = Field(..., min_length=1)


class LogoutRequest(StrictRequestModel):
    refresh_token: Optional[str] = None


class TokenPairResponse(StrictModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class TokenResponse(TokenPairResponse):
    """Token pair plus the authenticated user."""

    user: UserResponse
