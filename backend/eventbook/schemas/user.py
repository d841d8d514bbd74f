"""User schemas."""

from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field

from ..core.enums import RoleName
from ._strict_base import StrictRequestModel
from .base import StandardizedModel


class UserSummary(StandardizedModel):
    """Minimal user info embedded in other payloads."""

    id: str
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class UserResponse(UserSummary):
    phone: str = ""
    role: RoleName
    is_email_verified: bool
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class ProfileUpdateRequest(StrictRequestModel):
    """Partial profile update; a new password needs the current one."""

    name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    current_password: Optional[str] = None
    new_password: Optional[str] = Field(None, min_length=6, max_length=128)


class RoleUpdateRequest(StrictRequestModel):
    role: RoleName
