"""Service catalog schemas."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import ConfigDict, EmailStr, Field, field_validator

from ..models.service import ServiceCategory
from ._strict_base import StrictRequestModel
from .base import Money, StandardizedModel
from .user import UserSummary


class ServiceBase(StrictRequestModel):
    model_config = ConfigDict(
        extra="forbid", validate_assignment=True, str_strip_whitespace=True, use_enum_values=True
    )

    title: str = Field(..., min_length=3, max_length=100)
    description: str = Field(..., min_length=10, max_length=5000)
    category: ServiceCategory
    price_per_day: Money
    location: str = Field(..., min_length=2, max_length=255)
    capacity: Optional[int] = Field(None, gt=0)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=30)
    contact_address: Optional[str] = Field(None, max_length=255)
    images: List[str] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


class ServiceCreate(ServiceBase):
    @field_validator("price_per_day")
    @classmethod
    def _price_not_negative(cls, v: Money) -> Money:
        if v < 0:
            raise ValueError("Price per day cannot be negative")
        return v

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, v: List[str]) -> List[str]:
        return [tag.strip().lower() for tag in v if tag.strip()]


class ServiceUpdate(StrictRequestModel):
    """Partial update; counters, rating and ownership are not writable."""

    title: Optional[str] = Field(None, min_length=3, max_length=100)
    description: Optional[str] = Field(None, min_length=10, max_length=5000)
    category: Optional[ServiceCategory] = None
    price_per_day: Optional[Money] = None
    location: Optional[str] = Field(None, min_length=2, max_length=255)
    capacity: Optional[int] = Field(None, gt=0)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=30)
    contact_address: Optional[str] = Field(None, max_length=255)
    images: Optional[List[str]] = None
    features: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    is_active: Optional[bool] = None

    model_config = ConfigDict(
        extra="forbid", validate_assignment=True, str_strip_whitespace=True, use_enum_values=True
    )

    @field_validator("price_per_day")
    @classmethod
    def _price_not_negative(cls, v: Optional[Money]) -> Optional[Money]:
        if v is not None and v < 0:
            raise ValueError("Price per day cannot be negative")
        return v


class ServiceSummary(StandardizedModel):
    id: str
    title: str
    category: str
    location: str
    price_per_day: Money

    model_config = ConfigDict(from_attributes=True)


class ServiceResponse(ServiceSummary):
    description: str
    capacity: Optional[int] = None
    provider_id: str
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_address: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    is_active: bool
    rating: float
    total_bookings: int
    created_at: datetime
    provider: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)


class BookedRange(StandardizedModel):
    start_date: datetime
    end_date: datetime


class ServiceDetailResponse(StandardizedModel):
    service: ServiceResponse
    booked_ranges: List[BookedRange]


ServiceSortField = Literal["created_at", "price_per_day", "rating", "title"]
SortOrder = Literal["asc", "desc"]
