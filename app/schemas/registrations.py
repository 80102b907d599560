from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.models.registrations import RegistrationStatus
from app.schemas.events import EventSummary
from app.schemas.pagination import Pagination


class RegistrationCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(min_length=1, max_length=30)
    organization: Optional[str] = Field(default=None, max_length=200)
    dietary_restrictions: Optional[str] = Field(default=None, max_length=500)
    accessibility_needs: Optional[str] = Field(default=None, max_length=500)
    custom_data: Optional[dict[str, Any]] = None

    @field_validator("name", "phone")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class StatusUpdate(BaseModel):
    status: RegistrationStatus

    @field_validator("status", mode="before")
    @classmethod
    def canonical_status(cls, v):
        return RegistrationStatus.parse(v)


class RegistrationOut(BaseModel):
    id: str
    event_id: str
    name: str
    email: str
    phone: str
    organization: Optional[str] = None
    dietary_restrictions: Optional[str] = None
    accessibility_needs: Optional[str] = None
    custom_data: Optional[dict[str, Any]] = None
    status: RegistrationStatus
    created_at: datetime
    event: Optional[EventSummary] = None

    class Config:
        from_attributes = True


class RegistrationPage(BaseModel):
    registrations: list[RegistrationOut]
    pagination: Pagination
