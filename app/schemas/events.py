import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.pagination import Pagination


# ---------- Event ----------
class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    short_description: Optional[str] = Field(default=None, max_length=300)
    date: datetime.date
    time: str = Field(min_length=1, max_length=20)
    location: str = Field(min_length=1, max_length=200)
    category: Optional[str] = Field(default=None, max_length=100)
    price: float = Field(default=0, ge=0)
    tags: list[str] = Field(default_factory=list)
    is_featured: bool = False
    capacity: int = Field(ge=1)
    is_active: bool = True


class EventUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    short_description: Optional[str] = Field(default=None, max_length=300)
    date: Optional[datetime.date] = None
    time: Optional[str] = Field(default=None, max_length=20)
    location: Optional[str] = Field(default=None, max_length=200)
    category: Optional[str] = Field(default=None, max_length=100)
    price: Optional[float] = Field(default=None, ge=0)
    tags: Optional[list[str]] = None
    is_featured: Optional[bool] = None
    capacity: Optional[int] = Field(default=None, ge=1)
    is_active: Optional[bool] = None


class EventOut(BaseModel):
    id: str
    slug: str
    title: str
    description: str
    short_description: Optional[str] = None
    date: datetime.date
    time: str
    location: str
    category: Optional[str] = None
    price: float
    tags: list[str]
    is_featured: bool
    capacity: int
    current_registrations: int
    is_active: bool

    class Config:
        from_attributes = True


class EventSummary(BaseModel):
    title: str
    date: datetime.date
    time: str
    location: str

    class Config:
        from_attributes = True


class EventStatsOut(BaseModel):
    event_id: str
    capacity: int
    current_registrations: int
    available: int
    by_status: dict[str, int]


class OccupancyOut(BaseModel):
    event_id: str
    current_registrations: int


class EventPage(BaseModel):
    events: list[EventOut]
    pagination: Pagination
