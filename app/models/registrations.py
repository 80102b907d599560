import datetime
import enum
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database.db import Base
from app.models.events import Event, new_id


class RegistrationStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    WAITLIST = "WAITLIST"

    @classmethod
    def parse(cls, value: "str | RegistrationStatus") -> "RegistrationStatus":
        """Accept any casing of a status name, e.g. ``confirmed``."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Unknown registration status: {value!r}") from None


# Statuses that hold a slot against the event capacity.
OCCUPYING_STATUSES = frozenset({RegistrationStatus.PENDING, RegistrationStatus.CONFIRMED})


def is_occupying(status: "str | RegistrationStatus") -> bool:
    return RegistrationStatus.parse(status) in OCCUPYING_STATUSES


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


_LIVE = text("status != 'CANCELLED'")


class Registration(Base):
    __tablename__ = "registrations"
    __table_args__ = (
        # at most one non-cancelled registration per email and event
        Index(
            "uq_registrations_event_email_live",
            "event_id",
            "email",
            unique=True,
            sqlite_where=_LIVE,
            postgresql_where=_LIVE,
        ),
        Index("ix_registrations_event_status", "event_id", "status"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    event_id: Mapped[str] = mapped_column(
        ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    phone: Mapped[str] = mapped_column(String(30), nullable=False)
    organization: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    dietary_restrictions: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    accessibility_needs: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    # free-form answers to event specific questions
    custom_data: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=RegistrationStatus.CONFIRMED.value)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    event: Mapped[Event] = relationship(back_populates="registrations")
