"""
Test database models (Event and Registration).
"""
import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.registrations import Registration, RegistrationStatus, is_occupying


def make_registration(event, email: str, status: RegistrationStatus = RegistrationStatus.CONFIRMED):
    return Registration(
        event_id=event.id,
        name="Member",
        email=email,
        phone="(11) 99999-9999",
        status=status.value,
    )


class TestEventModel:
    def test_create_event(self, make_event):
        event = make_event(capacity=100)

        assert event.id is not None
        assert event.capacity == 100
        assert event.current_registrations == 0
        assert event.is_active is True

    def test_capacity_must_be_positive(self, db_session: Session, make_event):
        with pytest.raises(IntegrityError):
            make_event(capacity=0)
        db_session.rollback()

    def test_counter_cannot_go_negative(self, db_session: Session, make_event):
        event = make_event(capacity=5)
        event.current_registrations = -1
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_event_relationship_with_registrations(self, db_session: Session, make_event):
        event = make_event()
        db_session.add_all([make_registration(event, "a@x.com"), make_registration(event, "b@x.com")])
        db_session.commit()
        db_session.refresh(event)

        assert len(event.registrations) == 2
        assert all(r.event_id == event.id for r in event.registrations)


class TestRegistrationModel:
    def test_defaults(self, db_session: Session, make_event):
        event = make_event()
        registration = Registration(event_id=event.id, name="Member", email="a@x.com", phone="1")
        db_session.add(registration)
        db_session.commit()
        db_session.refresh(registration)

        assert registration.status == RegistrationStatus.CONFIRMED.value
        assert registration.created_at is not None
        assert registration.event.title == event.title

    def test_one_live_registration_per_email(self, db_session: Session, make_event):
        event = make_event()
        db_session.add(make_registration(event, "a@x.com"))
        db_session.commit()

        db_session.add(make_registration(event, "a@x.com", RegistrationStatus.WAITLIST))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_cancelled_rows_do_not_collide(self, db_session: Session, make_event):
        event = make_event()
        db_session.add_all([
            make_registration(event, "a@x.com", RegistrationStatus.CANCELLED),
            make_registration(event, "a@x.com", RegistrationStatus.CANCELLED),
            make_registration(event, "a@x.com"),
        ])
        db_session.commit()


class TestRegistrationStatus:
    @pytest.mark.parametrize("raw", ["confirmed", "CONFIRMED", " Confirmed "])
    def test_parse_any_casing(self, raw):
        assert RegistrationStatus.parse(raw) is RegistrationStatus.CONFIRMED

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            RegistrationStatus.parse("archived")

    def test_occupying_statuses(self):
        assert is_occupying("PENDING")
        assert is_occupying(RegistrationStatus.CONFIRMED)
        assert not is_occupying("CANCELLED")
        assert not is_occupying("WAITLIST")
