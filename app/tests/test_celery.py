"""
Test Celery tasks.
"""
from unittest.mock import patch

from sqlalchemy.orm import Session

from app.services.registrations import admit
from app.tasks import reconcile_occupancy_task
from app.tests.factories import details


class TestCeleryTasks:
    """Test Celery task functionality."""

    def test_reconcile_task_repairs_all_events(self, db_session: Session, session_factory, make_event):
        drifted = make_event(capacity=5, current_registrations=4)
        healthy = make_event(capacity=5)
        admit(db_session, event_id=healthy.id, email="alice@x.com", details=details())

        with patch("app.tasks.SessionLocal", session_factory):
            result = reconcile_occupancy_task.run()

        assert result == {drifted.id: 0, healthy.id: 1}
        db_session.refresh(drifted)
        assert drifted.current_registrations == 0

    def test_reconcile_task_single_event(self, db_session: Session, session_factory, make_event):
        event = make_event(capacity=5, current_registrations=2)

        with patch("app.tasks.SessionLocal", session_factory):
            result = reconcile_occupancy_task.run(event.id)

        assert result == {event.id: 0}

    def test_celery_app_configuration(self):
        """Test that Celery app is properly configured."""
        from app.core.celery_config import celery_app

        assert celery_app.conf.task_serializer == "json"
        assert celery_app.conf.result_serializer == "json"
        assert "json" in celery_app.conf.accept_content
        assert celery_app.conf.task_track_started is True
        assert "reconcile-occupancy" in celery_app.conf.beat_schedule

    def test_reconcile_task_is_registered(self):
        from app.core.celery_config import celery_app

        assert "app.tasks.reconcile_occupancy_task" in celery_app.tasks
