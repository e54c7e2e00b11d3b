"""
Test Celery tasks.
"""
import pytest
from kombu.exceptions import OperationalError
from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from eventhub.models.registrations import Registration
from eventhub.services.registrations import Contact, register
from eventhub.tasks import send_registration_confirmation_task

CONTACT = Contact(name="Ada", email="ada@example.com", phone="555")


class TestCeleryTasks:
    """Test Celery task functionality."""

    def test_confirmation_task_marks_registration(self, db_session: Session, user_factory, event_factory):
        event = event_factory()
        registration = register(db_session, user_id=user_factory().id, event_id=event.id, contact=CONTACT)
        assert registration.confirmed_at is None

        # Call the task function directly (not through Celery)
        send_registration_confirmation_task.run(registration.id)

        db_session.refresh(registration)
        assert registration.confirmed_at is not None

    def test_confirmation_task_with_nonexistent_registration(self, db_session: Session):
        """The attendee may have unregistered before the task ran."""
        # Should not raise an exception
        send_registration_confirmation_task.run(99999)

    def test_confirmation_does_not_change_count(self, db_session: Session, user_factory, event_factory, counts):
        event = event_factory(capacity=3)
        registrations = [
            register(db_session, user_id=user_factory().id, event_id=event.id, contact=CONTACT) for _ in range(3)
        ]

        for registration in registrations:
            send_registration_confirmation_task.run(registration.id)

        assert counts(event.id) == (3, 3)
        confirmed = db_session.query(Registration).filter(Registration.confirmed_at.is_not(None)).count()
        assert confirmed == 3

    def test_api_registration_enqueues_confirmation(self, client, user_factory, event_factory, auth_headers, register_payload):
        event = event_factory()
        response = client.post("/registrations", json=register_payload(event.id), headers=auth_headers(user_factory()))

        assert response.status_code == 201
        # Eager mode ran the task before the response was built
        assert response.json()["id"]
        assert client.get(f"/events/{event.id}/stats").json()["confirmed_count"] == 1

    @pytest.mark.parametrize(
        "error",
        [OperationalError("broker unreachable"), RedisError("connection refused")],
    )
    def test_enqueue_failure_keeps_registration(
        self, client, user_factory, event_factory, auth_headers, register_payload, counts, monkeypatch, error
    ):
        def broken_delay(*args, **kwargs):
            raise error

        monkeypatch.setattr(send_registration_confirmation_task, "delay", broken_delay)
        event = event_factory()

        response = client.post("/registrations", json=register_payload(event.id), headers=auth_headers(user_factory()))

        assert response.status_code == 201
        assert counts(event.id) == (1, 1)

    def test_unexpected_enqueue_error_propagates(
        self, client, user_factory, event_factory, auth_headers, register_payload, monkeypatch
    ):
        def broken_delay(*args, **kwargs):
            raise ValueError("bad task arguments")

        monkeypatch.setattr(send_registration_confirmation_task, "delay", broken_delay)
        event = event_factory()

        with pytest.raises(ValueError):
            client.post("/registrations", json=register_payload(event.id), headers=auth_headers(user_factory()))

    def test_celery_app_configuration(self):
        """Test that Celery app is properly configured."""
        from eventhub.core.celery_config import celery_app

        assert celery_app.conf.task_serializer == "json"
        assert celery_app.conf.result_serializer == "json"
        assert "json" in celery_app.conf.accept_content
        assert celery_app.conf.task_track_started is True

    def test_confirmation_task_is_registered(self):
        """Test that the confirmation task is registered with Celery."""
        from eventhub.core.celery_config import celery_app

        assert "eventhub.tasks.send_registration_confirmation_task" in celery_app.tasks
