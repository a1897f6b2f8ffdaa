"""API fixtures: a TestClient bound to the per-test database."""

import pytest
from fastapi.testclient import TestClient

from grievance_tracker.db.session import get_db
from grievance_tracker.main import app
from grievance_tracker.services.notification import notification_dispatcher


@pytest.fixture
def client(session_factory, transport, monkeypatch):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    monkeypatch.setattr(notification_dispatcher, "get_email_transport", lambda: transport)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
