import pytest
from fastapi.testclient import TestClient

import main
from core.store import open_store
from utils import emailing, notifications


@pytest.fixture
def store(tmp_path):
    s = open_store(str(tmp_path / "waitlist-test.db"))
    yield s
    s.close()


@pytest.fixture
def no_email(monkeypatch):
    monkeypatch.setattr(notifications, "NOTIFICATION_EMAIL", "")
    monkeypatch.setattr(emailing, "RESEND_API_KEY", "")
    monkeypatch.setattr(emailing, "SMTP_HOST", "")


@pytest.fixture
def client(store, no_email):
    main.app.state.store = store
    with TestClient(main.app) as c:
        yield c
    main.app.state.store = None


@pytest.fixture
def sent(monkeypatch):
    """Enable notifications and capture outgoing Resend calls"""
    calls = []

    async def fake_send(to_addr, subject, html, text=None, from_addr=None):
        calls.append({"to": to_addr, "subject": subject, "html": html, "text": text})
        return "msg_123"

    monkeypatch.setattr(notifications, "NOTIFICATION_EMAIL", "ops@example.com")
    monkeypatch.setattr(emailing, "RESEND_API_KEY", "re_test")
    monkeypatch.setattr(emailing, "send_email_resend", fake_send)
    return calls
