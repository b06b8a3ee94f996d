"""Unit tests for the SendGrid mail collaborator."""

from __future__ import annotations

import json
import types

import pytest

from notification_engine.infrastructure import email as email_module
from notification_engine.infrastructure.email import EmailMessage, describe_sendgrid_error

MESSAGE = EmailMessage(to="user@example.com", subject="Subject", html="<p>Body</p>")


class DummySettings:
    sendgrid_api_key = "SG.fake"
    sendgrid_sender = "sender@example.com"
    email_timeout_seconds = 2.5


class RecordingClient:
    """Stand-in for ``SendGridAPIClient`` that records what it was given."""

    instances: list["RecordingClient"] = []
    response = types.SimpleNamespace(status_code=202, body=None)

    def __init__(self, api_key: str) -> None:
        self.api_key = api_key
        self.client = types.SimpleNamespace(timeout=None)
        self.sent = []
        RecordingClient.instances.append(self)

    def send(self, message):
        self.sent.append(message)
        return self.response


@pytest.fixture(autouse=True)
def reset_clients():
    RecordingClient.instances = []
    yield


def test_send_email_without_configuration(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    """When SendGrid settings are missing the helper should exit early."""

    class Unconfigured:
        sendgrid_api_key = None
        sendgrid_sender = None

    monkeypatch.setattr(email_module, "get_settings", lambda: Unconfigured())
    monkeypatch.setattr(email_module, "SendGridAPIClient", RecordingClient)

    with caplog.at_level("INFO"):
        assert email_module.send_email(MESSAGE) is False

    assert RecordingClient.instances == []
    assert "configuration incomplete" in caplog.text


def test_send_email_success_uses_bounded_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", RecordingClient)

    assert email_module.send_email(MESSAGE) is True

    client = RecordingClient.instances[0]
    assert client.api_key == "SG.fake"
    assert client.client.timeout == 2.5
    assert len(client.sent) == 1


def test_send_email_rejects_non_success_status(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    class RejectingClient(RecordingClient):
        response = types.SimpleNamespace(status_code=400, body=b'{"errors": []}')

    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", RejectingClient)

    with caplog.at_level("ERROR"):
        assert email_module.send_email(MESSAGE) is False

    assert "status 400" in caplog.text


def test_send_email_logs_forbidden_error(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    """Forbidden responses from SendGrid should surface meaningful log details."""

    class FakeForbiddenError(Exception):
        status_code = 403
        body = json.dumps(
            {"errors": [{"message": "The provided authorization grant is invalid."}]}
        ).encode()

    class FailingClient(RecordingClient):
        def send(self, message):
            raise FakeForbiddenError()

    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", FailingClient)

    with caplog.at_level("ERROR"):
        result = email_module.send_email(MESSAGE)

    assert result is False
    assert "status 403" in caplog.text
    assert "authorization grant is invalid" in caplog.text


def test_send_email_survives_timeouts(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    class SlowClient(RecordingClient):
        def send(self, message):
            raise TimeoutError("timed out")

    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", SlowClient)

    with caplog.at_level("ERROR"):
        assert email_module.send_email(MESSAGE) is False

    assert "failed without details" in caplog.text


@pytest.mark.parametrize(
    ("body", "expected"),
    [
        (None, None),
        (b"", None),
        ("plain failure", "plain failure"),
        ({"errors": [{"field": "from", "message": "invalid"}]}, "from: invalid"),
        ({"unexpected": True}, '{"unexpected": true}'),
        (["a", "b"], "a; b"),
    ],
)
def test_describe_sendgrid_error(body, expected) -> None:
    assert describe_sendgrid_error(body) == expected
