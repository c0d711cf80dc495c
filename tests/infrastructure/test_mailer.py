from __future__ import annotations

import pytest

from erp_system.infrastructure import mailer
from erp_system.infrastructure.mailer import SmtpEmailSender


class FakeSMTP:
    instances = []

    def __init__(self, host, port, timeout):
        self.host = host
        self.port = port
        self.calls = []
        self.sent = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.calls.append("starttls")

    def login(self, username, password):
        self.calls.append(("login", username))

    def send_message(self, message):
        self.sent.append(message)


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(mailer.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


def test_send_builds_message(fake_smtp):
    sender = SmtpEmailSender(host="smtp.local", username="bot", password="pw", sender="erp@acme.com")
    sender.send(to="ana@acme.com", subject="Payroll ready", body="March payroll was approved.")

    smtp = fake_smtp.instances[0]
    assert (smtp.host, smtp.port) == ("smtp.local", 587)
    assert smtp.calls == ["starttls", ("login", "bot")]
    message = smtp.sent[0]
    assert message["To"] == "ana@acme.com"
    assert message["From"] == "erp@acme.com"
    assert message["Subject"] == "Payroll ready"
    assert "March payroll" in message.get_content()


def test_plain_connection_skips_tls_and_login(fake_smtp):
    SmtpEmailSender(host="localhost", port=25, use_tls=False).send(to="a@b.co", subject="s", body="b")
    assert fake_smtp.instances[0].calls == []
