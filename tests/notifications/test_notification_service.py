from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import NOW, make_conciergerie, make_employee, make_home, make_mission
from job_conciergerie.core.enums import EmailType, MissionStatus, Task
from job_conciergerie.notifications import smtp_sender, templates
from job_conciergerie.notifications.model import Email
from job_conciergerie.notifications.smtp_sender import MailNotConfiguredError, SMTPSender, SMTPSettings

EMAIL = Email(to="marie.durand@example.fr", subject="Bonjour", html="<p>Bonjour</p>")


def test_send_success(notifications, sender, failed_emails_repo):
    assert notifications.send(EMAIL) is True
    assert sender.sent == [EMAIL]
    assert failed_emails_repo.list_all() == []


def test_failed_send_is_queued(notifications, sender, failed_emails_repo):
    sender.fail = True

    assert notifications.send(EMAIL, email_type=EmailType.NEW_DEVICE) is False

    [item] = failed_emails_repo.list_all()
    assert item.recipient == EMAIL.to
    assert item.type == EmailType.NEW_DEVICE
    assert item.attempts == 1
    assert item.last_attempt == NOW


def test_retry_waits_for_interval(notifications, sender, failed_emails_repo):
    sender.fail = True
    notifications.send(EMAIL)
    sender.fail = False

    report = notifications.process_retries(now=NOW + timedelta(minutes=5))
    assert report.sent == 0
    assert len(failed_emails_repo.list_all()) == 1

    report = notifications.process_retries(now=NOW + timedelta(minutes=10))
    assert report.sent == 1
    assert failed_emails_repo.list_all() == []
    assert sender.sent == [EMAIL]


def test_failed_retry_counts_attempt(notifications, sender, failed_emails_repo):
    sender.fail = True
    notifications.send(EMAIL)

    report = notifications.process_retries(now=NOW + timedelta(minutes=15))

    assert report.failed == 1
    [item] = failed_emails_repo.list_all()
    assert item.attempts == 2
    assert item.last_attempt == NOW + timedelta(minutes=15)


def test_email_dropped_after_max_attempts(sender, failed_emails_repo):
    from job_conciergerie.notifications.service import NotificationService

    service = NotificationService(sender, failed_emails_repo, max_attempts=2, clock=lambda: NOW)
    sender.fail = True
    service.send(EMAIL)
    service.process_retries(now=NOW + timedelta(minutes=10))

    report = service.process_retries(now=NOW + timedelta(minutes=20))

    assert report.dropped == 1
    assert failed_emails_repo.list_all() == []


def test_registration_email_escapes_message():
    employee = make_employee(message="<script>alert(1)</script>")

    email = templates.registration_email(make_conciergerie(), employee)

    assert email.to == "contact@azur.fr"
    assert "<script>" not in email.html
    assert "&lt;script&gt;" in email.html


def test_acceptance_email_without_missions():
    email = templates.acceptance_email(make_employee(), make_conciergerie(), 0, True)

    assert email.subject == "Votre inscription a été acceptée"
    assert "Aucune mission n'est disponible" in email.html


def test_mission_status_email():
    mission = make_mission(tasks=(Task.CLEANING, Task.ARRIVAL))

    email = templates.mission_status_email(
        mission, make_home(), make_employee(), make_conciergerie(), MissionStatus.STARTED
    )

    assert email.subject == "Mission démarrée : Villa Les Pins"
    assert "Marie Durand a démarré la mission suivante" in email.html
    assert "Le 12/03/2025 de 09:00 à 12:00" in email.html
    assert "Ménage, Arrivée" in email.html


def test_mission_removed_email_mentions_reopening_only_when_canceled():
    args = (make_mission(), make_home(), make_employee(), make_conciergerie())

    canceled = templates.mission_removed_email(*args, "canceled")
    deleted = templates.mission_removed_email(*args, "deleted")

    assert canceled.subject == "Mission annulée : Villa Les Pins"
    assert "de nouveau proposée" in canceled.html
    assert deleted.subject == "Mission supprimée : Villa Les Pins"
    assert "de nouveau proposée" not in deleted.html


class FakeSMTP:
    instances = []

    def __init__(self, host, port, timeout=None, context=None):
        self.host = host
        self.port = port
        self.calls = []
        self.messages = []
        FakeSMTP.instances.append(self)

    def ehlo(self):
        self.calls.append("ehlo")

    def has_extn(self, name):
        return name == "starttls"

    def starttls(self, context=None):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append(("login", user))

    def send_message(self, message):
        self.messages.append(message)

    def quit(self):
        self.calls.append("quit")


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(smtp_sender.smtplib, "SMTP", FakeSMTP)
    monkeypatch.setattr(smtp_sender.smtplib, "SMTP_SSL", FakeSMTP)
    return FakeSMTP


def test_smtp_sender_uses_starttls(fake_smtp):
    settings = SMTPSettings(host="smtp.example.test", port=587, user="bot", password="pw", from_email="bot@example.test")

    SMTPSender(settings).send(EMAIL)

    [server] = fake_smtp.instances
    assert server.calls == ["ehlo", "starttls", "ehlo", ("login", "bot"), "quit"]
    [message] = server.messages
    assert message["To"] == EMAIL.to
    assert message["Subject"] == "Bonjour"
    assert "bot@example.test" in message["From"]


def test_smtp_sender_implicit_tls_on_465(fake_smtp):
    settings = SMTPSettings(host="smtp.example.test", port=465, from_email="bot@example.test")

    SMTPSender(settings).send(EMAIL)

    [server] = fake_smtp.instances
    assert "starttls" not in server.calls
    assert server.calls[-1] == "quit"


def test_smtp_sender_requires_configuration():
    with pytest.raises(MailNotConfiguredError):
        SMTPSender(SMTPSettings(host="", port=587)).send(EMAIL)
