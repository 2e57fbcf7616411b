from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional, Protocol, Sequence

from ..common.datetime_utils import now_local
from ..common.ids import generate_simple_id
from ..common.logging import get_logger
from ..conciergeries.model import Conciergerie
from ..core.constants import EMAIL_MAX_ATTEMPTS, EMAIL_RETRY_INTERVAL_MINUTES
from ..core.enums import EmailType, MissionStatus
from ..core.exceptions import EmailDeliveryError
from ..database.mysql_base import DatabaseError
from ..employees.model import Employee
from ..homes.model import Home
from ..missions.model import Mission
from . import templates
from .model import Email, FailedEmail
from .repository import FailedEmailRepository

LOG = get_logger("job_conciergerie.notifications")


class EmailSender(Protocol):
    def send(self, email: Email) -> None:
        raise NotImplementedError


@dataclass(frozen=True)
class RetryReport:
    sent: int = 0
    failed: int = 0
    dropped: int = 0


class NotificationService:
    """Sends transactional emails and keeps failed ones in a retry queue.

    Sending never raises: failures are logged, queued and reported as ``False``.
    """

    def __init__(
        self,
        sender: EmailSender,
        failed_emails: FailedEmailRepository,
        *,
        retry_interval: timedelta = timedelta(minutes=EMAIL_RETRY_INTERVAL_MINUTES),
        max_attempts: int = EMAIL_MAX_ATTEMPTS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._sender = sender
        self._failed = failed_emails
        self._retry_interval = retry_interval
        self._max_attempts = int(max_attempts)
        self._clock = clock

    def send(self, email: Email, *, email_type: Optional[EmailType] = None) -> bool:
        try:
            self._sender.send(email)
            return True
        except EmailDeliveryError as exc:
            LOG.error("email %r to %s not sent: %s", email.subject, email.to, exc)
            self._enqueue(email, email_type)
            return False

    def _enqueue(self, email: Email, email_type: Optional[EmailType]) -> None:
        now = self._clock()
        item = FailedEmail(
            id=generate_simple_id(),
            type=email_type,
            recipient=email.to,
            subject=email.subject,
            html=email.html,
            created_at=now,
            last_attempt=now,
            attempts=1,
        )
        try:
            self._failed.add(item)
        except DatabaseError:
            LOG.exception("could not queue email %r to %s for retry", email.subject, email.to)

    # -------- Retry queue --------
    def pending_retries(self) -> Sequence[FailedEmail]:
        return list(self._failed.list_all())

    def should_retry(self, item: FailedEmail, now: datetime) -> bool:
        if item.attempts >= self._max_attempts:
            return False
        return now - item.last_attempt >= self._retry_interval

    def process_retries(self, now: Optional[datetime] = None) -> RetryReport:
        now = now or self._clock()
        sent = failed = dropped = 0

        for item in self._failed.list_all():
            if item.attempts >= self._max_attempts:
                LOG.warning("dropping email %s to %s after %d attempts", item.id, item.recipient, item.attempts)
                self._failed.remove(item.id)
                dropped += 1
                continue
            if not self.should_retry(item, now):
                continue
            try:
                self._sender.send(item.as_email())
            except EmailDeliveryError as exc:
                LOG.warning("retry %d of email %s failed: %s", item.attempts + 1, item.id, exc)
                self._failed.record_attempt(email_id=item.id, attempted_at=now)
                failed += 1
                continue
            self._failed.remove(item.id)
            sent += 1

        if sent or failed or dropped:
            LOG.info("email retries: sent=%d failed=%d dropped=%d", sent, failed, dropped)
        return RetryReport(sent=sent, failed=failed, dropped=dropped)

    # -------- Transactional emails --------
    def send_verification(self, conciergerie: Conciergerie, verification_url: str) -> bool:
        return self.send(
            templates.verification_email(conciergerie, verification_url),
            email_type=EmailType.VERIFICATION,
        )

    def send_registration(self, conciergerie: Conciergerie, employee: Employee) -> bool:
        return self.send(templates.registration_email(conciergerie, employee), email_type=EmailType.REGISTRATION)

    def send_acceptance(
        self,
        employee: Employee,
        conciergerie: Conciergerie,
        missions_count: int,
        is_accepted: bool,
    ) -> bool:
        return self.send(
            templates.acceptance_email(employee, conciergerie, missions_count, is_accepted),
            email_type=EmailType.ACCEPTANCE,
        )

    def send_mission_status(
        self,
        mission: Mission,
        home: Home,
        employee: Employee,
        conciergerie: Conciergerie,
        status: MissionStatus,
    ) -> bool:
        return self.send(
            templates.mission_status_email(mission, home, employee, conciergerie, status),
            email_type=EmailType.MISSION_STATUS,
        )

    def send_late_completion(self, mission: Mission, home: Home, employee: Employee, conciergerie: Conciergerie) -> bool:
        return self.send(
            templates.late_completion_email(mission, home, employee, conciergerie),
            email_type=EmailType.LATE_COMPLETION,
        )

    def send_mission_acceptance(
        self,
        mission: Mission,
        home: Home,
        employee: Employee,
        conciergerie: Conciergerie,
    ) -> bool:
        return self.send(
            templates.mission_acceptance_email(mission, home, employee, conciergerie),
            email_type=EmailType.MISSION_ACCEPTANCE,
        )

    def send_mission_updated(
        self,
        mission: Mission,
        home: Home,
        employee: Employee,
        conciergerie: Conciergerie,
        changes: Sequence[str],
    ) -> bool:
        return self.send(
            templates.mission_updated_email(mission, home, employee, conciergerie, changes),
            email_type=EmailType.MISSION_UPDATED,
        )

    def send_mission_removed(
        self,
        mission: Mission,
        home: Home,
        employee: Employee,
        conciergerie: Conciergerie,
        removal: str,
    ) -> bool:
        return self.send(
            templates.mission_removed_email(mission, home, employee, conciergerie, removal),
            email_type=EmailType.MISSION_REMOVED,
        )

    def send_new_device(self, employee: Employee) -> bool:
        return self.send(templates.new_device_email(employee), email_type=EmailType.NEW_DEVICE)
