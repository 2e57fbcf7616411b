from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import EmailType


@dataclass(frozen=True)
class Email:
    to: str
    subject: str
    html: str


@dataclass(frozen=True)
class FailedEmail:
    id: str
    type: Optional[EmailType]
    recipient: str
    subject: str
    html: str
    created_at: datetime
    last_attempt: datetime
    attempts: int = 1

    def as_email(self) -> Email:
        return Email(to=self.recipient, subject=self.subject, html=self.html)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value if self.type else None,
            "recipient": self.recipient,
            "subject": self.subject,
            "createdAt": self.created_at.isoformat(),
            "lastAttempt": self.last_attempt.isoformat(),
            "attempts": self.attempts,
        }
