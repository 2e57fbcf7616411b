from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import FailedEmail


class FailedEmailRepository(Protocol):
    def add(self, item: FailedEmail) -> None:
        raise NotImplementedError

    def list_all(self) -> Sequence[FailedEmail]:
        raise NotImplementedError

    def get(self, email_id: str) -> Optional[FailedEmail]:
        raise NotImplementedError

    def record_attempt(self, *, email_id: str, attempted_at: datetime) -> None:
        """Bump ``attempts`` and move ``last_attempt``."""

        raise NotImplementedError

    def remove(self, email_id: str) -> None:
        raise NotImplementedError
