from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Conciergerie, ConciergerieNotificationSettings


class ConciergerieRepository(Protocol):
    def list_all(self) -> Sequence[Conciergerie]:
        raise NotImplementedError

    def get_by_id(self, user_id: str) -> Optional[Conciergerie]:
        raise NotImplementedError

    def get_by_name(self, name: str) -> Optional[Conciergerie]:
        raise NotImplementedError

    def create(self, conciergerie: Conciergerie) -> Conciergerie:
        raise NotImplementedError

    def update(
        self,
        *,
        user_id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        tel: Optional[str] = None,
        color_name: Optional[str] = None,
        notification_settings: Optional[ConciergerieNotificationSettings] = None,
    ) -> Optional[Conciergerie]:
        """Only the supplied (non-None) fields change."""

        raise NotImplementedError

    def set_id(self, *, name: str, user_id: str) -> bool:
        raise NotImplementedError
