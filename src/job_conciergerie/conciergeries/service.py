from __future__ import annotations

from typing import Any, Mapping, Optional

from ..common.logging import get_logger
from ..common.validators import require_email, require_non_empty
from ..core.constants import PUBLIC_SITE_URL
from ..core.exceptions import NotFoundError, ValidationError
from ..database.mysql_base import DatabaseError
from ..notifications.service import NotificationService
from .model import Conciergerie, ConciergerieNotificationSettings
from .repository import ConciergerieRepository

LOG = get_logger("job_conciergerie.conciergeries")


def verification_url(base_url: str, user_id: str, *, public_url: str = PUBLIC_SITE_URL) -> str:
    """Link sent in the verification email. Local instances keep their own host."""
    root = base_url if "localhost" in (base_url or "") else public_url
    return f"{root.rstrip('/')}/{user_id}"


class ConciergerieService:
    def __init__(
        self,
        conciergeries: ConciergerieRepository,
        notifications: NotificationService,
        *,
        public_base_url: str = PUBLIC_SITE_URL,
    ):
        self._conciergeries = conciergeries
        self._notifications = notifications
        self._public_base_url = public_base_url

    def list_conciergeries(self) -> list[Conciergerie]:
        try:
            items = list(self._conciergeries.list_all())
        except DatabaseError:
            LOG.exception("error fetching conciergeries")
            return []
        return sorted(items, key=lambda c: c.name.lower())

    def get_by_id(self, user_id: Optional[str]) -> Optional[Conciergerie]:
        if not user_id:
            return None
        return self._conciergeries.get_by_id(user_id)

    def get_by_name(self, name: Optional[str]) -> Optional[Conciergerie]:
        if not name:
            return None
        return self._conciergeries.get_by_name(name)

    def create(
        self,
        *,
        name: str,
        email: str,
        tel: str = "",
        color_name: str = "",
        notification_settings: Optional[Mapping[str, Any]] = None,
    ) -> Conciergerie:
        name = require_non_empty(name, "Nom de la conciergerie")
        if self._conciergeries.get_by_name(name):
            raise ValidationError("Une conciergerie avec ce nom existe déjà")

        conciergerie = Conciergerie(
            name=name,
            email=require_email(email),
            tel=(tel or "").strip(),
            color_name=(color_name or "").strip(),
            notification_settings=ConciergerieNotificationSettings.from_dict(notification_settings),
        )
        return self._conciergeries.create(conciergerie)

    def update(self, user_id: Optional[str], data: Mapping[str, Any]) -> Optional[Conciergerie]:
        if not user_id:
            return None

        email = data.get("email")
        settings = data.get("notificationSettings")
        try:
            return self._conciergeries.update(
                user_id=user_id,
                name=(data.get("name") or None),
                email=require_email(email) if email else None,
                tel=data.get("tel"),
                color_name=data.get("colorName"),
                notification_settings=ConciergerieNotificationSettings.from_dict(settings) if settings else None,
            )
        except DatabaseError:
            LOG.exception("error updating conciergerie %s", user_id)
            return None

    def update_with_user_id(self, *, user_id: str, conciergerie_name: Optional[str]) -> Conciergerie:
        """Bind a verified device id to the chosen conciergerie."""
        if not conciergerie_name:
            raise ValidationError("Aucune conciergerie sélectionnée")

        conciergerie = self._conciergeries.get_by_name(conciergerie_name)
        if not conciergerie:
            raise NotFoundError("Conciergerie non trouvée")

        if conciergerie.id == user_id:
            return conciergerie

        self._conciergeries.set_id(name=conciergerie.name, user_id=user_id)
        LOG.info("conciergerie %s bound to device %s", conciergerie.name, user_id)
        return conciergerie.with_id(user_id)

    def register(self, *, user_id: str, name: Optional[str], base_url: str) -> bool:
        """Onboarding: send the verification link of ``name`` to its email address."""
        user_id = require_non_empty(user_id, "Identifiant")
        if not name:
            raise ValidationError("Aucune conciergerie sélectionnée")

        conciergerie = self._conciergeries.get_by_name(name)
        if not conciergerie:
            raise NotFoundError("Conciergerie non trouvée")

        url = verification_url(base_url, user_id, public_url=self._public_base_url)
        return self._notifications.send_verification(conciergerie, url)

    def verify(self, *, path_id: str, cookie_id: Optional[str], conciergerie_name: Optional[str]) -> Conciergerie:
        if not cookie_id or path_id != cookie_id:
            raise ValidationError("Lien de vérification invalide pour cet appareil")
        return self.update_with_user_id(user_id=path_id, conciergerie_name=conciergerie_name)

    def get_notification_settings(self, user_id: str) -> ConciergerieNotificationSettings:
        conciergerie = self._conciergeries.get_by_id(user_id)
        if not conciergerie:
            raise NotFoundError("Conciergerie non trouvée")
        return conciergerie.notification_settings

    def update_notification_settings(self, user_id: str, settings: Mapping[str, Any]) -> ConciergerieNotificationSettings:
        current = self.get_notification_settings(user_id)
        merged = {**current.to_dict(), **{k: bool(v) for k, v in (settings or {}).items()}}
        updated = self._conciergeries.update(
            user_id=user_id,
            notification_settings=ConciergerieNotificationSettings.from_dict(merged),
        )
        if not updated:
            raise NotFoundError("Conciergerie non trouvée")
        return updated.notification_settings
