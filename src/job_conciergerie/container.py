from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .auth.service import AuthService, load_companies
from .conciergeries.mysql_conciergerie_repository import MySQLConciergerieRepository
from .conciergeries.service import ConciergerieService
from .core.constants import DEFAULT_MAX_DEVICES, PUBLIC_SITE_URL
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.service import EmployeeService
from .homes.mysql_home_repository import MySQLHomeRepository
from .homes.service import HomeService
from .missions.mysql_mission_repository import MySQLMissionRepository
from .missions.service import MissionService
from .notifications.mysql_failed_email_repository import MySQLFailedEmailRepository
from .notifications.service import NotificationService
from .notifications.smtp_sender import SMTPSender, SMTPSettings
from .storage.ipfs import IPFSSettings, IPFSStorage


@dataclass(frozen=True)
class Container:
    conciergerie_service: ConciergerieService
    employee_service: EmployeeService
    home_service: HomeService
    mission_service: MissionService
    auth_service: AuthService
    notification_service: NotificationService
    storage: IPFSStorage
    conn: Optional[DatabaseConnection] = None


def _setting(settings: Any, name: str, default: Any = None) -> Any:
    if isinstance(settings, Mapping):
        return settings.get(name, default)
    return getattr(settings, name, default)


def smtp_settings(settings: Any) -> SMTPSettings:
    return SMTPSettings(
        host=str(_setting(settings, "SMTP_HOST", "") or ""),
        port=int(_setting(settings, "SMTP_PORT", 587) or 587),
        user=str(_setting(settings, "SMTP_USER", "") or ""),
        password=str(_setting(settings, "SMTP_PASSWORD", "") or ""),
        from_email=str(_setting(settings, "SMTP_FROM_EMAIL", "") or ""),
    )


def ipfs_settings(settings: Any) -> IPFSSettings:
    return IPFSSettings(
        jwt=str(_setting(settings, "IPFS_JWT", "") or ""),
        api_url=str(_setting(settings, "IPFS_API_URL", "") or ""),
        public_url=str(_setting(settings, "IPFS_PUBLIC_URL", "") or ""),
        gateway_domain=str(_setting(settings, "GATEWAY_DOMAIN", "") or ""),
        fallback_image_url=str(_setting(settings, "FALLBACK_IMAGE_URL", "/static/home.webp")),
    )


def build_container(*, db_config: dict, settings: Optional[Any] = None) -> Container:
    settings = settings or {}
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    conciergeries_repo = MySQLConciergerieRepository(conn)
    employees_repo = MySQLEmployeeRepository(conn)
    homes_repo = MySQLHomeRepository(conn)
    missions_repo = MySQLMissionRepository(conn)
    failed_emails_repo = MySQLFailedEmailRepository(conn)

    notification_service = NotificationService(SMTPSender(smtp_settings(settings)), failed_emails_repo)
    storage = IPFSStorage(ipfs_settings(settings))

    conciergerie_service = ConciergerieService(
        conciergeries_repo,
        notification_service,
        public_base_url=_setting(settings, "PUBLIC_BASE_URL", PUBLIC_SITE_URL) or PUBLIC_SITE_URL,
    )
    employee_service = EmployeeService(
        employees_repo,
        missions_repo,
        conciergeries_repo,
        notification_service,
        max_devices=int(_setting(settings, "MAX_DEVICES", DEFAULT_MAX_DEVICES)),
    )
    home_service = HomeService(homes_repo, missions_repo, storage)
    mission_service = MissionService(
        missions_repo,
        homes_repo,
        employees_repo,
        conciergeries_repo,
        notification_service,
    )
    auth_service = AuthService(
        conciergeries_repo,
        employees_repo,
        companies=load_companies(_setting(settings, "COMPANIES", ""), os.environ),
    )

    return Container(
        conn=conn,
        conciergerie_service=conciergerie_service,
        employee_service=employee_service,
        home_service=home_service,
        mission_service=mission_service,
        auth_service=auth_service,
        notification_service=notification_service,
        storage=storage,
    )
