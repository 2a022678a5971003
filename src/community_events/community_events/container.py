from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_QR_TTL_HOURS
from .dashboard.mysql_stats_repository import MySQLStatsRepository
from .dashboard.repository import StatsRepository
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .events.mysql_event_repository import MySQLEventRepository
from .events.repository import EventRepository
from .events.service import EventService
from .invitations.mysql_invitation_repository import MySQLInvitationRepository
from .invitations.repository import InvitationRepository
from .invitations.service import InvitationService
from .notifications.sender import LoggingNotificationSender, NotificationSender, RoutingNotificationSender
from .notifications.sms_sender import HttpSmsNotificationSender
from .notifications.smtp_sender import SmtpNotificationSender
from .qrcodes.mysql_qrcode_repository import MySQLQRCodeRepository
from .qrcodes.repository import QRCodeRepository
from .qrcodes.service import QRCodeService
from .registrations.mysql_registration_repository import MySQLRegistrationRepository
from .registrations.repository import RegistrationRepository
from .registrations.service import RegistrationService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Repositories:
    users: UserRepository
    events: EventRepository
    registrations: RegistrationRepository
    attendance: AttendanceRepository
    qrcodes: QRCodeRepository
    invitations: InvitationRepository
    stats: StatsRepository


@dataclass(frozen=True)
class Container:
    repos: Repositories
    notifier: NotificationSender
    qr_default_ttl_hours: int

    auth_service: AuthService
    event_service: EventService
    registration_service: RegistrationService
    attendance_service: AttendanceService
    qrcode_service: QRCodeService
    invitation_service: InvitationService
    dashboard_service: DashboardService


def build_notifier(settings: Any) -> NotificationSender:
    backend = str(getattr(settings, "NOTIFICATION_BACKEND", "log")).lower()
    if backend == "log":
        return LoggingNotificationSender()
    if backend != "smtp":
        raise ValueError(f"Unknown NOTIFICATION_BACKEND: {backend}")

    email = SmtpNotificationSender(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USERNAME,
        password=settings.SMTP_PASSWORD,
        sender=settings.SMTP_FROM,
        start_tls=bool(getattr(settings, "SMTP_START_TLS", True)),
    )
    sms: NotificationSender = LoggingNotificationSender()
    if getattr(settings, "SMS_ACCOUNT_SID", ""):
        sms = HttpSmsNotificationSender(
            base_url=settings.SMS_API_URL,
            account_sid=settings.SMS_ACCOUNT_SID,
            auth_token=settings.SMS_AUTH_TOKEN,
            from_number=settings.SMS_FROM_NUMBER,
        )
    return RoutingNotificationSender(email=email, sms=sms)


def mysql_repositories(db_config: Mapping[str, Any]) -> Repositories:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)
    return Repositories(
        users=MySQLUserRepository(conn),
        events=MySQLEventRepository(conn),
        registrations=MySQLRegistrationRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        qrcodes=MySQLQRCodeRepository(conn),
        invitations=MySQLInvitationRepository(conn),
        stats=MySQLStatsRepository(conn),
    )


def build_container(
    *,
    repos: Repositories,
    notifier: NotificationSender,
    qr_secret: str,
    frontend_url: str = "",
    qr_default_ttl_hours: int = DEFAULT_QR_TTL_HOURS,
) -> Container:
    attendance_service = AttendanceService(repos.events, repos.registrations, repos.attendance)
    return Container(
        repos=repos,
        notifier=notifier,
        qr_default_ttl_hours=int(qr_default_ttl_hours),
        auth_service=AuthService(repos.users),
        event_service=EventService(repos.events, repos.users),
        registration_service=RegistrationService(repos.events, repos.registrations),
        attendance_service=attendance_service,
        qrcode_service=QRCodeService(
            events=repos.events,
            registrations=repos.registrations,
            attendance=repos.attendance,
            attendance_service=attendance_service,
            qrcodes=repos.qrcodes,
            secret=qr_secret,
            frontend_url=frontend_url,
        ),
        invitation_service=InvitationService(
            invitations=repos.invitations,
            users=repos.users,
            notifier=notifier,
            frontend_url=frontend_url,
        ),
        dashboard_service=DashboardService(repos.events, repos.stats),
    )


def container_from_settings(settings: Any) -> Container:
    return build_container(
        repos=mysql_repositories(settings.DB_CONFIG),
        notifier=build_notifier(settings),
        qr_secret=settings.QR_SECRET,
        frontend_url=getattr(settings, "FRONTEND_URL", ""),
        qr_default_ttl_hours=getattr(settings, "QR_DEFAULT_TTL_HOURS", DEFAULT_QR_TTL_HOURS),
    )
