from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional
from urllib.parse import quote

from ..attendance.model import AttendanceRecord, CheckInOutcome
from ..attendance.repository import AttendanceRepository
from ..attendance.service import AttendanceService, already_checked_in
from ..common.datetime_utils import now_local, to_epoch_millis
from ..core.constants import DEFAULT_QR_TTL_HOURS
from ..core.enums import ErrorCode, QRCodeType
from ..core.exceptions import NotFoundError, ValidationError
from ..events.model import Event
from ..events.policy import capacity_exceeded, ensure_active, ensure_ongoing, ensure_registration_open, require_event
from ..events.repository import EventRepository
from ..registrations.repository import RegistrationRepository
from .image import render_png_data_url
from .model import IssuedToken, QRCode, TokenCheck
from .repository import QRCodeRepository
from .token import CheckinToken

logger = logging.getLogger(__name__)


class QRCodeService:
    """Issues, validates, revokes and expires signed event check-in tokens."""

    def __init__(
        self,
        *,
        events: EventRepository,
        registrations: RegistrationRepository,
        attendance: AttendanceRepository,
        attendance_service: AttendanceService,
        qrcodes: QRCodeRepository,
        secret: str,
        frontend_url: str = "",
        render_image: Callable[[str], str] = render_png_data_url,
    ):
        if not secret:
            raise ValueError("QR secret must not be empty")
        self._events = events
        self._registrations = registrations
        self._attendance = attendance
        self._attendance_service = attendance_service
        self._qrcodes = qrcodes
        self._secret = secret
        self._frontend_url = (frontend_url or "").rstrip("/")
        self._render_image = render_image

    def _load_event(self, event_id: int) -> Event:
        return require_event(self._events.get_by_id(int(event_id)))

    def checkin_url(self, event_id: int, token: str) -> str:
        return f"{self._frontend_url}/events/{int(event_id)}/checkin?token={quote(token, safe='')}"

    def issue_token(
        self,
        event_id: int,
        *,
        ttl_hours: int = DEFAULT_QR_TTL_HOURS,
        now: Optional[datetime] = None,
    ) -> IssuedToken:
        now = now or now_local()
        if int(ttl_hours) <= 0:
            raise ValidationError("TTL must be a positive number of hours")

        event = self._load_event(event_id)
        ensure_active(event)

        token = CheckinToken.issue(
            event_id=event.event_id,
            issued_at_ms=to_epoch_millis(now),
            secret=self._secret,
        ).encode()
        expires_at = now + timedelta(hours=int(ttl_hours))

        self._qrcodes.replace_active(
            event_id=event.event_id,
            qr_data=token,
            type=QRCodeType.SECURE,
            expires_at=expires_at,
            created_at=now,
        )
        logger.info("QR code issued for event %s, expires at %s", event.event_id, expires_at.isoformat())

        url = self.checkin_url(event.event_id, token)
        return IssuedToken(
            event_id=event.event_id,
            token=token,
            checkin_url=url,
            qr_image=self._render_image(url),
            expires_at=expires_at,
            type=QRCodeType.SECURE,
        )

    def _validate(self, event_id: int, raw_token: str, now: datetime) -> tuple[Event, QRCode]:
        token = CheckinToken.decode(raw_token)
        if token.event_id != str(int(event_id)):
            raise ValidationError("Token does not match this event", ErrorCode.TOKEN_EVENT_MISMATCH)
        if not token.has_valid_signature(self._secret):
            raise ValidationError("Invalid token signature", ErrorCode.INVALID_TOKEN_SIGNATURE)

        qr = self._qrcodes.find_active(event_id=int(event_id), qr_data=token.encode())
        if qr is None:
            raise NotFoundError("Token not found or has been revoked", ErrorCode.TOKEN_NOT_FOUND)
        if qr.is_expired(now):
            raise ValidationError("Token has expired", ErrorCode.TOKEN_EXPIRED)

        event = self._load_event(event_id)
        ensure_ongoing(event, now)
        return event, qr

    def validate_token(self, event_id: int, raw_token: str, *, now: Optional[datetime] = None) -> TokenCheck:
        now = now or now_local()
        event, qr = self._validate(event_id, raw_token, now)
        return TokenCheck(
            event_id=event.event_id,
            event_title=event.title,
            start_date=event.start_date,
            end_date=event.end_date,
            registration_required=event.registration_required,
            registration_deadline=event.registration_deadline,
            max_attendees=event.max_attendees,
            current_attendees=event.current_attendees,
            expires_at=qr.expires_at,
        )

    def check_in_with_token(
        self,
        event_id: int,
        raw_token: str,
        user_id: int,
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        now = now or now_local()
        event, _ = self._validate(event_id, raw_token, now)
        self._attendance_service.ensure_not_checked_in(event.event_id, user_id)

        if event.registration_required and not self._registrations.get(event.event_id, int(user_id)):
            ensure_registration_open(event, now)
            outcome = self._attendance.register_and_check_in(
                event_id=event.event_id,
                user_id=int(user_id),
                at=now,
                notes="Checked in via QR code",
            )
            if outcome == CheckInOutcome.ALREADY_CHECKED_IN:
                raise already_checked_in()
            if outcome == CheckInOutcome.CAPACITY_EXCEEDED:
                raise capacity_exceeded()
            if outcome == CheckInOutcome.EVENT_NOT_FOUND:
                raise NotFoundError("Event not found", ErrorCode.EVENT_NOT_FOUND)

            logger.info("User %s auto-registered and checked in to event %s via QR", user_id, event.event_id)
            record = self._attendance.get(event.event_id, int(user_id))
            if record is None:
                raise NotFoundError("Attendance record not found", ErrorCode.ATTENDANCE_NOT_FOUND)
            return record

        return self._attendance_service.check_in(
            event.event_id,
            user_id,
            notes="Checked in via QR code",
            now=now,
        )

    def get_active_token(self, event_id: int) -> Optional[QRCode]:
        self._load_event(event_id)
        return self._qrcodes.get_active_for_event(int(event_id))

    def revoke_token(self, event_id: int) -> None:
        self._load_event(event_id)
        active = self._qrcodes.get_active_for_event(int(event_id))
        if active is None or not self._qrcodes.deactivate(active.qr_id):
            raise NotFoundError("No active QR code found for this event", ErrorCode.NO_ACTIVE_TOKEN)
        logger.info("QR code %s revoked for event %s", active.qr_id, event_id)

    def sweep_expired(self, now: Optional[datetime] = None) -> int:
        count = self._qrcodes.deactivate_expired(now or now_local())
        if count:
            logger.info("Deactivated %s expired QR codes", count)
        return count
