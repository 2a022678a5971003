from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.community_events.community_events.attendance.model import AttendanceRecord, CheckInOutcome
from src.community_events.community_events.container import Repositories, build_container
from src.community_events.community_events.core.enums import AttendanceStatus, EventCategory, RegistrationStatus, Role
from src.community_events.community_events.dashboard.model import DashboardStats
from src.community_events.community_events.events.model import Event
from src.community_events.community_events.invitations.model import Invitation
from src.community_events.community_events.notifications.sender import NotificationError
from src.community_events.community_events.qrcodes.model import QRCode
from src.community_events.community_events.registrations.model import Registration, ReserveOutcome
from src.community_events.community_events.users.contact import contact_from
from src.community_events.community_events.users.model import User

T0 = datetime(2026, 3, 1, 10, 0, 0)
QR_SECRET = "test-qr-secret"
FRONTEND_URL = "http://frontend.test"

ADMIN_ID = 1
SUBADMIN_ID = 2
MEMBER_ID = 3


class InMemoryEvents:
    """Event store. `lock` plays the role of the event row lock."""

    def __init__(self):
        self.lock = threading.Lock()
        self.rows: dict[int, Event] = {}
        self._next_id = 1

    def add(self, event: Event) -> Event:
        self.rows[event.event_id] = event
        self._next_id = max(self._next_id, event.event_id + 1)
        return event

    def get_by_id(self, event_id):
        return self.rows.get(int(event_id))

    def create_event(self, *, data, created_by):
        event_id = self._next_id
        self._next_id += 1
        self.rows[event_id] = Event(event_id=event_id, created_by=int(created_by), created_at=T0, **vars(data))
        return event_id

    def update_event(self, *, event_id, changes):
        with self.lock:
            event = self.rows[int(event_id)]
            new_max = changes.get("max_attendees", event.max_attendees)
            if new_max is not None and event.current_attendees > new_max:
                return False
            self.rows[int(event_id)] = replace(event, **changes)
            return True

    def delete_event(self, event_id):
        return self.rows.pop(int(event_id), None) is not None

    def list_events(self, *, category=None, is_active=None, search=None, offset=0, limit=10):
        items = [
            e
            for e in self.rows.values()
            if (category is None or e.category == category)
            and (is_active is None or e.is_active == is_active)
            and (search is None or search.lower() in (e.title + (e.description or "")).lower())
        ]
        items.sort(key=lambda e: e.start_date)
        return items[offset : offset + limit], len(items)

    def _claim_slot(self, event_id: int) -> Optional[ReserveOutcome]:
        event = self.rows.get(int(event_id))
        if event is None:
            return ReserveOutcome.EVENT_NOT_FOUND
        if event.is_full:
            return ReserveOutcome.CAPACITY_EXCEEDED
        self.rows[event.event_id] = replace(event, current_attendees=event.current_attendees + 1)
        return None

    def _release_slot(self, event_id: int) -> None:
        event = self.rows[int(event_id)]
        self.rows[event.event_id] = replace(event, current_attendees=max(0, event.current_attendees - 1))


class InMemoryRegistrations:
    def __init__(self, events: InMemoryEvents):
        self._events = events
        self.rows: dict[tuple[int, int], Registration] = {}

    def get(self, event_id, user_id):
        return self.rows.get((int(event_id), int(user_id)))

    def list_for_user(self, user_id):
        items = [r for r in self.rows.values() if r.user_id == int(user_id)]
        return sorted(items, key=lambda r: r.registration_date, reverse=True)

    def _reserve_locked(self, event_id, user_id, registered_at) -> ReserveOutcome:
        key = (int(event_id), int(user_id))
        if key in self.rows:
            return ReserveOutcome.ALREADY_REGISTERED
        failed = self._events._claim_slot(event_id)
        if failed is not None:
            return failed
        self.rows[key] = Registration(
            event_id=key[0],
            user_id=key[1],
            status=RegistrationStatus.CONFIRMED,
            registration_date=registered_at,
        )
        return ReserveOutcome.RESERVED

    def reserve(self, *, event_id, user_id, registered_at):
        with self._events.lock:
            return self._reserve_locked(event_id, user_id, registered_at)

    def release(self, *, event_id, user_id):
        with self._events.lock:
            if self.rows.pop((int(event_id), int(user_id)), None) is None:
                return False
            self._events._release_slot(event_id)
            return True


class InMemoryAttendance:
    def __init__(self, events: InMemoryEvents, registrations: InMemoryRegistrations, users=None):
        self._events = events
        self._registrations = registrations
        self._users = users
        self._lock = threading.Lock()
        self.rows: dict[tuple[int, int], AttendanceRecord] = {}
        self._next_id = 1

    def get(self, event_id, user_id):
        return self.rows.get((int(event_id), int(user_id)))

    def list_for_event(self, event_id):
        items = [r for r in self.rows.values() if r.event_id == int(event_id)]
        return sorted(items, key=lambda r: r.check_in_time or datetime.min, reverse=True)

    def _matches(self, record, search):
        user = self._users.get_by_id(record.user_id) if self._users else None
        if user is None:
            return False
        haystack = [user.first_name, user.last_name, user.contact.email or "", user.contact.phone or ""]
        return any(search.lower() in value.lower() for value in haystack)

    def search(self, *, event_id=None, status=None, search=None, checked_in_from=None, checked_in_to=None, offset=0, limit=10):
        items = [
            r
            for r in self.rows.values()
            if (event_id is None or r.event_id == int(event_id))
            and (status is None or r.status == status)
            and (search is None or self._matches(r, search))
            and (checked_in_from is None or (r.check_in_time is not None and r.check_in_time >= checked_in_from))
            and (checked_in_to is None or (r.check_in_time is not None and r.check_in_time <= checked_in_to))
        ]
        items.sort(key=lambda r: (r.check_in_time or datetime.min, r.attendance_id), reverse=True)
        return items[offset : offset + limit], len(items)

    def _check_in_locked(self, event_id, user_id, check_in_time, notes) -> bool:
        key = (int(event_id), int(user_id))
        existing = self.rows.get(key)
        if existing is None:
            self.rows[key] = AttendanceRecord(
                attendance_id=self._next_id,
                event_id=key[0],
                user_id=key[1],
                check_in_time=check_in_time,
                check_out_time=None,
                status=AttendanceStatus.CHECKED_IN,
                notes=notes,
            )
            self._next_id += 1
            return True
        if existing.check_in_time is not None:
            return False
        self.rows[key] = replace(
            existing,
            check_in_time=check_in_time,
            status=AttendanceStatus.CHECKED_IN,
            notes=notes if notes is not None else existing.notes,
        )
        return True

    def record_check_in(self, *, event_id, user_id, check_in_time, notes=None):
        with self._lock:
            return self._check_in_locked(event_id, user_id, check_in_time, notes)

    def record_check_out(self, *, event_id, user_id, check_out_time, notes=None):
        with self._lock:
            key = (int(event_id), int(user_id))
            existing = self.rows.get(key)
            if existing is None or existing.check_in_time is None or existing.check_out_time is not None:
                return False
            self.rows[key] = replace(
                existing,
                check_out_time=check_out_time,
                status=AttendanceStatus.CHECKED_OUT,
                notes=notes if notes is not None else existing.notes,
            )
            return True

    def register_and_check_in(self, *, event_id, user_id, at, notes=None):
        with self._events.lock, self._lock:
            key = (int(event_id), int(user_id))
            existing = self.rows.get(key)
            if existing is not None and existing.check_in_time is not None:
                return CheckInOutcome.ALREADY_CHECKED_IN

            outcome = self._registrations._reserve_locked(event_id, user_id, at)
            if outcome == ReserveOutcome.CAPACITY_EXCEEDED:
                return CheckInOutcome.CAPACITY_EXCEEDED
            if outcome == ReserveOutcome.EVENT_NOT_FOUND:
                return CheckInOutcome.EVENT_NOT_FOUND

            self._check_in_locked(event_id, user_id, at, notes)
            return CheckInOutcome.CHECKED_IN


class InMemoryQRCodes:
    def __init__(self):
        self._lock = threading.Lock()
        self.rows: dict[int, QRCode] = {}
        self._next_id = 1

    def replace_active(self, *, event_id, qr_data, type, expires_at, created_at):
        with self._lock:
            for qr_id, qr in list(self.rows.items()):
                if qr.event_id == int(event_id) and qr.is_active:
                    self.rows[qr_id] = replace(qr, is_active=False)
            qr_id = self._next_id
            self._next_id += 1
            self.rows[qr_id] = QRCode(
                qr_id=qr_id,
                event_id=int(event_id),
                qr_data=qr_data,
                type=type,
                expires_at=expires_at,
                is_active=True,
                created_at=created_at,
            )
            return qr_id

    def find_active(self, *, event_id, qr_data):
        for qr in self.rows.values():
            if qr.event_id == int(event_id) and qr.qr_data == qr_data and qr.is_active:
                return qr
        return None

    def get_active_for_event(self, event_id):
        active = [qr for qr in self.rows.values() if qr.event_id == int(event_id) and qr.is_active]
        return max(active, key=lambda qr: qr.created_at) if active else None

    def deactivate(self, qr_id):
        with self._lock:
            qr = self.rows.get(int(qr_id))
            if qr is None or not qr.is_active:
                return False
            self.rows[qr.qr_id] = replace(qr, is_active=False)
            return True

    def deactivate_expired(self, now):
        with self._lock:
            expired = [qr for qr in self.rows.values() if qr.is_active and qr.expires_at < now]
            for qr in expired:
                self.rows[qr.qr_id] = replace(qr, is_active=False)
            return len(expired)


class InMemoryUsers:
    def __init__(self):
        self.rows: dict[int, User] = {}
        self._next_id = 1

    def add(self, user: User) -> User:
        self.rows[user.user_id] = user
        self._next_id = max(self._next_id, user.user_id + 1)
        return user

    def get_by_id(self, user_id):
        return self.rows.get(int(user_id))

    def find_by_email_or_phone(self, *, email=None, phone=None):
        for user in self.rows.values():
            if (email and user.contact.email == email.lower()) or (phone and user.contact.phone == phone):
                return user
        return None

    def create_user(self, *, first_name, last_name, contact, password_hash, role):
        user_id = self._next_id
        self.add(
            User(
                user_id=user_id,
                first_name=first_name,
                last_name=last_name,
                contact=contact,
                password_hash=password_hash,
                role=role,
            )
        )
        return user_id


class InMemoryInvitations:
    def __init__(self):
        self.rows: dict[int, Invitation] = {}
        self._next_id = 1

    def create_invitation(self, *, contact, role, token, invited_by, invited_at, expires_at):
        invitation_id = self._next_id
        self._next_id += 1
        self.rows[invitation_id] = Invitation(
            invitation_id=invitation_id,
            contact=contact,
            role=role,
            token=token,
            invited_by=int(invited_by),
            invited_at=invited_at,
            expires_at=expires_at,
        )
        return invitation_id

    def get_by_id(self, invitation_id):
        return self.rows.get(int(invitation_id))

    def get_by_token(self, token):
        matches = [i for i in self.rows.values() if i.token == token]
        matches.sort(key=lambda i: (i.is_accepted, -i.invitation_id))
        return matches[0] if matches else None

    def find_pending(self, *, email, phone, now):
        for inv in self.rows.values():
            same = (email and inv.contact.email == email) or (phone and inv.contact.phone == phone)
            if same and inv.is_pending(now):
                return inv
        return None

    def list_invitations(self):
        return sorted(self.rows.values(), key=lambda i: i.invited_at, reverse=True)

    def update_token(self, invitation_id, token):
        self.rows[int(invitation_id)] = replace(self.rows[int(invitation_id)], token=token)

    def delete(self, invitation_id):
        return self.rows.pop(int(invitation_id), None) is not None

    def mark_accepted(self, invitation_id, accepted_at):
        inv = self.rows.get(int(invitation_id))
        if inv is None or inv.is_accepted:
            return False
        self.rows[inv.invitation_id] = replace(inv, is_accepted=True, accepted_at=accepted_at)
        return True

    def reopen(self, invitation_id):
        inv = self.rows[int(invitation_id)]
        self.rows[inv.invitation_id] = replace(inv, is_accepted=False, accepted_at=None)


class InMemoryStats:
    def __init__(self, users, events, registrations, attendance):
        self._users = users
        self._events = events
        self._registrations = registrations
        self._attendance = attendance

    def dashboard_stats(self, *, now, month_start):
        events = list(self._events.rows.values())
        attendance = list(self._attendance.rows.values())
        return DashboardStats(
            total_users=len(self._users.rows),
            total_events=len(events),
            upcoming_events=sum(1 for e in events if e.start_date > now),
            past_events=sum(1 for e in events if e.end_date < now),
            total_attendance=sum(1 for a in attendance if a.check_in_time is not None),
            this_month_attendance=sum(1 for a in attendance if a.check_in_time and a.check_in_time >= month_start),
            active_registrations=sum(
                1
                for r in self._registrations.rows.values()
                if r.status == RegistrationStatus.CONFIRMED
                and r.event_id in self._events.rows
                and self._events.rows[r.event_id].start_date > now
            ),
        )

    def attendance_counts(self, event_id):
        records = [a for a in self._attendance.rows.values() if a.event_id == int(event_id) and a.check_in_time]
        return (
            sum(1 for a in records if a.status == AttendanceStatus.CHECKED_IN),
            sum(1 for a in records if a.status == AttendanceStatus.CHECKED_OUT),
        )


class RecordingNotifier:
    def __init__(self, *, fail_email: bool = False, fail_sms: bool = False):
        self.fail_email = fail_email
        self.fail_sms = fail_sms
        self.emails: list[tuple[str, str, str]] = []
        self.sms: list[tuple[str, str]] = []

    def send_email(self, to, subject, body):
        if self.fail_email:
            raise NotificationError("smtp down")
        self.emails.append((to, subject, body))

    def send_sms(self, to, message):
        if self.fail_sms:
            raise NotificationError("sms gateway down")
        self.sms.append((to, message))


def _user(user_id: int, role: Role, email: str, password: str = "secret123") -> User:
    return User(
        user_id=user_id,
        first_name=role.value.title(),
        last_name="Tester",
        contact=contact_from(email, None),
        password_hash=generate_password_hash(password, method="pbkdf2:sha256:1000"),
        role=role,
    )


@pytest.fixture
def fixed_now() -> datetime:
    return T0


@pytest.fixture
def repos() -> Repositories:
    events = InMemoryEvents()
    registrations = InMemoryRegistrations(events)
    users = InMemoryUsers()
    users.add(_user(ADMIN_ID, Role.ADMIN, "admin@example.com"))
    users.add(_user(SUBADMIN_ID, Role.SUBADMIN, "subadmin@example.com"))
    users.add(_user(MEMBER_ID, Role.USER, "member@example.com"))
    attendance = InMemoryAttendance(events, registrations, users)
    return Repositories(
        users=users,
        events=events,
        registrations=registrations,
        attendance=attendance,
        qrcodes=InMemoryQRCodes(),
        invitations=InMemoryInvitations(),
        stats=InMemoryStats(users, events, registrations, attendance),
    )


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def container(repos, notifier):
    return build_container(repos=repos, notifier=notifier, qr_secret=QR_SECRET, frontend_url=FRONTEND_URL)


@pytest.fixture
def make_event(repos):
    """Store an event; defaults describe an active event starting one day after T0."""
    counter = {"next": 100}

    def _make(**overrides) -> Event:
        event_id = overrides.pop("event_id", counter["next"])
        counter["next"] = max(counter["next"], event_id) + 1
        fields = dict(
            event_id=event_id,
            title="Community dinner",
            start_date=T0 + timedelta(days=1),
            end_date=T0 + timedelta(days=1, hours=3),
            location="Main hall",
            category=EventCategory.COMMUNITY,
            created_by=ADMIN_ID,
        )
        fields.update(overrides)
        return repos.events.add(Event(**fields))

    return _make
