from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for permission checks."""

    ADMIN = "ADMIN"
    SUBADMIN = "SUBADMIN"
    USER = "USER"

    @property
    def is_staff(self) -> bool:
        return self in (Role.ADMIN, Role.SUBADMIN)


class EventCategory(str, Enum):
    PRAYER = "PRAYER"
    LECTURE = "LECTURE"
    COMMUNITY = "COMMUNITY"
    EDUCATION = "EDUCATION"
    CHARITY = "CHARITY"
    SOCIAL = "SOCIAL"


class RegistrationStatus(str, Enum):
    """Registration state. There is no waitlist: new rows are always CONFIRMED."""

    CONFIRMED = "CONFIRMED"
    PENDING = "PENDING"


class AttendanceStatus(str, Enum):
    """Attendance state stored in the database.

    REGISTERED and NO_SHOW exist for reporting only; check-in/check-out never produce them.
    """

    REGISTERED = "REGISTERED"
    CHECKED_IN = "CHECKED_IN"
    CHECKED_OUT = "CHECKED_OUT"
    NO_SHOW = "NO_SHOW"


class QRCodeType(str, Enum):
    BASIC = "basic"
    SECURE = "secure"


class ErrorCode(str, Enum):
    """Machine-readable error codes returned to HTTP clients."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    EVENT_NOT_ACTIVE = "EVENT_NOT_ACTIVE"
    EVENT_NOT_STARTED = "EVENT_NOT_STARTED"
    EVENT_ENDED = "EVENT_ENDED"
    EVENT_ALREADY_STARTED = "EVENT_ALREADY_STARTED"
    CAPACITY_BELOW_ATTENDEES = "CAPACITY_BELOW_ATTENDEES"

    REGISTRATION_NOT_REQUIRED = "REGISTRATION_NOT_REQUIRED"
    REGISTRATION_DEADLINE_PASSED = "REGISTRATION_DEADLINE_PASSED"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    REGISTRATION_NOT_FOUND = "REGISTRATION_NOT_FOUND"

    USER_NOT_REGISTERED = "USER_NOT_REGISTERED"
    REGISTRATION_NOT_CONFIRMED = "REGISTRATION_NOT_CONFIRMED"
    ALREADY_CHECKED_IN = "ALREADY_CHECKED_IN"
    ATTENDANCE_NOT_FOUND = "ATTENDANCE_NOT_FOUND"
    NOT_CHECKED_IN = "NOT_CHECKED_IN"
    ALREADY_CHECKED_OUT = "ALREADY_CHECKED_OUT"

    INVALID_TOKEN_FORMAT = "INVALID_TOKEN_FORMAT"
    TOKEN_EVENT_MISMATCH = "TOKEN_EVENT_MISMATCH"
    INVALID_TOKEN_SIGNATURE = "INVALID_TOKEN_SIGNATURE"
    TOKEN_NOT_FOUND = "TOKEN_NOT_FOUND"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    NO_ACTIVE_TOKEN = "NO_ACTIVE_TOKEN"

    USER_EXISTS = "USER_EXISTS"
    INVITATION_EXISTS = "INVITATION_EXISTS"
    INVITATION_NOT_FOUND = "INVITATION_NOT_FOUND"
    INVITATION_EXPIRED = "INVITATION_EXPIRED"
    INVITATION_ALREADY_ACCEPTED = "INVITATION_ALREADY_ACCEPTED"
    INVITATION_SEND_FAILED = "INVITATION_SEND_FAILED"
