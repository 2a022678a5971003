from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class EmailContact:
    email: str

    @property
    def phone(self) -> None:
        return None


@dataclass(frozen=True)
class PhoneContact:
    phone: str

    @property
    def email(self) -> None:
        return None


@dataclass(frozen=True)
class EmailAndPhoneContact:
    email: str
    phone: str


Contact = Union[EmailContact, PhoneContact, EmailAndPhoneContact]


def _clean(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


def contact_from(email: Optional[str], phone: Optional[str]) -> Contact:
    """Build a contact from optional email/phone fields.

    At least one contact method is required.
    """
    email = _clean(email)
    phone = _clean(phone)
    if email:
        email = email.lower()
        if "@" not in email:
            raise ValidationError("Email address is invalid")

    if email and phone:
        return EmailAndPhoneContact(email=email, phone=phone)
    if email:
        return EmailContact(email=email)
    if phone:
        return PhoneContact(phone=phone)
    raise ValidationError("Either email or phone is required")
