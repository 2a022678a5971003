from __future__ import annotations

import pytest

from src.community_events.community_events.core.enums import Role
from src.community_events.community_events.core.exceptions import AuthenticationError, ValidationError
from src.community_events.community_events.users.contact import (
    EmailAndPhoneContact,
    EmailContact,
    PhoneContact,
    contact_from,
)

from conftest import MEMBER_ID


def test_contact_from_picks_variant():
    assert contact_from(" Someone@Example.com ", None) == EmailContact(email="someone@example.com")
    assert contact_from(None, "+1555") == PhoneContact(phone="+1555")
    assert contact_from("a@b.c", "+1555") == EmailAndPhoneContact(email="a@b.c", phone="+1555")
    assert PhoneContact(phone="+1555").email is None


@pytest.mark.parametrize("email, phone", [(None, None), ("", "  "), ("not-an-email", None)])
def test_contact_from_rejects(email, phone):
    with pytest.raises(ValidationError):
        contact_from(email, phone)


def test_authenticate_by_email(container):
    user = container.auth_service.authenticate("MEMBER@example.com", "secret123")
    assert user.user_id == MEMBER_ID
    assert user.role == Role.USER


@pytest.mark.parametrize("identifier, password", [("member@example.com", "wrong"), ("ghost@example.com", "secret123")])
def test_authenticate_rejects(container, identifier, password):
    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate(identifier, password)
