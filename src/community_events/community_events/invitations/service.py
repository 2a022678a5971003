from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta
from typing import Any, Mapping, Optional, Sequence

from werkzeug.security import generate_password_hash

from ..common.datetime_utils import now_local
from ..common.validators import require_min_length, require_non_empty
from ..core.constants import BULK_INVITE_MAX_ITEMS, INVITATION_TOKEN_BYTES, INVITATION_TTL_HOURS, OTP_LENGTH
from ..core.enums import ErrorCode, Role
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from ..notifications.sender import NotificationError, NotificationSender
from ..users.contact import Contact, contact_from
from ..users.repository import UserRepository
from .model import BulkInviteItem, BulkInviteResult, Invitation
from .repository import InvitationRepository

logger = logging.getLogger(__name__)

_ROLE_LABELS = {
    Role.SUBADMIN: "Sub-Administrator",
    Role.USER: "Community Member",
}


def generate_invitation_token() -> str:
    return secrets.token_hex(INVITATION_TOKEN_BYTES)


def generate_otp() -> str:
    return "".join(str(secrets.randbelow(10)) for _ in range(OTP_LENGTH))


def parse_role(value: Any) -> Role:
    try:
        return Role(str(value or Role.USER.value).upper())
    except ValueError:
        raise ValidationError(f"Invalid role: {value}")


class InvitationService:
    """Staff invite new members by email and/or phone; invitees accept to create an account."""

    def __init__(
        self,
        *,
        invitations: InvitationRepository,
        users: UserRepository,
        notifier: NotificationSender,
        frontend_url: str = "",
    ):
        self._invitations = invitations
        self._users = users
        self._notifier = notifier
        self._frontend_url = (frontend_url or "").rstrip("/")

    def accept_url(self, token: str) -> str:
        return f"{self._frontend_url}/accept-invitation?token={token}"

    def invite(
        self,
        *,
        current_role: Role,
        invited_by: int,
        contact: Contact,
        role: Role,
        now: Optional[datetime] = None,
    ) -> Invitation:
        now = now or now_local()
        if role not in _ROLE_LABELS:
            raise ValidationError("Invitations can only grant USER or SUBADMIN roles")
        if not current_role.is_staff:
            raise AuthorizationError("Only administrators can invite users")
        if current_role == Role.SUBADMIN and role == Role.SUBADMIN:
            raise AuthorizationError("Subadmin cannot invite other subadmins")

        if self._users.find_by_email_or_phone(email=contact.email, phone=contact.phone):
            raise ConflictError("A user with this email or phone already exists", ErrorCode.USER_EXISTS)
        if self._invitations.find_pending(email=contact.email, phone=contact.phone, now=now):
            raise ConflictError("Invitation already exists for this contact method", ErrorCode.INVITATION_EXISTS)

        token = generate_invitation_token()
        invitation_id = self._invitations.create_invitation(
            contact=contact,
            role=role,
            token=token,
            invited_by=int(invited_by),
            invited_at=now,
            expires_at=now + timedelta(hours=INVITATION_TTL_HOURS),
        )

        try:
            self._deliver(invitation_id, contact, role, token)
        except NotificationError as exc:
            logger.warning("Invitation %s could not be sent, removing it: %s", invitation_id, exc)
            self._invitations.delete(invitation_id)
            raise UpstreamError("Failed to send invitation", ErrorCode.INVITATION_SEND_FAILED) from exc

        logger.info("Invitation %s created by user %s for role %s", invitation_id, invited_by, role.value)
        return self._get(invitation_id)

    def bulk_invite(
        self,
        *,
        current_role: Role,
        invited_by: int,
        items: Sequence[Mapping[str, Any]],
        now: Optional[datetime] = None,
    ) -> BulkInviteResult:
        """Invite each `{email, phone, role}` item independently.

        One item failing (bad contact, existing user, send failure) does not stop the others.
        """
        if not current_role.is_staff:
            raise AuthorizationError("Only administrators can invite users")
        if not items or len(items) > BULK_INVITE_MAX_ITEMS:
            raise ValidationError(f"Invitations must be a list with 1-{BULK_INVITE_MAX_ITEMS} items")

        now = now or now_local()
        result = BulkInviteResult()
        for item in items:
            email, phone, role = item.get("email"), item.get("phone"), item.get("role")
            try:
                self.invite(
                    current_role=current_role,
                    invited_by=invited_by,
                    contact=contact_from(email, phone),
                    role=parse_role(role),
                    now=now,
                )
            except DomainError as exc:
                result.failed.append(BulkInviteItem(email, phone, role, exc.message, exc.code.value))
                continue
            result.succeeded.append(BulkInviteItem(email, phone, role, "Invitation sent successfully"))

        logger.info(
            "Bulk invite by user %s: %s sent, %s failed",
            invited_by,
            len(result.succeeded),
            len(result.failed),
        )
        return result

    def _deliver(self, invitation_id: int, contact: Contact, role: Role, token: str) -> None:
        if contact.email:
            self._notifier.send_email(
                contact.email,
                "Invitation to join the community",
                (
                    "<h2>You've been invited to join the community</h2>"
                    f"<p>You have been invited to join as a {role.value.lower()}.</p>"
                    f'<p><a href="{self.accept_url(token)}">Accept the invitation</a> to create your account.</p>'
                    f"<p>This invitation will expire in {INVITATION_TTL_HOURS} hours.</p>"
                ),
            )
        if contact.phone:
            otp = generate_otp()
            self._notifier.send_sms(
                contact.phone,
                f"You have been invited to join the community as {_ROLE_LABELS[role]}. "
                f"Your invitation code is: {otp}. Valid for {INVITATION_TTL_HOURS} hours.",
            )
            # The code replaces the token so the invitee can accept with it.
            self._invitations.update_token(invitation_id, otp)

    def _get(self, invitation_id: int) -> Invitation:
        invitation = self._invitations.get_by_id(int(invitation_id))
        if invitation is None:
            raise NotFoundError("Invitation not found", ErrorCode.INVITATION_NOT_FOUND)
        return invitation

    def list_invitations(self) -> Sequence[Invitation]:
        return self._invitations.list_invitations()

    def revoke(self, invitation_id: int, *, current_user_id: int, current_role: Role) -> None:
        if not current_role.is_staff:
            raise AuthorizationError("Only administrators can revoke invitations")

        invitation = self._get(invitation_id)
        if invitation.is_accepted:
            raise ValidationError("Cannot revoke an accepted invitation", ErrorCode.INVITATION_ALREADY_ACCEPTED)

        if current_role == Role.SUBADMIN and invitation.invited_by != int(current_user_id):
            inviter = self._users.get_by_id(invitation.invited_by)
            if inviter is not None and inviter.role == Role.ADMIN:
                raise AuthorizationError("Subadmin cannot revoke invitations created by admins")

        self._invitations.delete(invitation.invitation_id)
        logger.info("Invitation %s revoked by user %s", invitation.invitation_id, current_user_id)

    def accept(
        self,
        *,
        token: str,
        first_name: str,
        last_name: str,
        password: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> int:
        """Create the invited user. Returns the new user id."""
        now = now or now_local()
        token = require_non_empty(token, "Token")
        first_name = require_non_empty(first_name, "First name")
        last_name = require_non_empty(last_name, "Last name")
        if password:
            require_min_length(password, "Password", 6)

        invitation = self._invitations.get_by_token(token)
        if invitation is None:
            raise NotFoundError("Invalid invitation token", ErrorCode.INVITATION_NOT_FOUND)
        if invitation.is_accepted:
            raise ValidationError("Invitation already accepted", ErrorCode.INVITATION_ALREADY_ACCEPTED)
        if invitation.is_expired(now):
            raise ValidationError("Invitation has expired", ErrorCode.INVITATION_EXPIRED)

        contact = invitation.contact
        if self._users.find_by_email_or_phone(email=contact.email, phone=contact.phone):
            raise ConflictError("A user with this email or phone already exists", ErrorCode.USER_EXISTS)

        if not self._invitations.mark_accepted(invitation.invitation_id, now):
            raise ValidationError("Invitation already accepted", ErrorCode.INVITATION_ALREADY_ACCEPTED)

        try:
            user_id = self._users.create_user(
                first_name=first_name,
                last_name=last_name,
                contact=contact,
                password_hash=generate_password_hash(password) if password else None,
                role=invitation.role,
            )
        except Exception:
            # No user was created, so the invitation must stay usable.
            logger.warning("User creation failed for invitation %s, reopening it", invitation.invitation_id)
            self._invitations.reopen(invitation.invitation_id)
            raise

        logger.info("Invitation %s accepted, user %s created", invitation.invitation_id, user_id)
        return user_id
