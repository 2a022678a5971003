from __future__ import annotations

from flask import Flask

from ..common.http import current_role, current_user_id, json_body, ok, require_field, staff_required, to_json
from ..container import Container
from ..core.exceptions import ValidationError
from ..users.contact import contact_from
from .service import parse_role


def _public(invitation) -> dict:
    # The token is a credential; only the invitee receives it.
    data = to_json(invitation)
    data.pop("token", None)
    return data


def register(app: Flask, container: Container) -> None:
    @app.route("/invitations", methods=["GET"], endpoint="list_invitations")
    @staff_required
    def list_invitations():
        return ok([_public(i) for i in container.invitation_service.list_invitations()])

    @app.route("/invitations", methods=["POST"], endpoint="create_invitation")
    @staff_required
    def create_invitation():
        data = json_body()
        invitation = container.invitation_service.invite(
            current_role=current_role(),
            invited_by=current_user_id(),
            contact=contact_from(data.get("email"), data.get("phone")),
            role=parse_role(data.get("role")),
        )
        return ok(_public(invitation), "Invitation sent successfully", 201)

    @app.route("/users/bulk-invite", methods=["POST"], endpoint="bulk_invite")
    @staff_required
    def bulk_invite():
        items = json_body().get("invitations")
        if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
            raise ValidationError("invitations must be a list of objects")
        result = container.invitation_service.bulk_invite(
            current_role=current_role(),
            invited_by=current_user_id(),
            items=items,
        )
        return ok(result, "Bulk invitations processed")

    @app.route("/invitations/<int:invitation_id>", methods=["DELETE"], endpoint="revoke_invitation")
    @staff_required
    def revoke_invitation(invitation_id: int):
        container.invitation_service.revoke(
            invitation_id,
            current_user_id=current_user_id(),
            current_role=current_role(),
        )
        return ok(message="Invitation revoked successfully")

    @app.route("/invitations/accept", methods=["POST"], endpoint="accept_invitation")
    def accept_invitation():
        data = json_body()
        user_id = container.invitation_service.accept(
            token=str(require_field(data, "token")),
            first_name=str(data.get("first_name") or ""),
            last_name=str(data.get("last_name") or ""),
            password=data.get("password"),
        )
        return ok({"user_id": user_id}, "Invitation accepted", 201)
