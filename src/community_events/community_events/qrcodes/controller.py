from __future__ import annotations

from flask import Flask, request

from ..common.http import as_int, current_user_id, json_body, login_required, ok, require_field, staff_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/events/<int:event_id>/generate-qr", methods=["POST"], endpoint="generate_qr")
    @staff_required
    def generate_qr(event_id: int):
        data = json_body()
        ttl_hours = as_int(data.get("ttl_hours", container.qr_default_ttl_hours), "ttl_hours")
        issued = container.qrcode_service.issue_token(event_id, ttl_hours=ttl_hours)
        return ok(issued, "QR code generated successfully", 201)

    @app.route("/events/<int:event_id>/validate-checkin-token", methods=["GET"], endpoint="validate_checkin_token")
    def validate_checkin_token(event_id: int):
        token = require_field(request.args, "token")
        return ok(container.qrcode_service.validate_token(event_id, token), "Token is valid")

    @app.route("/events/<int:event_id>/checkin-with-token", methods=["POST"], endpoint="checkin_with_token")
    @login_required
    def checkin_with_token(event_id: int):
        token = require_field(json_body(), "token")
        record = container.qrcode_service.check_in_with_token(event_id, str(token), current_user_id())
        return ok(record, "Successfully checked in to event")

    @app.route("/events/<int:event_id>/revoke-qr", methods=["DELETE"], endpoint="revoke_qr")
    @staff_required
    def revoke_qr(event_id: int):
        container.qrcode_service.revoke_token(event_id)
        return ok(message="QR code revoked successfully")

    @app.route("/events/<int:event_id>/qr-status", methods=["GET"], endpoint="qr_status")
    @staff_required
    def qr_status(event_id: int):
        active = container.qrcode_service.get_active_token(event_id)
        if active is None:
            return ok({"has_active_qr": False})
        return ok(
            {
                "has_active_qr": True,
                "qr_id": active.qr_id,
                "type": active.type,
                "expires_at": active.expires_at,
                "created_at": active.created_at,
                "checkin_url": container.qrcode_service.checkin_url(event_id, active.qr_data),
            }
        )
