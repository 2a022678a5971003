from __future__ import annotations

from flask import Flask

from ..common.http import current_user_id, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/events/<int:event_id>/register", methods=["POST"], endpoint="register_for_event")
    @login_required
    def register_for_event(event_id: int):
        registration = container.registration_service.register(event_id, current_user_id())
        return ok(registration, "Successfully registered for event", 201)

    @app.route("/events/<int:event_id>/register", methods=["DELETE"], endpoint="cancel_registration")
    @login_required
    def cancel_registration(event_id: int):
        container.registration_service.cancel(event_id, current_user_id())
        return ok(message="Registration cancelled successfully")

    @app.route("/events/my-registrations", methods=["GET"], endpoint="my_registrations")
    @login_required
    def my_registrations():
        return ok(list(container.registration_service.list_for_user(current_user_id())))
