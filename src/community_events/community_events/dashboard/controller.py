from __future__ import annotations

from flask import Flask

from ..common.http import ok, staff_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/dashboard/stats", methods=["GET"], endpoint="dashboard_stats")
    @staff_required
    def dashboard_stats():
        return ok(container.dashboard_service.dashboard_stats(), "Dashboard statistics retrieved successfully")

    @app.route("/events/<int:event_id>/stats", methods=["GET"], endpoint="event_stats")
    @staff_required
    def event_stats(event_id: int):
        return ok(container.dashboard_service.event_stats(event_id))
