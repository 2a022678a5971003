from __future__ import annotations

from flask import Flask, session

from ..common.http import current_user_id, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        identifier = data.get("email") or data.get("phone") or data.get("identifier") or ""
        s_user = container.auth_service.authenticate(str(identifier), str(data.get("password") or ""))

        session.clear()
        session["user_id"] = s_user.user_id
        session["name"] = s_user.full_name
        session["role"] = s_user.role.value
        return ok(s_user, "Login successful")

    @app.route("/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok(message="Logged out")

    @app.route("/auth/me", endpoint="me")
    @login_required
    def me():
        return ok(container.auth_service.get_session_user(current_user_id()))
