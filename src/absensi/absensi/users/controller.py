from __future__ import annotations

from typing import Any, Dict

from flask import Flask, g, jsonify

from ..common.datetime_utils import to_rfc3339, utc_now
from ..common.http import json_body, make_auth_required
from ..core.exceptions import ValidationError
from ..container import Container
from .model import TokenPair, User


def _user_json(user: User, *, with_created: bool = False) -> Dict[str, Any]:
    out: Dict[str, Any] = {"id": user.user_id, "username": user.username, "jabatan": user.jabatan}
    if with_created:
        out["created_at"] = to_rfc3339(user.created_at)
    return out


def _token_json(pair: TokenPair) -> Dict[str, Any]:
    return {
        "access_token": pair.access_token,
        "token_type": pair.token_type,
        "expires_at": to_rfc3339(pair.expires_at),
        "refresh_token": pair.refresh_token,
        "user": _user_json(pair.user),
    }


def register(app: Flask, container: Container) -> None:
    auth_required = make_auth_required(container.token_service)
    auth = container.auth_service

    @app.route("/register", methods=["POST"], endpoint="register")
    def register_user():
        data = json_body()
        user = auth.register(
            str(data.get("username") or ""),
            str(data.get("password") or ""),
            str(data.get("jabatan") or ""),
            now=utc_now(),
        )
        return jsonify({"message": "registered", "user": _user_json(user, with_created=True)}), 201

    @app.route("/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        pair = auth.login(str(data.get("username") or ""), str(data.get("password") or ""), now=utc_now())
        return jsonify(_token_json(pair))

    @app.route("/refresh", methods=["POST"], endpoint="refresh")
    def refresh():
        data = json_body()
        pair = auth.refresh(str(data.get("refresh_token") or ""), now=utc_now())
        return jsonify(_token_json(pair))

    @app.route("/logout", methods=["POST"], endpoint="logout")
    def logout():
        data = json_body()
        token = str(data.get("refresh_token") or "").strip()
        if not token:
            raise ValidationError("refresh_token required")
        auth.logout(token)
        return "", 204

    @app.route("/get-user", methods=["GET"], endpoint="get_user")
    @auth_required
    def get_user():
        user = auth.get_user(g.identity.user_id)
        return jsonify(_user_json(user, with_created=True))
