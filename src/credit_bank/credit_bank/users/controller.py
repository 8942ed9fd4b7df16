from __future__ import annotations

from flask import Flask, g, jsonify

from ..common.validators import require_choice
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..web import auth_required, json_body
from .model import Identity


def register(app: Flask, container: Container) -> None:
    admin_only = auth_required(container, Role.ADMIN)

    @app.route("/api/auth/register", methods=["POST"], endpoint="register")
    def register_user():
        body = json_body()
        profile_data = body.get("profile")
        if profile_data is not None:
            container.profile_service.check_new_profile(require_choice(body.get("role"), Role, "Role"), profile_data)

        user = container.auth_service.register(
            email=body.get("email", ""),
            password=body.get("password", ""),
            display_name=body.get("display_name", ""),
            role=body.get("role", ""),
        )
        payload = {"message": "User registered successfully", "user": user.to_public()}
        if profile_data is not None:
            identity = Identity(user_id=user.user_id, role=user.role, email=user.email)
            payload["profile"] = container.profile_service.save_own(identity, profile_data).to_dict()
        return jsonify(payload), 201

    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        body = json_body()
        user, token = container.auth_service.authenticate(body.get("email", ""), body.get("password", ""))
        return jsonify({"token": token, "token_type": "Bearer", "user": user.to_public()})

    @app.route("/api/auth/profile", methods=["GET"], endpoint="profile")
    @auth_required(container)
    def profile():
        user = container.user_service.get_profile(g.identity.user_id)
        profile = container.profile_service.profile_for(g.identity)
        return jsonify({"user": user.to_public(), "profile": profile.to_dict() if profile else None})

    @app.route("/api/admin/users", methods=["GET"], endpoint="admin_users")
    @admin_only
    def admin_users():
        users = container.user_service.list_users(current_role=g.identity.role)
        return jsonify([u.to_public() for u in users])

    @app.route("/api/admin/users/<int:user_id>/status", methods=["PUT"], endpoint="admin_user_status")
    @admin_only
    def admin_user_status(user_id: int):
        is_active = json_body().get("is_active")
        if not isinstance(is_active, bool):
            raise ValidationError("is_active must be true or false")

        user = container.user_service.set_active(
            current_role=g.identity.role,
            current_user_id=g.identity.user_id,
            user_id=user_id,
            is_active=is_active,
        )
        return jsonify({"message": "User status updated", "user": user.to_public()})
