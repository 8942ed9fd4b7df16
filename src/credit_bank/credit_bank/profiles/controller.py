from __future__ import annotations

from flask import Flask, g, jsonify

from ..container import Container
from ..core.enums import Role
from ..web import auth_required, json_body


def register(app: Flask, container: Container) -> None:
    signed_in = auth_required(container)

    # ===== STUDENT PROFILES =====

    @app.route("/api/students", methods=["GET"], endpoint="students_list")
    @auth_required(container, Role.ADMIN, Role.FACULTY)
    def students_list():
        profiles = container.profile_service.list_students(requester=g.identity)
        return jsonify([p.to_dict() for p in profiles])

    @app.route("/api/students/<int:user_id>", methods=["GET"], endpoint="students_get")
    @signed_in
    def students_get(user_id: int):
        profile = container.profile_service.get_student(user_id=user_id, requester=g.identity)
        return jsonify(profile.to_dict())

    @app.route("/api/students/<int:user_id>", methods=["PUT"], endpoint="students_update")
    @auth_required(container, Role.STUDENT, Role.ADMIN)
    def students_update(user_id: int):
        profile = container.profile_service.save_student(user_id=user_id, requester=g.identity, data=json_body())
        return jsonify({"message": "Profile updated successfully", "profile": profile.to_dict()})

    # ===== FACULTY PROFILES =====

    @app.route("/api/faculty", methods=["GET"], endpoint="faculty_list")
    @auth_required(container, Role.ADMIN)
    def faculty_list():
        profiles = container.profile_service.list_faculty(requester=g.identity)
        return jsonify([p.to_dict() for p in profiles])

    @app.route("/api/faculty/<int:user_id>", methods=["GET"], endpoint="faculty_get")
    @signed_in
    def faculty_get(user_id: int):
        profile = container.profile_service.get_faculty(user_id=user_id, requester=g.identity)
        return jsonify(profile.to_dict())

    @app.route("/api/faculty/<int:user_id>", methods=["PUT"], endpoint="faculty_update")
    @auth_required(container, Role.FACULTY, Role.ADMIN)
    def faculty_update(user_id: int):
        profile = container.profile_service.save_faculty(user_id=user_id, requester=g.identity, data=json_body())
        return jsonify({"message": "Profile updated successfully", "profile": profile.to_dict()})
