from __future__ import annotations

from flask import Flask, g, jsonify

from ..container import Container
from ..core.enums import Role
from ..web import auth_required, json_body


def register(app: Flask, container: Container) -> None:
    student_only = auth_required(container, Role.STUDENT)
    faculty_only = auth_required(container, Role.FACULTY)

    @app.route("/api/activities/student", methods=["GET"], endpoint="activities_student")
    @student_only
    def activities_student():
        activities = container.activity_service.list_for_student(g.identity.user_id)
        return jsonify([a.to_dict() for a in activities])

    @app.route("/api/activities", methods=["POST"], endpoint="activities_create")
    @student_only
    def activities_create():
        activity = container.activity_service.submit(student_id=g.identity.user_id, data=json_body())
        return jsonify(activity.to_dict()), 201

    @app.route("/api/activities/faculty/pending", methods=["GET"], endpoint="activities_pending")
    @faculty_only
    def activities_pending():
        return jsonify([a.to_dict() for a in container.activity_service.list_pending()])

    @app.route("/api/activities/<int:activity_id>", methods=["GET"], endpoint="activities_get")
    @auth_required(container)
    def activities_get(activity_id: int):
        activity = container.activity_service.get(activity_id=activity_id, requester=g.identity)
        return jsonify(activity.to_dict())

    @app.route("/api/activities/<int:activity_id>", methods=["PUT"], endpoint="activities_update")
    @student_only
    def activities_update(activity_id: int):
        activity = container.activity_service.update(
            activity_id=activity_id, student_id=g.identity.user_id, data=json_body()
        )
        return jsonify(activity.to_dict())

    @app.route("/api/activities/<int:activity_id>", methods=["DELETE"], endpoint="activities_delete")
    @student_only
    def activities_delete(activity_id: int):
        container.activity_service.delete(activity_id=activity_id, student_id=g.identity.user_id)
        return jsonify({"message": "Activity deleted successfully"})

    @app.route("/api/activities/<int:activity_id>/verify", methods=["POST"], endpoint="activities_verify")
    @faculty_only
    def activities_verify(activity_id: int):
        body = json_body()
        activity = container.activity_service.verify(
            activity_id=activity_id,
            verifier_id=g.identity.user_id,
            status=body.get("status"),
            rejection_reason=body.get("rejection_reason"),
        )
        return jsonify(activity.to_dict())
