from __future__ import annotations

import io

from flask import Flask, g, jsonify, request, send_file

from ..common.datetime_utils import now_local, parse_optional_date
from ..container import Container
from ..core.enums import Role
from ..web import auth_required, json_body
from .qr import build_qr_payload, parse_qr_payload, render_qr_png


def register(app: Flask, container: Container) -> None:
    faculty_only = auth_required(container, Role.FACULTY)
    student_only = auth_required(container, Role.STUDENT)
    staff_view = auth_required(container, Role.FACULTY, Role.ADMIN)

    # ===== QR SESSION ENDPOINTS (faculty) =====

    @app.route("/api/qr/generate", methods=["POST"], endpoint="qr_generate")
    @faculty_only
    def qr_generate():
        body = json_body()
        duration = body.get("duration")
        if duration is None:
            duration = app.config.get("DEFAULT_SESSION_MINUTES", 30)

        session = container.session_service.create(
            owner_id=g.identity.user_id,
            class_id=body.get("class_id", ""),
            duration_minutes=duration,
        )
        data = session.to_dict(now=now_local())
        data["qr_data"] = build_qr_payload(session)
        data["duration"] = int((session.expires_at - session.created_at).total_seconds() // 60)
        return jsonify(data), 201

    @app.route("/api/qr/faculty", methods=["GET"], endpoint="qr_faculty")
    @faculty_only
    def qr_faculty():
        now = now_local()
        sessions = container.session_service.list_recent_for_owner(g.identity.user_id)
        return jsonify([s.to_dict(now=now) for s in sessions])

    @app.route("/api/qr/<int:session_id>/deactivate", methods=["PUT"], endpoint="qr_deactivate")
    @faculty_only
    def qr_deactivate(session_id: int):
        session = container.session_service.deactivate(session_id=session_id, requester_id=g.identity.user_id)
        return jsonify({"message": "QR code deactivated successfully", "session": session.to_dict(now=now_local())})

    @app.route("/api/qr/<int:session_id>/image", methods=["GET"], endpoint="qr_image")
    @faculty_only
    def qr_image(session_id: int):
        session = container.session_service.get_owned_session(session_id=session_id, requester_id=g.identity.user_id)
        png = render_qr_png(build_qr_payload(session))
        return send_file(io.BytesIO(png), mimetype="image/png")

    # ===== ATTENDANCE ENDPOINTS =====

    @app.route("/api/attendance/mark", methods=["POST"], endpoint="attendance_mark")
    @student_only
    def attendance_mark():
        body = json_body()
        if body.get("qr_data"):
            token, class_id = parse_qr_payload(body["qr_data"])
        else:
            token, class_id = body.get("token", ""), body.get("class_id", "")

        record = container.attendance_service.record_attendance(
            student_id=g.identity.user_id,
            token=token,
            class_id=class_id,
        )
        return jsonify({"message": "Attendance marked successfully", "attendance": record.to_dict()}), 201

    @app.route("/api/attendance/student", methods=["GET"], endpoint="attendance_student")
    @student_only
    def attendance_student():
        records = container.attendance_service.list_for_student(g.identity.user_id)
        return jsonify([r.to_dict() for r in records])

    @app.route("/api/attendance/class/<class_id>", methods=["GET"], endpoint="attendance_class")
    @staff_view
    def attendance_class(class_id: str):
        day = parse_optional_date(request.args.get("date"))
        records = container.attendance_service.list_for_class(class_id, day=day)
        return jsonify([r.to_dict() for r in records])
