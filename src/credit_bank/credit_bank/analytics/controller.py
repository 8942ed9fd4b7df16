from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_optional_date
from ..container import Container
from ..core.enums import Role
from ..web import auth_required


def register(app: Flask, container: Container) -> None:
    admin_only = auth_required(container, Role.ADMIN)
    staff_view = auth_required(container, Role.FACULTY, Role.ADMIN)

    @app.route("/api/analytics/overview", methods=["GET"], endpoint="analytics_overview")
    @admin_only
    def analytics_overview():
        return jsonify({"overview": container.analytics_service.overview()})

    @app.route("/api/analytics/class/<class_id>/export.csv", methods=["GET"], endpoint="analytics_class_csv")
    @staff_view
    def analytics_class_csv(class_id: str):
        day = parse_optional_date(request.args.get("date"))
        csv_bytes = container.analytics_service.class_report_csv(class_id, day=day)

        suffix = f"_{day.strftime('%Y%m%d')}" if day else ""
        filename = f"attendance_{class_id}{suffix}.csv"
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/analytics/class/<class_id>", methods=["GET"], endpoint="analytics_class")
    @staff_view
    def analytics_class(class_id: str):
        day = parse_optional_date(request.args.get("date"))
        return jsonify(container.analytics_service.class_summary(class_id, day=day))

    @app.route("/api/analytics/student/<int:student_id>", methods=["GET"], endpoint="analytics_student")
    @staff_view
    def analytics_student(student_id: int):
        return jsonify(container.analytics_service.student_summary(student_id))
