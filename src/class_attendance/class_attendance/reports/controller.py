from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.auth import current_teacher_id, current_teacher_name, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.report_service

    @app.route("/api/classes/<int:class_id>/reports", methods=["POST"], endpoint="generate_report")
    @login_required
    def generate_report(class_id: int):
        body = request.get_json(silent=True) or {}
        report = service.generate(
            class_id,
            start_date=body.get("start_date"),
            end_date=body.get("end_date"),
            report_type=body.get("report_type"),
            student_id=body.get("student_id"),
            generated_by=current_teacher_id(),
            teacher_name=current_teacher_name(),
        )
        return jsonify({"success": True, "data": report.to_dict()}), 201

    @app.route("/api/classes/<int:class_id>/reports", methods=["GET"], endpoint="class_reports")
    @login_required
    def class_reports(class_id: int):
        return jsonify({"success": True, "data": [r.to_dict() for r in service.list_class_reports(class_id)]})

    @app.route("/api/students/<int:student_id>/reports", methods=["GET"], endpoint="student_reports")
    @login_required
    def student_reports(student_id: int):
        return jsonify({"success": True, "data": [r.to_dict() for r in service.list_student_reports(student_id)]})

    @app.route("/api/reports/<int:report_id>", methods=["GET"], endpoint="get_report")
    @login_required
    def get_report(report_id: int):
        return jsonify({"success": True, "data": service.get(report_id).to_dict()})

    @app.route("/api/reports/<int:report_id>/share", methods=["POST"], endpoint="share_report")
    @login_required
    def share_report(report_id: int):
        body = request.get_json(silent=True) or {}
        report = service.share(report_id, body.get("share_via"))
        return jsonify(
            {"success": True, "message": f"Report shared via {report.share_via.value}", "data": report.to_dict()}
        )

    @app.route("/api/reports/<int:report_id>", methods=["DELETE"], endpoint="delete_report")
    @login_required
    def delete_report(report_id: int):
        service.delete(report_id)
        return jsonify({"success": True, "message": "Report deleted successfully"})
