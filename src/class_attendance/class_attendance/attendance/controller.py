from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.auth import current_teacher_id, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/classes/<int:class_id>/attendance", methods=["GET"], endpoint="get_attendance")
    @login_required
    def get_attendance(class_id: int):
        sheet = service.reconcile(class_id, request.args.get("date"), teacher_id=current_teacher_id())
        return jsonify({"success": True, "data": sheet.to_dict()})

    @app.route("/api/classes/<int:class_id>/attendance", methods=["POST"], endpoint="save_attendance")
    @login_required
    def save_attendance(class_id: int):
        body = request.get_json(silent=True) or {}
        sheet = service.save(class_id, body.get("date"), body.get("records"), teacher_id=current_teacher_id())
        return jsonify({"success": True, "data": sheet.to_dict()})

    @app.route("/api/classes/<int:class_id>/attendance/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    def attendance_history(class_id: int):
        sheets = service.history(class_id, request.args.get("start_date"), request.args.get("end_date"))
        return jsonify({"success": True, "data": [s.to_dict() for s in sheets]})

    @app.route("/api/classes/<int:class_id>/attendance/lock", methods=["POST"], endpoint="lock_attendance")
    @login_required
    def lock_attendance(class_id: int):
        body = request.get_json(silent=True) or {}
        sheet = service.lock(class_id, body.get("date"))
        return jsonify({"success": True, "data": sheet.to_dict()})
