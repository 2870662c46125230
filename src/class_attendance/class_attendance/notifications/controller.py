from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.auth import login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.notification_service

    @app.route("/api/classes/<int:class_id>/low-attendance", methods=["GET"], endpoint="low_attendance")
    @login_required
    def low_attendance(class_id: int):
        data = service.list_low_attendance(class_id, request.args.get("threshold"))
        return jsonify({"success": True, "data": data})

    @app.route("/api/classes/<int:class_id>/alerts/<channel>", methods=["POST"], endpoint="send_alerts")
    @login_required
    def send_alerts(class_id: int, channel: str):
        body = request.get_json(silent=True) or {}
        outcomes = service.send_low_attendance_alerts(
            class_id,
            channel,
            threshold=body.get("threshold"),
            student_ids=body.get("student_ids"),
        )
        return jsonify(
            {
                "success": True,
                "message": f"{channel} alerts processed",
                "data": [o.to_dict() for o in outcomes],
            }
        )
