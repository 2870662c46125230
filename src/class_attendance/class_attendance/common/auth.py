from __future__ import annotations

from functools import wraps

from flask import jsonify, session


def login_required(view):
    """Reject requests without a teacher in the session (set by the login layer)."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "teacher_id" not in session:
            return jsonify({"success": False, "message": "Please log in to continue"}), 401
        return view(*args, **kwargs)

    return wrapper


def current_teacher_id() -> int:
    return int(session["teacher_id"])


def current_teacher_name() -> str:
    return str(session.get("name") or "")
