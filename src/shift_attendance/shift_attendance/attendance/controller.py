from __future__ import annotations

from flask import Flask, jsonify, request

from ..core.exceptions import DomainError, LockTimeoutError, NotFoundError, ValidationError


def _error(e: DomainError):
    if isinstance(e, NotFoundError):
        code = 404
    elif isinstance(e, LockTimeoutError):
        code = 409
    elif isinstance(e, ValidationError):
        code = 400
    else:
        code = 500
    return jsonify({"success": False, "message": str(e)}), code


def _outcome_json(outcome) -> dict:
    return {
        "success": True,
        "attendance": outcome.attendance.to_dict(),
        "confused": [c.to_dict() for c in outcome.confusions],
        "failures": [
            {"in_time": f.in_time.isoformat(), "reason": f.reason}
            for f in outcome.failures
        ],
    }


def register(app: Flask, container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance/process", methods=["POST"], endpoint="process_attendance")
    def process_attendance():
        payload = request.get_json(silent=True) or {}
        try:
            outcome = service.process_day(payload.get("employee_number"), payload.get("date"))
        except DomainError as e:
            return _error(e)
        return jsonify(_outcome_json(outcome))

    @app.route("/api/attendance/reprocess", methods=["POST"], endpoint="reprocess_attendance")
    def reprocess_attendance():
        payload = request.get_json(silent=True) or {}
        employees = payload.get("employee_numbers") or None
        if employees is not None and not isinstance(employees, list):
            return jsonify({"success": False, "message": "employee_numbers must be a list"}), 400
        try:
            report = service.reprocess_batch(employees, payload.get("start_date"), payload.get("end_date"))
        except DomainError as e:
            return _error(e)
        return jsonify({"success": True, **report.to_dict()})

    @app.route("/api/attendance/<employee_number>/<work_date>", methods=["GET"], endpoint="get_attendance")
    def get_attendance(employee_number: str, work_date: str):
        try:
            record = service.get_day(employee_number, work_date)
        except DomainError as e:
            return _error(e)
        return jsonify({"success": True, "attendance": record.to_dict()})

    @app.route("/api/confused-shifts", methods=["GET"], endpoint="list_confused_shifts")
    def list_confused_shifts():
        args = request.args
        try:
            records = service.list_confused(
                status=args.get("status"),
                employee_number=args.get("employee_number"),
                start_date=args.get("start_date"),
                end_date=args.get("end_date"),
            )
        except DomainError as e:
            return _error(e)
        return jsonify({"success": True, "data": [r.to_dict() for r in records]})

    @app.route("/api/confused-shifts/<int:confused_id>/resolve", methods=["POST"], endpoint="resolve_confused_shift")
    def resolve_confused_shift(confused_id: int):
        payload = request.get_json(silent=True) or {}
        if payload.get("shift_id") is None:
            return jsonify({"success": False, "message": "shift_id is required"}), 400
        try:
            shift_id = int(payload["shift_id"])
        except (TypeError, ValueError):
            return jsonify({"success": False, "message": "shift_id must be an integer"}), 400
        try:
            outcome = service.resolve_confused_shift(
                confused_id,
                shift_id,
                reviewed_by=payload.get("reviewed_by"),
                comments=payload.get("comments"),
            )
        except DomainError as e:
            return _error(e)
        return jsonify(_outcome_json(outcome))

    @app.route("/api/confused-shifts/<int:confused_id>/auto-assign", methods=["POST"], endpoint="auto_assign_confused_shift")
    def auto_assign_confused_shift(confused_id: int):
        payload = request.get_json(silent=True) or {}
        try:
            outcome = service.auto_assign_nearest(confused_id, reviewed_by=payload.get("reviewed_by") or "system")
        except DomainError as e:
            return _error(e)
        return jsonify(_outcome_json(outcome))
