from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_actor, read_json


def register(app: Flask, container) -> None:
    @app.route("/api/events/<int:event_id>/attendance", methods=["GET"], endpoint="event_attendance")
    def event_attendance(event_id: int):
        result = container.attendance_service.list_for_event(
            actor=current_actor(container),
            event_id=event_id,
            limit=request.args.get("limit", type=int),
        )
        return jsonify(result.to_api())

    @app.route("/api/events/<int:event_id>/attendance", methods=["PATCH"], endpoint="respond_attendance")
    def respond_attendance(event_id: int):
        record = container.attendance_service.respond_for_event(
            actor=current_actor(container), event_id=event_id, body=read_json()
        )
        return jsonify(record.to_api())

    @app.route("/api/attendance/bulk-update", methods=["POST"], endpoint="bulk_update_attendance")
    def bulk_update_attendance():
        result = container.attendance_service.bulk_update(
            actor=current_actor(container), updates=read_json().get("updates")
        )
        return jsonify(result.to_api())

    @app.route("/api/attendance/bulk-update", methods=["PATCH"], endpoint="mark_all_attendance")
    def mark_all_attendance():
        body = read_json()
        result = container.attendance_service.mark_all(
            actor=current_actor(container),
            event_id=body.get("eventId"),
            status=body.get("status"),
            notes=body.get("notes"),
        )
        return jsonify(result.to_api(eventId=body.get("eventId"), status=body.get("status")))

    @app.route("/api/attendance/summary", methods=["GET"], endpoint="attendance_summary")
    def attendance_summary():
        summary = container.attendance_service.summary(
            actor=current_actor(container), event_id=request.args.get("eventId")
        )
        return jsonify(summary)
