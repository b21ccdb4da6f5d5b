from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_actor, read_json


def register(app: Flask, container) -> None:
    @app.route("/api/events", methods=["GET"], endpoint="list_events")
    def list_events():
        result = container.event_service.list(
            actor=current_actor(container),
            event_type=request.args.get("type"),
            limit=request.args.get("limit", type=int),
            sort=request.args.get("sort"),
        )
        return jsonify(result.to_api())

    @app.route("/api/events", methods=["POST"], endpoint="create_event")
    def create_event():
        event = container.event_service.create(actor=current_actor(container), body=read_json())
        return jsonify({"message": "Event created", "doc": event.to_api()}), 201

    @app.route("/api/events/<int:event_id>", methods=["GET"], endpoint="get_event")
    def get_event(event_id: int):
        event = container.event_service.get(actor=current_actor(container), event_id=event_id)
        return jsonify(event.to_api())

    @app.route("/api/events/<int:event_id>", methods=["PATCH"], endpoint="update_event")
    def update_event(event_id: int):
        event = container.event_service.update(actor=current_actor(container), event_id=event_id, body=read_json())
        return jsonify({"message": "Event updated", "doc": event.to_api()})

    @app.route("/api/events/<int:event_id>", methods=["DELETE"], endpoint="delete_event")
    def delete_event(event_id: int):
        event = container.event_service.delete(actor=current_actor(container), event_id=event_id)
        return jsonify({"message": "Event deleted", "doc": event.to_api()})

    @app.route("/api/events/<int:event_id>/lock", methods=["POST"], endpoint="lock_event")
    def lock_event(event_id: int):
        event = container.event_service.lock(actor=current_actor(container), event_id=event_id)
        return jsonify({"success": True, "message": "Event locked successfully", "event": event.to_api()})

    @app.route("/api/events/<int:event_id>/lock", methods=["DELETE"], endpoint="unlock_event")
    def unlock_event(event_id: int):
        event = container.event_service.unlock(actor=current_actor(container), event_id=event_id)
        return jsonify({"success": True, "message": "Event unlocked successfully", "event": event.to_api()})
