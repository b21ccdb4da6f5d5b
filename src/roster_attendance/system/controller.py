from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import now_utc, to_iso
from ..common.http import current_actor
from ..core.constants import DEBUG_SAMPLE_LIMIT
from ..core.enums import Collection, Role
from ..core.exceptions import AuthenticationError


def register(app: Flask, container) -> None:
    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok", "message": "Backend is running", "timestamp": to_iso(now_utc())})

    @app.route("/api/debug/attendance", methods=["GET"], endpoint="debug_attendance")
    def debug_attendance():
        actor = current_actor(container)
        if actor is None:
            raise AuthenticationError("Unauthorized")

        platform = container.platform
        counts = {
            "events": platform.count(Collection.EVENTS, actor=actor),
            "users": platform.count(Collection.USERS, actor=actor),
            "attendance": platform.count(Collection.ATTENDANCE, actor=actor),
        }
        events = platform.find(Collection.EVENTS, actor=actor, limit=DEBUG_SAMPLE_LIMIT)
        players = platform.find(
            Collection.USERS, actor=actor, where={"role": Role.PLAYER}, limit=DEBUG_SAMPLE_LIMIT
        )
        attendance = platform.find(Collection.ATTENDANCE, actor=actor, limit=DEBUG_SAMPLE_LIMIT)

        return jsonify(
            {
                "user": {"id": actor.user_id, "email": actor.email, "role": actor.role.value},
                "counts": counts,
                "sample_data": {
                    "events": [e.to_api() for e in events.docs],
                    "players": [p.to_api() for p in players.docs],
                    "attendance": [a.to_api() for a in attendance.docs],
                },
            }
        )
