from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.http import current_actor, read_json
from ..core.exceptions import AuthenticationError


def register(app: Flask, container) -> None:
    @app.route("/api/users/login", methods=["POST"], endpoint="login")
    def login():
        body = read_json()
        user = container.auth_service.authenticate(body.get("email", ""), body.get("password", ""))

        session.clear()
        session["user_id"] = user.user_id
        session["role"] = user.role.value
        return jsonify({"message": "Authentication Passed", "user": user.to_api()})

    @app.route("/api/users/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"message": "Logged out"})

    @app.route("/api/users/me", methods=["GET"], endpoint="me")
    def me():
        actor = current_actor(container)
        return jsonify({"user": actor.to_api() if actor else None})

    @app.route("/api/users", methods=["GET"], endpoint="list_users")
    def list_users():
        result = container.user_service.list(
            actor=current_actor(container),
            role=request.args.get("role"),
            limit=request.args.get("limit", type=int),
        )
        return jsonify(result.to_api())

    @app.route("/api/users", methods=["POST"], endpoint="create_user")
    def create_user():
        user = container.user_service.create_account(actor=current_actor(container), body=read_json())
        return jsonify({"message": "User created", "doc": user.to_api()}), 201

    @app.route("/api/users/<int:user_id>", methods=["GET"], endpoint="get_user")
    def get_user(user_id: int):
        user = container.user_service.get(actor=current_actor(container), user_id=user_id)
        return jsonify(user.to_api())

    @app.route("/api/users/<int:user_id>", methods=["PATCH"], endpoint="update_user")
    def update_user(user_id: int):
        user = container.user_service.update(actor=current_actor(container), user_id=user_id, body=read_json())
        return jsonify({"message": "User updated", "doc": user.to_api()})

    @app.route("/api/users/<int:user_id>/deactivate", methods=["POST"], endpoint="deactivate_user")
    def deactivate_user(user_id: int):
        user = container.user_service.deactivate(actor=current_actor(container), user_id=user_id)
        return jsonify({"message": "User deactivated", "doc": user.to_api()})

    @app.route("/api/users/<int:user_id>", methods=["DELETE"], endpoint="delete_user")
    def delete_user(user_id: int):
        actor = current_actor(container)
        if actor is None:
            raise AuthenticationError("Unauthorized")
        user = container.user_service.delete(actor=actor, user_id=user_id)
        return jsonify({"message": "User deleted", "doc": user.to_api()})
