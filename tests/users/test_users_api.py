from __future__ import annotations


def test_login_sets_session_and_me_returns_user(client, people, password):
    res = client.post("/api/users/login", json={"email": people.trainer.email, "password": password})

    assert res.status_code == 200
    assert res.get_json()["user"]["role"] == "trainer"
    assert "passwordHash" not in res.get_json()["user"]

    me = client.get("/api/users/me").get_json()
    assert me["user"]["id"] == people.trainer.user_id


def test_login_failure_is_401(client, people):
    res = client.post("/api/users/login", json={"email": people.trainer.email, "password": "nope"})

    assert res.status_code == 401
    assert res.get_json() == {"error": "Invalid email or password"}


def test_logout_clears_session(client, people, login_as):
    login_as(people.admin)

    client.post("/api/users/logout")

    assert client.get("/api/users/me").get_json() == {"user": None}


def test_register_anonymously(client):
    res = client.post(
        "/api/users",
        json={"email": "kid@club.test", "password": "long-enough", "firstName": "Kid", "lastName": "Test"},
    )

    assert res.status_code == 201
    doc = res.get_json()["doc"]
    assert doc["role"] == "player"
    assert doc["firstName"] == "Kid"


def test_register_validation_is_400(client):
    res = client.post("/api/users", json={"email": "kid@club.test", "password": "x"})

    assert res.status_code == 400
    assert "password" in res.get_json()["error"]


def test_list_users_requires_login(client, people):
    assert client.get("/api/users").status_code == 401


def test_list_users_scoped_for_player(client, people, login_as):
    login_as(people.player)

    body = client.get("/api/users").get_json()

    assert body["totalDocs"] == 1
    assert body["docs"][0]["id"] == people.player.user_id


def test_player_reading_other_user_is_404(client, people, login_as):
    login_as(people.player)

    assert client.get(f"/api/users/{people.other_player.user_id}").status_code == 404


def test_patch_and_deactivate(client, people, login_as):
    login_as(people.trainer)
    res = client.patch(f"/api/users/{people.trainer.user_id}", json={"phoneNumber": "555"})
    assert res.status_code == 200
    assert res.get_json()["doc"]["phoneNumber"] == "555"

    # trainers only edit their own profile
    assert client.post(f"/api/users/{people.other_player.user_id}/deactivate").status_code == 403

    login_as(people.admin)
    res = client.post(f"/api/users/{people.other_player.user_id}/deactivate")
    assert res.status_code == 200
    assert res.get_json()["doc"]["active"] is False


def test_delete_user_is_admin_only(client, people, login_as):
    assert client.delete(f"/api/users/{people.other_player.user_id}").status_code == 401

    login_as(people.trainer)
    assert client.delete(f"/api/users/{people.other_player.user_id}").status_code == 403

    login_as(people.admin)
    assert client.delete(f"/api/users/{people.other_player.user_id}").status_code == 200


def test_inactive_session_user_counts_as_anonymous(client, people, login_as, repos):
    login_as(people.trainer)
    repos.users.update(people.trainer.user_id, {"active": False})

    assert client.get("/api/users").status_code == 401
