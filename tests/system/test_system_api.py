from __future__ import annotations

def test_health(client):
    res = client.get("/api/health")

    assert res.status_code == 200
    assert res.get_json()["status"] == "ok"
    assert res.headers["Access-Control-Allow-Origin"] == "http://localhost:4000"


def test_preflight_is_answered(client):
    res = client.options("/api/attendance/bulk-update", headers={"Origin": "http://localhost:4000"})

    assert res.status_code == 200
    assert "PATCH" in res.headers["Access-Control-Allow-Methods"]
    assert res.headers["Access-Control-Allow-Credentials"] == "true"


def test_debug_requires_login(client):
    assert client.get("/api/debug/attendance").status_code == 401


def test_debug_counts_respect_the_policy(client, people, login_as, make_event):
    make_event()

    login_as(people.admin)
    body = client.get("/api/debug/attendance").get_json()
    assert body["counts"] == {"events": 1, "users": 5, "attendance": 2}
    assert len(body["sample_data"]["players"]) == 2

    login_as(people.player)
    body = client.get("/api/debug/attendance").get_json()
    assert body["user"]["role"] == "player"
    assert body["counts"] == {"events": 1, "users": 1, "attendance": 1}


def test_unexpected_error_is_500_with_generic_message(client, people, login_as, container, monkeypatch, caplog):
    login_as(people.admin)

    def broken(*args, **kwargs):
        raise RuntimeError("db exploded")

    monkeypatch.setattr(container.platform, "count", broken)
    res = client.get("/api/debug/attendance")

    assert res.status_code == 500
    assert res.get_json() == {"error": "Internal server error"}
    assert "db exploded" in caplog.text


def test_unknown_route_is_json_404(client):
    res = client.get("/api/nothing")
    assert res.status_code == 404
    assert "error" in res.get_json()
