from __future__ import annotations

CONCIERGERIE_ID = "c" * 22
EMPLOYEE_ID = "e" * 22


def test_auth_without_user_id(client):
    resp = client.post("/api/auth/", json={})

    assert resp.status_code == 200
    assert resp.get_json() == {"userType": None}


def test_auth_known_users(client):
    assert client.post("/api/auth/", json={"userId": CONCIERGERIE_ID}).get_json() == {"userType": "conciergerie"}
    assert client.post("/api/auth/", json={"userId": EMPLOYEE_ID}).get_json() == {"userType": "employee"}
    assert client.post("/api/auth/", json={"userId": "unknown"}).get_json() == {"userType": None}


def test_id_check(client):
    resp = client.get("/api/idCheck", query_string={"user_id": "acme-1"})

    assert resp.status_code == 200
    assert resp.get_json() == {"authorized": True, "message": "User authorized for ACME", "company": "ACME"}


def test_id_check_errors(client):
    missing = client.get("/api/idCheck")
    assert missing.status_code == 400
    assert missing.get_json() == {"error": "user_id parameter is required"}

    unknown = client.get("/api/idCheck", query_string={"user_id": "intruder"})
    assert unknown.status_code == 403
    assert unknown.get_json()["authorized"] is False
