"""
Clinic signup, picker, sign-in and debug endpoint tests.
"""

import json
import threading
from urllib.parse import quote

from fastapi.testclient import TestClient

from clinicdesk.adapters.db.kv.clinic_repository import MIGRATION_LOCK_KEY
from clinicdesk.app import create_app


def _login(client, clinic_id, role="doctor", username="doc", password="pw123"):
    return client.post(
        "/auth/login",
        json={"clinic_id": clinic_id, "role": role, "username": username, "password": password},
    )


def test_register_clinic_hides_password(client, registered_clinic):
    assert registered_clinic["id"].startswith("clinic:")
    assert registered_clinic["name"] == "Acme"
    assert registered_clinic["admin_username"] == "doc"
    assert "admin_password" not in registered_clinic


def test_register_clinic_requires_fields(client):
    response = client.post("/clinics", json={"name": "Acme", "admin_username": "doc"})
    assert response.status_code == 422


def test_get_clinic(client, registered_clinic):
    response = client.get(f"/clinics/{quote(registered_clinic['id'], safe='')}")

    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Acme"
    assert client.get("/clinics/clinic%3A0-missing").status_code == 404


def test_picker_falls_back_to_legacy_clinics(client):
    options = client.get("/clinics").json()["data"]
    assert options == [
        {"id": "clinic1", "name": "City Health Center"},
        {"id": "clinic2", "name": "Community Medical Clinic"},
        {"id": "clinic3", "name": "Family Care Practice"},
    ]


def test_picker_lists_registered_clinics_only(client, registered_clinic):
    options = client.get("/clinics").json()["data"]
    assert options == [{"id": registered_clinic["id"], "name": "Acme"}]


def test_acme_doctor_sign_in(client, registered_clinic):
    clinic_id = registered_clinic["id"]

    response = _login(client, clinic_id)

    assert response.status_code == 200
    assert response.json()["data"] == {
        "clinic_id": clinic_id,
        "role": "doctor",
        "redirect_to": f"/doctor-dashboard?clinic={clinic_id}",
    }


def test_acme_receptionist_shares_the_admin_credential(client, registered_clinic):
    response = _login(client, registered_clinic["id"], role="receptionist")
    assert response.json()["data"]["redirect_to"].startswith("/receptionist-dashboard?clinic=")


def test_sign_in_wrong_password(client, registered_clinic):
    response = _login(client, registered_clinic["id"], password="wrong")

    assert response.status_code == 401
    assert response.json()["error"] == "INVALID_CREDENTIALS"
    assert response.json()["message"] == "Invalid credentials"


def test_sign_in_unknown_clinic(client):
    response = _login(client, "clinic:0-missing")

    assert response.status_code == 404
    assert response.json()["error"] == "CLINIC_NOT_FOUND"


def test_sign_in_legacy_clinic(client):
    response = _login(client, "clinic3", role="receptionist", username="admin", password="admin123")
    assert response.json()["data"]["redirect_to"] == "/receptionist-dashboard?clinic=clinic3"


def test_sign_in_without_role_or_clinic(client):
    assert _login(client, "clinic1", role=None, username="admin", password="admin123").status_code == 422
    assert _login(client, None, username="admin", password="admin123").status_code == 422


def test_startup_migrates_legacy_keys(kv_store, redis_sync):
    record = {"id": "patient:1-a", "name": "Old", "phoneNumber": "555", "age": 50, "gender": "M", "status": "waiting", "createdAt": 1}
    redis_sync.hset("patients", "patient:1-a", json.dumps(record))
    redis_sync.lpush("waiting_room", "patient:1-a")

    with TestClient(create_app(kv_store=kv_store)) as client:
        waiting = client.get("/clinics/clinic1/patients/waiting").json()["data"]

    assert [p["id"] for p in waiting["patients"]] == ["patient:1-a"]
    assert waiting["patients"][0]["clinic_id"] == "clinic1"
    assert not redis_sync.exists("patients")


def test_debug_snapshot_and_clear(client):
    client.post(
        "/clinics/clinic2/patients",
        json={"name": "Jane", "phone_number": "555", "age": 30, "gender": "F"},
    )

    snapshot = client.get("/debug/clinics/clinic2").json()["data"]
    assert snapshot["keys"] == ["clinic:clinic2:patients", "clinic:clinic2:waiting_room"]
    assert len(snapshot["waiting_room"]) == 1
    assert snapshot["migration"]["skipped_reason"] == "no_legacy_data"

    cleared = client.delete("/debug/clinics/clinic2").json()["data"]
    assert cleared["remaining"] == {"patients": 0, "waiting": 0, "with_doctor": 0}
    assert client.get("/clinics/clinic2/patients/waiting").json()["data"]["count"] == 0


def test_debug_clinic_list_excludes_passwords(client, registered_clinic):
    data = client.get("/debug/clinics").json()["data"]
    assert data["count"] == 1
    assert "admin_password" not in data["clinics"][0]


def test_debug_migrate(client, redis_sync):
    redis_sync.lpush("doctor_room", "patient:9-z")

    response = client.post("/debug/migrate")

    assert response.status_code == 200
    assert response.json()["data"]["doctor_copied"] == 1
    assert redis_sync.lrange("clinic:clinic1:doctor_room", 0, -1) == ["patient:9-z"]


def test_startup_waits_for_migration_running_elsewhere(kv_store, redis_sync):
    redis_sync.set(MIGRATION_LOCK_KEY, "other-worker", ex=30)
    record = {"id": "patient:1-a", "name": "Old", "phoneNumber": "555", "age": 50, "gender": "M", "status": "waiting", "createdAt": 1, "clinicId": "clinic1"}

    def other_worker_finishes():
        redis_sync.hset("clinic:clinic1:patients", "patient:1-a", json.dumps(record))
        redis_sync.lpush("clinic:clinic1:waiting_room", "patient:1-a")
        redis_sync.delete(MIGRATION_LOCK_KEY)

    timer = threading.Timer(0.2, other_worker_finishes)
    timer.start()
    try:
        with TestClient(create_app(kv_store=kv_store)) as client:
            waiting = client.get("/clinics/clinic1/patients/waiting").json()["data"]
    finally:
        timer.join()

    assert [p["id"] for p in waiting["patients"]] == ["patient:1-a"]
