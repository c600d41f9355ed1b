"""Tests for student registration and approval."""
from tests.conftest import (
    create_test_user,
    create_admin,
    register_student,
    create_approved_student,
    create_test_class,
    submit_request,
)


class TestRegistration:

    def test_register_pending(self, client):
        user = create_test_user(client, name="Nimal Perera")
        student = register_student(client, user, first="Nimal", last="Perera")
        assert student["status"] == "Pending"
        assert student["user_id"] == user["user_id"]

    def test_register_twice(self, client):
        user = create_test_user(client)
        register_student(client, user)
        resp = client.post(f"/api/students/?actor_user_id={user['user_id']}", json={
            "first_name": "Again", "last_name": "Again", "selected_grade": "Grade 10",
        })
        assert resp.status_code == 400
        assert resp.json()["detail"]["kind"] == "invalid_state"

    def test_unknown_actor(self, client):
        resp = client.post("/api/students/?actor_user_id=nobody", json={
            "first_name": "A", "last_name": "B", "selected_grade": "Grade 10",
        })
        assert resp.status_code == 404

    def test_profile_not_found(self, client):
        user = create_test_user(client)
        resp = client.get(f"/api/students/me?actor_user_id={user['user_id']}")
        assert resp.status_code == 404


class TestApproval:

    def test_admin_approves_and_student_notified(self, client):
        admin = create_admin(client)
        user, student = create_approved_student(client, admin)
        assert student["status"] == "Approved"

        notes = client.get(f"/api/notifications/?actor_user_id={user['user_id']}").json()
        assert [n["type"] for n in notes] == ["registration_status_change"]

    def test_non_admin_cannot_approve(self, client):
        user = create_test_user(client)
        student = register_student(client, user)
        resp = client.patch(
            f"/api/students/{student['student_id']}/status?actor_user_id={user['user_id']}",
            json={"status": "Approved"},
        )
        assert resp.status_code == 403

    def test_list_filtered_by_status(self, client):
        admin = create_admin(client)
        create_approved_student(client, admin, first="Ann", last="Silva")
        register_student(client, create_test_user(client, name="Ben"), first="Ben")

        resp = client.get(f"/api/students/?status_filter=Pending&actor_user_id={admin['user_id']}")
        assert resp.status_code == 200
        assert [s["first_name"] for s in resp.json()] == ["Ben"]


class TestProfileUpdate:

    def test_update_name_and_grade(self, client):
        user = create_test_user(client, name="Nimal Perera")
        register_student(client, user, first="Nimal", last="Perera", grade="Grade 9")

        resp = client.patch(f"/api/students/me?actor_user_id={user['user_id']}", json={
            "last_name": "Fernando", "selected_grade": "Grade 10",
        })
        assert resp.status_code == 200
        data = resp.json()
        assert (data["first_name"], data["last_name"]) == ("Nimal", "Fernando")
        assert data["selected_grade"] == "Grade 10"
        assert data["enrolled_classes"] == []

    def test_status_and_owner_cannot_be_changed(self, client):
        user = create_test_user(client)
        other = create_test_user(client, name="Other")
        student = register_student(client, user)

        resp = client.patch(f"/api/students/me?actor_user_id={user['user_id']}", json={
            "first_name": "Samantha",
            "status": "Approved",
            "user_id": other["user_id"],
            "student_id": "forged",
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["first_name"] == "Samantha"
        assert data["status"] == "Pending"
        assert data["user_id"] == user["user_id"]
        assert data["student_id"] == student["student_id"]

    def test_inactive_classes_hidden_after_update(self, client):
        admin = create_admin(client)
        user, _ = create_approved_student(client, admin)
        active = create_test_class(client, admin, category="Physics")
        retired = create_test_class(client, admin, category="Chemistry")
        for school_class in (active, retired):
            cr = submit_request(client, user, school_class)
            client.post(f"/api/class-requests/{cr['request_id']}/approve?actor_user_id={admin['user_id']}")
        client.patch(f"/api/classes/{retired['class_id']}?actor_user_id={admin['user_id']}", json={"is_active": False})

        resp = client.patch(f"/api/students/me?actor_user_id={user['user_id']}", json={"first_name": "Sami"})
        assert resp.status_code == 200
        assert [c["class_id"] for c in resp.json()["enrolled_classes"]] == [active["class_id"]]

    def test_blank_name_rejected(self, client):
        user = create_test_user(client)
        register_student(client, user)
        resp = client.patch(f"/api/students/me?actor_user_id={user['user_id']}", json={"first_name": ""})
        assert resp.status_code == 422

    def test_update_without_profile(self, client):
        user = create_test_user(client)
        resp = client.patch(f"/api/students/me?actor_user_id={user['user_id']}", json={"first_name": "A"})
        assert resp.status_code == 404
