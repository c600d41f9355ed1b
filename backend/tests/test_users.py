"""Tests for User endpoints."""
from tests.conftest import create_test_user, create_admin


class TestUserCRUD:
    """User create / get / list."""

    def test_create_user(self, client):
        data = create_test_user(client, name="Alice")
        assert data["full_name"] == "Alice"
        assert data["role"] == "student"
        assert "user_id" in data

    def test_create_admin(self, client):
        data = create_admin(client)
        assert data["role"] == "admin"

    def test_duplicate_email(self, client):
        resp = client.post("/api/users/", json={"full_name": "A", "email": "same@example.com"})
        assert resp.status_code == 201
        resp = client.post("/api/users/", json={"full_name": "B", "email": "SAME@example.com"})
        assert resp.status_code == 409

    def test_invalid_role(self, client):
        resp = client.post("/api/users/", json={"full_name": "A", "email": "a@example.com", "role": "owner"})
        assert resp.status_code == 422

    def test_get_user(self, client):
        user = create_test_user(client)
        resp = client.get(f"/api/users/{user['user_id']}")
        assert resp.status_code == 200
        assert resp.json()["full_name"] == "Test User"

    def test_get_user_not_found(self, client):
        resp = client.get("/api/users/00000000-0000-0000-0000-000000000000")
        assert resp.status_code == 404

    def test_list_users(self, client):
        create_test_user(client, name="Alice")
        create_test_user(client, name="Bob")
        resp = client.get("/api/users/")
        assert resp.status_code == 200
        names = [u["full_name"] for u in resp.json()]
        assert "Alice" in names
        assert "Bob" in names
