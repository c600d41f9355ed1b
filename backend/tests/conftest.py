"""Pytest fixtures — throwaway SQLite database per test."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from tutorhub.database import Base, get_db
from tutorhub.dependencies import get_notification_sink
from tutorhub.main import app
from tutorhub.services.notification_service import NotificationSink

# Import all models so they register with Base.metadata
from tutorhub.models.user import User, UserRole                     # noqa: F401
from tutorhub.models.student import Student, StudentStatus          # noqa: F401
from tutorhub.models.school_class import SchoolClass, ClassEnrollment  # noqa: F401
from tutorhub.models.class_request import ClassRequest, RequestStatus  # noqa: F401
from tutorhub.models.notification import Notification             # noqa: F401


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False, "timeout": 30})
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db(session_factory):
    """Yield a database session, closed after the test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def sink(session_factory):
    return NotificationSink(session_factory)


@pytest.fixture(scope="function")
def client(session_factory, sink):
    """FastAPI TestClient with the session and notification sink bound to the test database."""

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_notification_sink] = lambda: sink
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# API helpers — each returns the response JSON
# ---------------------------------------------------------------------------
_counter = {"n": 0}


def _unique_email(prefix: str) -> str:
    _counter["n"] += 1
    return f"{prefix.lower().replace(' ', '.')}.{_counter['n']}@example.com"


def create_test_user(client: TestClient, name: str = "Test User", role: str = "student") -> dict:
    """Helper — POST /api/users and return response JSON."""
    resp = client.post("/api/users/", json={
        "full_name": name,
        "email": _unique_email(name),
        "role": role,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_admin(client: TestClient, name: str = "Admin") -> dict:
    return create_test_user(client, name=name, role="admin")


def register_student(client: TestClient, user: dict, first: str = "Sam", last: str = "Perera",
                     grade: str = "Grade 10") -> dict:
    resp = client.post(f"/api/students/?actor_user_id={user['user_id']}", json={
        "first_name": first,
        "last_name": last,
        "selected_grade": grade,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_approved_student(client: TestClient, admin: dict, first: str = "Sam",
                            last: str = "Perera") -> tuple[dict, dict]:
    """Helper — user + registered student approved by ``admin``. Returns (user, student)."""
    user = create_test_user(client, name=f"{first} {last}")
    student = register_student(client, user, first=first, last=last)
    resp = client.patch(
        f"/api/students/{student['student_id']}/status?actor_user_id={admin['user_id']}",
        json={"status": "Approved"},
    )
    assert resp.status_code == 200, resp.text
    return user, resp.json()


def create_test_class(client: TestClient, admin: dict, capacity: int = 10, grade: str = "Grade 10",
                      category: str = "Physics", class_type: str = "Normal", is_active: bool = True) -> dict:
    resp = client.post(f"/api/classes/?actor_user_id={admin['user_id']}", json={
        "grade": grade,
        "category": category,
        "class_type": class_type,
        "capacity": capacity,
        "is_active": is_active,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def submit_request(client: TestClient, user: dict, school_class: dict, reason: str = "I want to join") -> dict:
    resp = client.post(f"/api/class-requests/?actor_user_id={user['user_id']}", json={
        "class_id": school_class["class_id"],
        "reason": reason,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()["request"]


def get_class(client: TestClient, class_id: str) -> dict:
    resp = client.get(f"/api/classes/{class_id}")
    assert resp.status_code == 200, resp.text
    return resp.json()


def get_profile(client: TestClient, user: dict) -> dict:
    resp = client.get(f"/api/students/me?actor_user_id={user['user_id']}")
    assert resp.status_code == 200, resp.text
    return resp.json()
