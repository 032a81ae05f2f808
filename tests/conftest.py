import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from crm import crud, models
from crm.config import settings
from crm.db import Base, get_db
from services.api.server import app

TEACHER_A = "user_teacher_a"
TEACHER_B = "user_teacher_b"
ADMIN = "user_admin"


def make_token(user_id: str, role=None, **claims) -> str:
    payload = {"sub": user_id, **claims}
    if role:
        payload["role"] = role
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def bearer(user_id: str, role=None) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, role)}"}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def users(db):
    crud.create_user(db, TEACHER_A, "a@school.test", full_name="Alice Teacher")
    crud.create_user(db, TEACHER_B, "b@school.test", full_name="Bob Teacher")
    crud.create_user(db, ADMIN, "admin@school.test", full_name="Ada Admin", role=models.Role.ADMIN.value)


@pytest.fixture
def make_student(db):
    def _make(teacher_id=TEACHER_A, full_name="Ana Lopez", username="ana1", level="B1", **extra):
        values = {"full_name": full_name, "username": username, "level": level,
                  "description": extra.pop("description", None),
                  "isregular": extra.pop("isregular", False)}
        return crud.create_student(db, teacher_id, values)
    return _make


@pytest.fixture
def make_lesson(db):
    def _make(student, teacher_id=None, status="Upcoming", time_slot=datetime(2025, 3, 3, 10, 0), **extra):
        values = {
            "student_id": student.id,
            "type": extra.pop("type", "Regular"),
            "lessonlink": extra.pop("lessonlink", "https://meet.test/room"),
            "duration": extra.pop("duration", 60),
            "time_slot": time_slot,
            "status": status,
            "payment_status": extra.pop("payment_status", "Not Paid"),
            "reasonforcancellation": extra.pop("reasonforcancellation", None),
        }
        return crud.create_lesson(db, teacher_id or student.teacher_id, values)
    return _make
