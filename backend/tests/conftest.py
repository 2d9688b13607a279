import os

os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["VERIFY_SALT"] = "test-salt"
os.environ["VERIFY_SUBJECT_ID"] = "test-subject"
os.environ["DATABASE_URL"] = "sqlite://"

from collections.abc import Generator
from dataclasses import dataclass

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from pathwise.core.metrics import reset_metrics
from pathwise.core.security import create_access_token
from pathwise.core.settings import get_settings
from pathwise.db import models  # noqa: F401
from pathwise.db.base import Base
from pathwise.db.models.challenge import Challenge
from pathwise.db.models.onboarding_step import OnboardingStep
from pathwise.db.models.user import User
from pathwise.db.session import get_db
from pathwise.main import app


def _make_engine():
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    engine = _make_engine()
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@dataclass
class ApiEnv:
    client: TestClient
    SessionLocal: sessionmaker

    def add(self, *objs) -> list:
        with self.SessionLocal() as db:
            db.add_all(objs)
            db.commit()
            ids = [obj.id for obj in objs]
        return ids


@pytest.fixture()
def api() -> Generator[ApiEnv, None, None]:
    engine = _make_engine()
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def _get_db() -> Generator[Session, None, None]:
        db = SessionLocal()
        try:
            yield db
        finally:
            db.close()

    get_settings.cache_clear()
    reset_metrics()
    app.dependency_overrides[get_db] = _get_db
    try:
        yield ApiEnv(client=TestClient(app), SessionLocal=SessionLocal)
    finally:
        app.dependency_overrides.clear()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


def make_user(*, user_id: str, role: str = "learner", username: str | None = None, **fields) -> User:
    return User(
        id=user_id,
        email=f"{user_id}@test.local",
        username=username or user_id,
        role=role,
        total_xp=fields.pop("total_xp", 0),
        latest_completed_step=fields.pop("latest_completed_step", 0),
        is_blocked=fields.pop("is_blocked", False),
        **fields,
    )


def make_challenge(*, challenge_id: str, title: str = "Build a bot", **fields) -> Challenge:
    fields.setdefault("description", "")
    fields.setdefault("difficulty", "beginner")
    fields.setdefault("challenge_type", "build")
    fields.setdefault("requirements", [])
    fields.setdefault("status", "approved")
    return Challenge(id=challenge_id, title=title, **fields)


def make_step(*, step_id: str, number: int, title: str | None = None) -> OnboardingStep:
    return OnboardingStep(
        id=step_id,
        step_number=number,
        title=title or f"Step {number}",
        submission_type="text",
    )


def auth_header(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}


def success_data(response):
    payload = response.json()
    assert payload["success"] is True
    assert "request_id" in payload
    return payload["data"]


def error_payload(response):
    payload = response.json()
    assert payload["success"] is False
    assert "error" in payload
    assert "request_id" in payload
    return payload
