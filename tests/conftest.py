"""Pytest fixtures for gradebook tests.

API and storage tests run against a fresh in-memory SQLite database per test,
built from the table metadata. The clock is pinned so that business-day
arithmetic is deterministic.

Usage:
    def test_get_evaluation(client: TestClient, auth_headers, evaluation_factory):
        evaluation = evaluation_factory()
        response = client.get(f"/api/evaluations/{evaluation.evaluation_id}", headers=auth_headers(teacher))
        assert response.status_code == 200
"""

from __future__ import annotations

import datetime
import os
import typing as t
from pathlib import Path

import pydantic as p
import pytest
import sqlalchemy
import sqlalchemy.pool
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

import gradebook
from gradebook.auth import JWTManager
from gradebook.core import GradebookContainer, TimestampProvider
from gradebook.model import Course, DeploymentEnvironment, Evaluation, School, SchoolID, User, UserID, UserRole
from gradebook.storage import course as course_storage
from gradebook.storage import evaluation as evaluation_storage
from gradebook.storage import school as school_storage
from gradebook.storage import table
from gradebook.storage import user as user_storage

# Thursday
NOW = datetime.datetime(2026, 10, 15, 15, 0, tzinfo=datetime.UTC)
THIS_MONDAY = datetime.datetime(2026, 10, 12, 9, 0, tzinfo=datetime.UTC)
LAST_MONDAY = datetime.datetime(2026, 10, 5, 9, 0, tzinfo=datetime.UTC)

TEST_JWT_SECRET = "test-jwt-secret-for-integration-tests"


@pytest.fixture(scope="session")
def container() -> t.Generator[GradebookContainer]:
    """Boot the DI container once for the test session, in the Test environment."""
    ct = GradebookContainer()
    root = Path(os.path.dirname(gradebook.__file__)).parent

    GradebookContainer.boot(
        ct,
        debug=False,
        env=DeploymentEnvironment.Test,
        config_root=p.FileUrl(f"file://{root}/config"),
        override=(),
    )
    ct.secrets.override({"auth": {"jwt": p.Secret(TEST_JWT_SECRET)}, "postgresql": {}})
    ct.utcnow.override(lambda: NOW)

    yield ct

    ct.shutdown_resources()


@pytest.fixture(scope="session")
def app(container: GradebookContainer) -> FastAPI:
    """Create the FastAPI application, wired to the test container."""
    from gradebook.core.config.web import GradebookWebSettings
    from gradebook.web.gradebook.main import _create_app  # pyright: ignore[reportPrivateUsage]

    container.wire(
        modules=[
            "gradebook.web.gradebook.main",
            "gradebook.web.gradebook.dependencies",
            "gradebook.web.gradebook.route.evaluation",
            "gradebook.web.gradebook.route.notification",
            "gradebook.auth.middleware",
        ]
    )

    return _create_app(
        config=GradebookWebSettings(**container.config.web.gradebook()),
        env=DeploymentEnvironment.Test,
    )


@pytest.fixture
def engine(container: GradebookContainer) -> t.Generator[sqlalchemy.Engine]:
    """A private in-memory database with the full schema."""
    engine = sqlalchemy.create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=sqlalchemy.pool.StaticPool,
    )
    table.metadata.create_all(engine)
    container.storage().persistent().engine.override(engine)

    yield engine

    container.storage().persistent().engine.reset_override()
    engine.dispose()


@pytest.fixture
def db_session(container: GradebookContainer, engine: sqlalchemy.Engine) -> t.Generator[Session]:
    session = container.storage().persistent().session()
    yield session
    session.close()


@pytest.fixture
def client(app: FastAPI, engine: sqlalchemy.Engine) -> t.Generator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def utcnow() -> TimestampProvider:
    return lambda: NOW


@pytest.fixture
def school_factory(db_session: Session) -> t.Callable[..., School]:
    """Factory fixture for creating schools. Slugs are unique unless given."""

    def create_school(name: str = "Colegio de Prueba", slug: str | None = None) -> School:
        if slug is None:
            slug = f"school-{SchoolID().key[:8].lower()}"
        with db_session.begin():
            return school_storage.create(name=name, slug=slug, session=db_session)

    return create_school


@pytest.fixture
def test_school(school_factory: t.Callable[..., School]) -> School:
    return school_factory(name="Colegio Norte", slug="colegio-norte")


@pytest.fixture
def user_factory(db_session: Session, test_school: School) -> t.Callable[..., User]:
    """Factory fixture for creating users with a membership in a school.

    Usage:
        def test_something(user_factory):
            admin = user_factory(role=UserRole.SuperAdmin)
    """

    def create_user(
        role: UserRole = UserRole.Teacher,
        name: str = "Test User",
        email: str | None = None,
        school_id: SchoolID | None = None,
    ) -> User:
        if email is None:
            email = f"{UserID().key[:10].lower()}@example.com"
        with db_session.begin():
            user = user_storage.create(email=email, name=name, password=p.Secret("password123"), session=db_session)
            user_storage.add_membership(user.user_id, school_id or test_school.school_id, role, session=db_session)
        return user

    return create_user


@pytest.fixture
def teacher(user_factory: t.Callable[..., User]) -> User:
    return user_factory(role=UserRole.Teacher, name="Ana Pérez")


@pytest.fixture
def superadmin(user_factory: t.Callable[..., User]) -> User:
    return user_factory(role=UserRole.SuperAdmin, name="Director")


@pytest.fixture
def test_course(db_session: Session, test_school: School) -> Course:
    with db_session.begin():
        return course_storage.create(school_id=test_school.school_id, name="Matemáticas 5B", session=db_session)


@pytest.fixture
def evaluation_factory(
    db_session: Session, test_school: School, test_course: Course, teacher: User
) -> t.Callable[..., Evaluation]:
    """Factory fixture for creating evaluations.

    Defaults to an evaluation owned by `teacher`, created and dated last
    Monday, which is past the grace window at NOW.
    """

    def create_evaluation(
        title: str = "Prueba 1",
        description: str = "",
        owner: User | None = None,
        date: datetime.date | None = None,
        create_time: datetime.datetime = LAST_MONDAY,
        course: Course | None = None,
    ) -> Evaluation:
        with db_session.begin():
            return evaluation_storage.create(
                {
                    "school_id": test_school.school_id,
                    "course_id": (course or test_course).course_id,
                    "owner_id": (owner or teacher).user_id,
                    "title": title,
                    "date": date or create_time.date(),
                    "description": description,
                    "create_time": create_time,
                },
                session=db_session,
            )

    return create_evaluation


@pytest.fixture
def jwt_manager(container: GradebookContainer) -> JWTManager:
    return container.auth().jwt_manager()


@pytest.fixture
def auth_headers(
    jwt_manager: JWTManager, db_session: Session, test_school: School
) -> t.Callable[..., dict[str, str]]:
    """Bearer headers for a user acting within a school."""

    def create_headers(user: User, school_id: SchoolID | None = None) -> dict[str, str]:
        school_id = school_id or test_school.school_id
        with db_session.begin():
            role = user_storage.get_role(user.user_id, school_id, session=db_session)
        token = jwt_manager.create_access_token(user.user_id, school_id, role or UserRole.Student)
        return {"Authorization": f"Bearer {token}"}

    return create_headers
