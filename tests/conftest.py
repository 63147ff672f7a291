from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.application.notifications import RecordingNotifier
from app.infrastructure.db.base import Base
from app.infrastructure.db import models  # noqa: F401
from app.infrastructure.repositories.user_repository import seed_users
from app.infrastructure.repositories.subject_repo_impl import create_subject
from app.infrastructure.repositories.mcq_repo_impl import create_mcq
from app.infrastructure.repositories.course_repo_impl import create_course
from app.infrastructure.repositories.exam_repo_impl import create_exam
from app.presentation.schemas.subject_schema import SubjectCreate
from app.presentation.schemas.mcq_schema import MCQCreate, OptionCreate
from app.presentation.schemas.course_schema import CourseCreate
from app.presentation.schemas.exam_schema import ExamCreate, ExamSubjectIn

ADMIN_ID = 1
INSTRUCTOR_ID = 2
PARTICIPANT_ID = 3


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_fks(dbapi_connection, connection_record):
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    seed_users(session)
    yield session
    session.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_subject(db, notifier):
    def factory(name="Web Development", code="WEB101"):
        return create_subject(
            db, SubjectCreate(name=name, code=code, description=""), INSTRUCTOR_ID, notifier=notifier
        )

    return factory


@pytest.fixture
def make_question(db, notifier):
    def factory(subject_id, difficulty="easy", text="Question?", correct=0, n_options=4):
        options = [
            OptionCreate(text=f"Option {i}", is_correct=(i == correct)) for i in range(n_options)
        ]
        return create_mcq(
            db,
            MCQCreate(text=text, difficulty=difficulty, subject_id=subject_id, options=options),
            INSTRUCTOR_ID,
            notifier=notifier,
        )

    return factory


@pytest.fixture
def make_course(db, notifier):
    def factory(subjects=(), participants=(PARTICIPANT_ID,), name="Full Stack"):
        return create_course(
            db,
            CourseCreate(
                name=name,
                code=name[:3].upper(),
                subjects=list(subjects),
                participants=list(participants),
            ),
            INSTRUCTOR_ID,
            notifier=notifier,
        )

    return factory


@pytest.fixture
def make_exam(db, notifier):
    def factory(course_id, rules, participants=(PARTICIPANT_ID,), passing_percentage=70, name="Midterm"):
        return create_exam(
            db,
            ExamCreate(
                name=name,
                course_id=course_id,
                subjects=[ExamSubjectIn(**r) for r in rules],
                duration_minutes=60,
                passing_percentage=passing_percentage,
                participants=list(participants),
                scheduled_date=datetime.now(timezone.utc) + timedelta(days=1),
            ),
            INSTRUCTOR_ID,
            notifier=notifier,
        )

    return factory


@pytest.fixture
def client(db, notifier):
    from main import app
    from app.presentation.dependencies import get_db, get_notifier

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


