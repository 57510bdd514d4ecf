import os

# Settings are read at import time; keep tests off any real database or SMTP server
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.pop("EMAIL_HOST", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from vx_academy.core.database import Base, get_db
import vx_academy.models  # noqa: F401
from vx_academy.crud import assessment_crud, training_crud, user_crud
from vx_academy.main import app
from vx_academy.models.enums import AssessmentOwnerType, UserType
from vx_academy.schemas import assessment_schema, training_schema, user_schema


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# --- Factories ---
_counter = {"n": 0}


def _next() -> int:
    _counter["n"] += 1
    return _counter["n"]


def make_user(db, user_type: UserType = UserType.USER, **overrides):
    n = _next()
    data = dict(
        first_name="Test",
        last_name=f"User{n}",
        email=f"user{n}@example.com",
        organization="Department of Culture and Tourism",
        asset="Museums",
        sub_asset="Louvre Abu Dhabi",
        user_type=user_type,
        password="correct-horse-battery",
    )
    if user_type == UserType.USER:
        data["normal_user_detail"] = user_schema.NormalUserDetailBase(
            role_category="Front Office", role="Guide", seniority="Junior",
            eid=f"784-{n:07d}", phone_number="+971500000000",
        )
    elif user_type == UserType.SUB_ADMIN:
        data["sub_admin_detail"] = user_schema.SubAdminDetailBase(
            job_title="Team Lead", total_frontliners=12,
            eid=f"784-{n:07d}", phone_number="+971500000001",
        )
    data.update(overrides)
    return user_crud.create_user(db, user_schema.UserCreate(**data), send_welcome_email=False)


def make_tree(db, units_per_course=2, name="Hospitality"):
    """One training area > one module > one course with `units_per_course` placed units."""
    area = training_crud.create_training_area(db, training_schema.TrainingAreaCreate(name=f"{name} area"))
    module = training_crud.create_module(db, training_schema.ModuleCreate(name=f"{name} module", training_area_id=area.id))
    course = training_crud.create_course(db, training_schema.CourseCreate(name=f"{name} course", module_id=module.id))
    placements = []
    for i in range(units_per_course):
        unit = training_crud.create_unit(db, training_schema.UnitCreate(name=f"{name} unit {i + 1}"))
        placements.append(training_crud.create_course_unit(
            db, training_schema.CourseUnitCreate(course_id=course.id, unit_id=unit.id)
        ))
    return area, module, course, placements


def make_assessment(db, owner_type: AssessmentOwnerType, owner_id: int, questions: int = 5, **overrides):
    data = dict(
        title="Final check",
        owner=assessment_schema.AssessmentOwner(type=owner_type, id=owner_id),
    )
    data.update(overrides)
    assessment = assessment_crud.create_assessment(db, assessment_schema.AssessmentCreate(**data))
    for i in range(questions):
        assessment_crud.create_question(db, assessment_schema.QuestionCreate(
            assessment_id=assessment.id,
            question_text=f"Question {i + 1}?",
            options=["A", "B", "C"],
            correct_answer="A",
        ))
    return assessment


@pytest.fixture
def admin(db_session):
    return make_user(db_session, UserType.ADMIN)


@pytest.fixture
def learner(db_session):
    return make_user(db_session, UserType.USER)


def auth(user) -> dict:
    return {"X-User-Id": str(user.id)}
