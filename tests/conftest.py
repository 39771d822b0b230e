from datetime import datetime
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from schoolsafe.auth.deps import get_db, RequestContext
from schoolsafe.db.session import Base, init_db
from schoolsafe.main import app
from schoolsafe.models.tenant import Tenant
from schoolsafe.models.user import User
from schoolsafe.models.quiz import Quiz
from schoolsafe.models.resource import Resource
from schoolsafe.utils.security import create_access_token, hash_password

PASSWORD = "secret123"

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()

@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture
def client(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()

class Factory:
    """Builds rows straight through the ORM."""

    def __init__(self, db):
        self.db = db
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    def tenant(self, name=None, **kw):
        n = self._next()
        tenant = Tenant(
            name=name or f"School {n}",
            contact_email=f"school{n}@example.com",
            **kw,
        )
        self.db.add(tenant); self.db.commit(); self.db.refresh(tenant)
        return tenant

    def user(self, tenant, role="student", **kw):
        n = self._next()
        kw.setdefault("first_name", f"{role.capitalize()}{n}")
        kw.setdefault("last_name", "Tester")
        kw.setdefault("email", f"{role}{n}@example.com")
        if role == "student":
            kw.setdefault("grade", "8")
        user = User(
            role=role,
            tenant_id=tenant.id,
            password_hash=kw.pop("password_hash", None) or hash_password(PASSWORD),
            school=tenant.name,
            **kw,
        )
        self.db.add(user); self.db.commit(); self.db.refresh(user)
        return user

    def quiz(self, tenant, creator, correct=(0, 1, 2, 3), passing_score=60, **kw):
        questions = [
            {
                "question": f"Question {i + 1}",
                "options": ["a", "b", "c", "d"],
                "correctAnswer": answer,
                "media": {"type": "none", "url": None, "resourceId": None},
                "timelimitSeconds": None,
            }
            for i, answer in enumerate(correct)
        ]
        quiz = Quiz(
            title=kw.pop("title", f"Quiz {self._next()}"),
            questions=questions,
            tenant_id=tenant.id,
            created_by=creator.id,
            passing_score=passing_score,
            **kw,
        )
        self.db.add(quiz); self.db.commit(); self.db.refresh(quiz)
        return quiz

    def resource(self, tenant, creator, **kw):
        n = self._next()
        kw.setdefault("title", f"Resource {n}")
        kw.setdefault("type", "article")
        kw.setdefault("content", "Drop, cover and hold on.")
        resource = Resource(tenant_id=tenant.id, created_by=creator.id, **kw)
        self.db.add(resource); self.db.commit(); self.db.refresh(resource)
        return resource

@pytest.fixture
def make(db):
    return Factory(db)

@pytest.fixture
def school(make):
    """One tenant with a director, a teacher, two students and a parent of the first."""
    tenant = make.tenant(name="Hillside High")
    director = make.user(tenant, "director")
    teacher = make.user(tenant, "teacher")
    student = make.user(tenant, "student", first_name="Ada")
    other_student = make.user(tenant, "student", first_name="Ben")
    parent = make.user(tenant, "parent", student_id=student.id)
    return {
        "tenant": tenant,
        "director": director,
        "teacher": teacher,
        "student": student,
        "other_student": other_student,
        "parent": parent,
    }

def ctx_for(user) -> RequestContext:
    return RequestContext(
        user_id=user.id,
        role=user.role,
        tenant_id=user.tenant_id,
        student_id=user.student_id,
    )

def auth(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}

def at(day: int, hour: int = 12) -> datetime:
    return datetime(2024, 3, day, hour, 0, 0)
