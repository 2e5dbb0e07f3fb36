import os
import sys
import itertools
import uuid

import pytest

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Окружение выставляем до импорта приложения: Settings читается один раз
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("CACHE_ENABLED", "false")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from student_info.infrastructure.models import Base, CourseORM, StudentORM, TeacherORM, UserORM
from student_info.infrastructure.db import get_db
from student_info.infrastructure.security import PasswordHasher, create_access_token

# Тестовая БД в памяти, одно соединение на все сессии
test_engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


# Переопределяем engine в infrastructure.db и main.py для тестов
import student_info.infrastructure.db
import student_info.main
student_info.infrastructure.db.engine = test_engine
student_info.infrastructure.db.SessionLocal = TestingSessionLocal
student_info.main.engine = test_engine

from student_info.main import app

app.dependency_overrides[get_db] = override_get_db

DEFAULT_PASSWORD = "secret123"
_course_codes = itertools.count()


def _save(row):
    db = TestingSessionLocal(expire_on_commit=False)
    try:
        db.add(row)
        db.commit()
        db.refresh(row)
        db.expunge(row)
        return row
    finally:
        db.close()


def _suffix() -> str:
    return uuid.uuid4().hex[:8]


@pytest.fixture(scope="function")
def client():
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield TestClient(app)
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def make_user(client):
    hasher = PasswordHasher()

    def _make(role="student", email=None, password=DEFAULT_PASSWORD, is_active=True,
              first_name="Ayşe", last_name="Yılmaz"):
        return _save(UserORM(
            email=email or f"{role}-{_suffix()}@example.com",
            password_hash=hasher.hash(password),
            first_name=first_name,
            last_name=last_name,
            role=role,
            is_active=is_active,
        ))
    return _make


@pytest.fixture
def auth_header():
    def _header(user) -> dict:
        token = create_access_token(user.id, user.email, user.role)
        return {"Authorization": f"Bearer {token}"}
    return _header


@pytest.fixture
def make_student(make_user):
    def _make(user=None, department="Bilgisayar Mühendisliği", student_number=None, **extra):
        user = user or make_user("student")
        return _save(StudentORM(
            user_id=user.id,
            student_number=student_number or f"S{_suffix()}",
            class_level="1",
            department=department,
            **extra,
        ))
    return _make


@pytest.fixture
def make_teacher(make_user):
    def _make(user=None, department="Bilgisayar Mühendisliği", employee_number=None, title="Profesör", **extra):
        user = user or make_user("teacher")
        return _save(TeacherORM(
            user_id=user.id,
            employee_number=employee_number or f"T{_suffix()}",
            department=department,
            title=title,
            specialization="Yapay Zeka",
            **extra,
        ))
    return _make


@pytest.fixture
def make_course(make_teacher):
    def _make(teacher=None, code=None, max_capacity=30, is_active=True, department="Bilgisayar Mühendisliği", **extra):
        teacher = teacher or make_teacher()
        return _save(CourseORM(
            name="Programlamaya Giriş",
            code=code or f"ZZ{100 + next(_course_codes) % 900}",
            credits=4,
            teacher_id=teacher.id,
            department=department,
            semester="Fall",
            academic_year="2024-2025",
            schedule=[],
            max_capacity=max_capacity,
            is_active=is_active,
            **extra,
        ))
    return _make


@pytest.fixture
def admin(make_user):
    return make_user("admin")


@pytest.fixture
def admin_headers(admin, auth_header):
    return auth_header(admin)
