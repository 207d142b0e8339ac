import pytest
import os
import sys
import tempfile
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set test environment variables before the settings object is built
test_dir = tempfile.mkdtemp(prefix="elearning-tests-")
os.environ["NODE_ENV"] = "test"
os.environ["JWT_SECRET"] = "test_jwt_secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(test_dir, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(test_dir, "uploads")
os.environ["LOG_LEVEL"] = "WARNING"

from fastapi.testclient import TestClient

from app import app
from db import engine, get_db, init_db, SessionLocal
from models import Base, Course, Enrollment, User, UserRole
from utils.accounts import hash_password
from utils.jwt_utils import jwt_manager

# File-based SQLite so concurrent sessions see the same database
init_db()


@pytest.fixture(scope="function")
def test_db():
    """Create test database session"""
    session = SessionLocal()

    yield session

    # Cleanup after each test
    session.close()
    # Clear all tables
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture(scope="function")
def client(test_db):
    """Create test client sharing the test database session"""

    def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    # Clean up dependency override
    app.dependency_overrides.clear()


def make_user(db, username, role, name=None, password="secret123"):
    user = User(username=username, password=hash_password(password), role=role, name=name or username.title())
    db.add(user)
    db.commit()
    return user


def auth_headers(user):
    """Authorization header carrying a fresh token for the user"""
    return {"Authorization": f"Bearer {jwt_manager.create_access_token(user.id, user.role)}"}


@pytest.fixture
def student(test_db):
    return make_user(test_db, "alice", UserRole.STUDENT, name="Alice")


@pytest.fixture
def other_student(test_db):
    return make_user(test_db, "bob", UserRole.STUDENT, name="Bob")


@pytest.fixture
def teacher(test_db):
    return make_user(test_db, "tina", UserRole.TEACHER, name="Tina")


@pytest.fixture
def other_teacher(test_db):
    return make_user(test_db, "oscar", UserRole.TEACHER, name="Oscar")


@pytest.fixture
def admin(test_db):
    return make_user(test_db, "root", UserRole.ADMIN, name="Root")


@pytest.fixture
def course(test_db, teacher):
    course = Course(title="Databases", teacher_id=teacher.id)
    test_db.add(course)
    test_db.commit()
    return course


@pytest.fixture
def enrollment(test_db, student, course):
    enrollment = Enrollment(student_id=student.id, course_id=course.id, streak=0, last_watch_date=None)
    test_db.add(enrollment)
    test_db.commit()
    return enrollment


@pytest.fixture
def sample_questions():
    """Five complete questions whose correct answers are A, B, C, D, A"""
    return [
        {
            "question": f"Question {number}",
            "option_a": "first",
            "option_b": "second",
            "option_c": "third",
            "option_d": "fourth",
            "correct_answer": answer,
        }
        for number, answer in enumerate(["A", "B", "C", "D", "A"], start=1)
    ]


@pytest.fixture
def headers_for():
    return auth_headers
