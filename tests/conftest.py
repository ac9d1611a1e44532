import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import ilaw.models  # noqa: F401 - register tables
from ilaw.auth import create_access_token, hash_password
from ilaw.database import Base, get_db
from ilaw.main import app
from ilaw.models.book import Book
from ilaw.models.user import ApprovalStatus, User, UserRole

PASSWORD = "Secret#123"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(db, role: UserRole, name: str, approval: ApprovalStatus = ApprovalStatus.APPROVED) -> User:
    user = User(
        email=f"{name}@example.com",
        username=name,
        password=hash_password(PASSWORD),
        first_name=name.title(),
        last_name="Cruz",
        role=role.value,
        approval_status=approval.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email, user.role)}"}


@pytest.fixture()
def admin(db):
    return make_user(db, UserRole.ADMIN, "admin")


@pytest.fixture()
def teacher(db):
    return make_user(db, UserRole.TEACHER, "teacher")


@pytest.fixture()
def student(db):
    return make_user(db, UserRole.STUDENT, "juan")


@pytest.fixture()
def other_student(db):
    return make_user(db, UserRole.STUDENT, "maria")


@pytest.fixture()
def book(db, teacher):
    row = Book(
        slug="ang-alamat-ng-pinya",
        title="Ang Alamat ng Pinya",
        description="A legend about a girl named Pina.",
        type="storybook",
        added_by_id=teacher.id,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row
