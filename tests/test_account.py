from datetime import datetime

from ilaw.models.badge import Badge, EarnedBadge
from ilaw.models.book import Book
from ilaw.models.progress import Progress, ReadingSession
from ilaw.models.quiz_attempt import QuizAttempt
from ilaw.models.user import User, UserRole
from tests.conftest import auth_headers, make_user

PROFILE = "/api/user/profile"


def seed_learning(db, student, book):
    badge = Badge(name="Bookworm", description="")
    db.add(badge)
    db.commit()
    start = datetime(2025, 6, 1, 8, 0)
    db.add_all([
        Progress(user_id=student.id, book_id=book.id, percent_complete=100, total_reading_time=300),
        ReadingSession(user_id=student.id, book_id=book.id, start_time=start, end_time=start, total_seconds=300),
        QuizAttempt(
            user_id=student.id, book_id=book.id, score_correct=3, score_total=4,
            percentage=75, attempt_number=1,
        ),
        EarnedBadge(user_id=student.id, badge_id=badge.id, book_id=book.id),
    ])
    db.commit()


def test_get_profile(client, teacher):
    res = client.get(PROFILE, headers=auth_headers(teacher))
    assert res.status_code == 200
    profile = res.json()["profile"]
    assert profile["name"] == "Teacher Cruz"
    assert profile["email"] == "teacher@example.com"
    assert profile["role"] == "TEACHER"


def test_update_profile_splits_name(client, db, student):
    res = client.put(
        PROFILE,
        json={"name": "  Juan Miguel dela Cruz ", "email": " Juan.Cruz@Example.com "},
        headers=auth_headers(student),
    )
    assert res.status_code == 200
    assert res.json()["message"] == "Profile updated successfully"
    assert res.json()["profile"]["name"] == "Juan Miguel dela Cruz"

    row = db.query(User).filter(User.id == student.id).one()
    db.refresh(row)
    assert row.first_name == "Juan"
    assert row.last_name == "Miguel dela Cruz"
    assert row.email == "juan.cruz@example.com"


def test_update_profile_requires_name_and_email(client, student):
    res = client.put(PROFILE, json={"name": " ", "email": "juan@example.com"}, headers=auth_headers(student))
    assert res.status_code == 400
    assert res.json()["detail"] == "Name and email are required"


def test_update_profile_email_clash(client, student, other_student):
    res = client.put(
        PROFILE, json={"name": "Juan", "email": "MARIA@example.com"}, headers=auth_headers(student)
    )
    assert res.status_code == 400
    assert res.json()["detail"] == "Email is already in use by another user"


def test_keeping_own_email_is_not_a_clash(client, student):
    res = client.put(PROFILE, json={"name": "Juan", "email": "juan@example.com"}, headers=auth_headers(student))
    assert res.status_code == 200


def test_export_contains_learning_history(client, db, student, other_student, book):
    seed_learning(db, student, book)
    seed_learning(db, other_student, book)

    res = client.get("/api/user/export", headers=auth_headers(student))
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Data export completed"
    data = body["data"]
    assert data["user"]["id"] == student.id
    assert [p["percentComplete"] for p in data["progress"]] == [100]
    assert [s["totalSeconds"] for s in data["readingSessions"]] == [300]
    assert [a["percentage"] for a in data["quizAttempts"]] == [75]
    assert [e["bookId"] for e in data["earnedBadges"]] == [book.id]


def test_delete_account_removes_learning_data(client, db, student, other_student, book):
    seed_learning(db, student, book)
    seed_learning(db, other_student, book)
    headers = auth_headers(student)
    student_id = student.id

    res = client.delete("/api/user/account", headers=headers)
    assert res.status_code == 200
    assert db.query(User).filter(User.id == student_id).first() is None
    for model in (Progress, ReadingSession, QuizAttempt, EarnedBadge):
        assert db.query(model).filter(model.user_id == student_id).count() == 0
        assert db.query(model).count() == 1

    assert client.get(PROFILE, headers=headers).status_code == 401


def test_deleted_teacher_leaves_books(client, db, teacher, book):
    book_id = book.id
    assert client.delete("/api/user/account", headers=auth_headers(teacher)).status_code == 200
    row = db.query(Book).filter(Book.id == book_id).one()
    db.refresh(row)
    assert row.added_by_id is None


def test_last_admin_cannot_delete_account(client, db, admin):
    res = client.delete("/api/user/account", headers=auth_headers(admin))
    assert res.status_code == 400

    make_user(db, UserRole.ADMIN, "admin2")
    assert client.delete("/api/user/account", headers=auth_headers(admin)).status_code == 200
