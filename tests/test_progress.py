from datetime import datetime, timedelta

from ilaw.models.progress import ReadingSession
from ilaw.services.progress_tracker import get_progress
from ilaw.services.stats import _rate
from tests.conftest import auth_headers


def test_create_then_update_progress(client, db, student, book):
    res = client.post("/api/progress", json={"bookId": book.id, "percentComplete": 42.5}, headers=auth_headers(student))
    assert res.status_code == 201
    assert res.json()["progress"]["percentComplete"] == 43

    res = client.post("/api/progress", json={"bookId": book.id, "percentComplete": 180}, headers=auth_headers(student))
    assert res.status_code == 200
    assert res.json()["progress"]["percentComplete"] == 100
    assert get_progress(db, student.id, book.id).percent_complete == 100


def test_progress_unknown_book(client, student):
    res = client.post("/api/progress", json={"bookId": "missing", "percentComplete": 10}, headers=auth_headers(student))
    assert res.status_code == 404


def test_staff_can_write_for_student(client, teacher, student, book):
    res = client.post(
        "/api/progress",
        json={"bookId": book.id, "percentComplete": 10, "userId": student.id},
        headers=auth_headers(teacher),
    )
    assert res.json()["progress"]["userId"] == student.id


def test_list_scoped_by_role(client, admin, teacher, student, other_student, book):
    for user in (student, other_student):
        client.post("/api/progress", json={"bookId": book.id, "percentComplete": 50}, headers=auth_headers(user))

    own = client.get("/api/progress", headers=auth_headers(student)).json()["progress"]
    assert [p["userId"] for p in own] == [student.id]
    assert own[0]["book"]["title"] == book.title

    assert len(client.get("/api/progress", headers=auth_headers(teacher)).json()["progress"]) == 2

    one = client.get("/api/progress", params={"studentId": other_student.id}, headers=auth_headers(admin))
    assert [p["userId"] for p in one.json()["progress"]] == [other_student.id]


def test_stats(client, teacher, student, other_student, book):
    client.post(f"/api/books/{book.id}/complete", headers=auth_headers(student))
    client.post("/api/progress", json={"bookId": book.id, "percentComplete": 30}, headers=auth_headers(other_student))

    res = client.get("/api/stats", headers=auth_headers(teacher))
    assert res.status_code == 200
    stats = res.json()["stats"]
    assert stats["readersCount"] == 2
    assert stats["completedBooksCount"] == 1
    assert stats["completionRate"] == 50

    assert client.get("/api/stats", headers=auth_headers(student)).status_code == 403


def test_rates_round_half_up():
    assert _rate(1, 8) == 13
    assert _rate(1, 3) == 33
    assert _rate(0, 0) == 0


def test_average_reading_time_rounds_half_up(client, db, teacher, student, book):
    start = datetime(2025, 6, 1, 8, 0)
    for seconds in (1, 2):
        db.add(ReadingSession(
            user_id=student.id, book_id=book.id, start_time=start,
            end_time=start + timedelta(seconds=seconds), total_seconds=seconds,
        ))
    db.commit()

    stats = client.get("/api/stats", headers=auth_headers(teacher)).json()["stats"]
    assert stats["averageReadingSeconds"] == 2
    assert stats["totalReadingSeconds"] == 3
