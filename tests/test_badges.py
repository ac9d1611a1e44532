from ilaw.models.badge import Badge, BookBadge, EarnedBadge
from ilaw.services.badge_award import normalize_threshold
from tests.conftest import auth_headers


def create_badge(client, user, name="Bookworm"):
    res = client.post(
        "/api/badges",
        json={"name": name, "description": "Finished a book"},
        headers=auth_headers(user),
    )
    assert res.status_code == 201
    return res.json()


def test_create_and_list_badges(client, teacher, student):
    create_badge(client, teacher, "Bookworm")
    create_badge(client, teacher, "Explorer")

    res = client.get("/api/badges", params={"search": "worm"}, headers=auth_headers(student))
    assert [b["name"] for b in res.json()] == ["Bookworm"]


def test_badge_name_required(client, teacher):
    res = client.post("/api/badges", json={"name": " x "}, headers=auth_headers(teacher))
    assert res.status_code == 400


def test_student_cannot_create_badge(client, student):
    res = client.post("/api/badges", json={"name": "Sneaky"}, headers=auth_headers(student))
    assert res.status_code == 403


def test_attach_badge_is_idempotent(client, db, teacher, book):
    badge = create_badge(client, teacher)
    body = {"badgeId": badge["id"], "completionThreshold": 150}

    first = client.post(f"/api/books/{book.id}/badges", json=body, headers=auth_headers(teacher))
    assert first.status_code == 201
    assert first.json()["bookBadge"]["completionThreshold"] == 100

    second = client.post(f"/api/books/{book.id}/badges", json=body, headers=auth_headers(teacher))
    assert second.status_code == 200
    assert second.json()["bookBadge"]["id"] == first.json()["bookBadge"]["id"]
    assert db.query(BookBadge).count() == 1

    listed = client.get(f"/api/books/{book.id}/badges", headers=auth_headers(teacher)).json()
    assert len(listed) == 1
    assert listed[0]["badge"]["name"] == "Bookworm"


def test_remove_book_badge(client, db, teacher, book):
    badge = create_badge(client, teacher)
    mapping = client.post(
        f"/api/books/{book.id}/badges", json={"badgeId": badge["id"]}, headers=auth_headers(teacher)
    ).json()["bookBadge"]

    res = client.delete(f"/api/books/{book.id}/badges/{mapping['id']}", headers=auth_headers(teacher))
    assert res.status_code == 200
    assert db.query(BookBadge).count() == 0
    res = client.delete(f"/api/books/{book.id}/badges/{mapping['id']}", headers=auth_headers(teacher))
    assert res.status_code == 404


def test_manual_award_is_duplicate_safe(client, db, teacher, student, book):
    badge = create_badge(client, teacher)
    url = f"/api/users/{student.id}/badges"
    body = {"badgeId": badge["id"], "bookId": book.id, "note": "Great reading!"}

    first = client.post(url, json=body, headers=auth_headers(teacher))
    assert first.status_code == 201
    assert first.json()["earnedBadge"]["note"] == "Great reading!"

    second = client.post(url, json=body, headers=auth_headers(teacher))
    assert second.status_code == 200
    assert second.json()["message"] == "Badge already earned"
    assert db.query(EarnedBadge).count() == 1

    earned = client.get(url, headers=auth_headers(student)).json()
    assert earned[0]["book"]["title"] == book.title


def test_manual_award_without_book_is_duplicate_safe(client, db, teacher, student):
    badge = create_badge(client, teacher)
    url = f"/api/users/{student.id}/badges"
    assert client.post(url, json={"badgeId": badge["id"]}, headers=auth_headers(teacher)).status_code == 201
    assert client.post(url, json={"badgeId": badge["id"]}, headers=auth_headers(teacher)).status_code == 200
    assert db.query(EarnedBadge).count() == 1


def test_student_cannot_see_others_badges(client, student, other_student):
    res = client.get(f"/api/users/{other_student.id}/badges", headers=auth_headers(student))
    assert res.status_code == 403


def test_delete_badge_removes_mappings_and_awards(client, db, admin, teacher, student, book):
    badge = create_badge(client, teacher)
    client.post(f"/api/books/{book.id}/badges", json={"badgeId": badge["id"]}, headers=auth_headers(teacher))
    client.post(f"/api/books/{book.id}/complete", headers=auth_headers(student))
    assert db.query(EarnedBadge).count() == 1

    assert client.delete(f"/api/badges/{badge['id']}", headers=auth_headers(teacher)).status_code == 403
    assert client.delete(f"/api/badges/{badge['id']}", headers=auth_headers(admin)).status_code == 200
    assert db.query(Badge).count() == 0
    assert db.query(BookBadge).count() == 0
    assert db.query(EarnedBadge).count() == 0


def test_fractional_threshold_rounds_half_up(client, teacher, book):
    badge = create_badge(client, teacher)
    res = client.post(
        f"/api/books/{book.id}/badges",
        json={"badgeId": badge["id"], "completionThreshold": 50.5},
        headers=auth_headers(teacher),
    )
    assert res.status_code == 201
    assert res.json()["bookBadge"]["completionThreshold"] == 51


def test_normalize_threshold():
    assert normalize_threshold(None) == 100
    assert normalize_threshold(50.5) == 51
    assert normalize_threshold(0.4) == 1
    assert normalize_threshold(250) == 100
