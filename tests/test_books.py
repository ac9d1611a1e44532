from ilaw.models.badge import EarnedBadge
from ilaw.models.book import Page
from ilaw.models.progress import Progress
from ilaw.routers.books import slugify
from tests.conftest import auth_headers

STORY = {"title": "Si Pagong at si Matsing", "description": "A fable.", "type": "storybook"}


def test_slugify():
    assert slugify("  Si Pagong at si Matsing! ") == "si-pagong-at-si-matsing"


def test_create_book_dedupes_slug(client, teacher):
    first = client.post("/api/books", json=STORY, headers=auth_headers(teacher))
    second = client.post("/api/books", json=STORY, headers=auth_headers(teacher))
    assert first.status_code == 201
    assert first.json()["slug"] == "si-pagong-at-si-matsing"
    assert second.json()["slug"] == "si-pagong-at-si-matsing-2"


def test_educational_book_needs_subject(client, teacher):
    res = client.post("/api/books", json={**STORY, "type": "educational"}, headers=auth_headers(teacher))
    assert res.status_code == 400
    res = client.post(
        "/api/books", json={**STORY, "type": "educational", "subject": "Science"}, headers=auth_headers(teacher)
    )
    assert res.json()["subject"] == "Science"


def test_student_cannot_create_book(client, student):
    assert client.post("/api/books", json=STORY, headers=auth_headers(student)).status_code == 403


def test_list_books_filters(client, teacher, student, book):
    client.post("/api/books", json={**STORY, "grade": "2"}, headers=auth_headers(teacher))
    res = client.get("/api/books", params={"grade": "2"}, headers=auth_headers(student))
    assert [b["title"] for b in res.json()] == [STORY["title"]]
    res = client.get("/api/books", params={"search": "pinya"}, headers=auth_headers(student))
    assert [b["id"] for b in res.json()] == [book.id]


def test_pages_and_questions(client, teacher, student, book):
    body = {
        "pageNumber": 1,
        "content": "Noong unang panahon...",
        "questions": [{"questionText": "Sino si Pina?", "correctAnswer": "Isang bata"}, {"questionText": "  "}],
    }
    res = client.post(f"/api/books/{book.id}/pages", json=body, headers=auth_headers(teacher))
    assert res.status_code == 201
    page = res.json()
    assert len(page["questions"]) == 1

    dup = client.post(f"/api/books/{book.id}/pages", json=body, headers=auth_headers(teacher))
    assert dup.status_code == 409

    pages = client.get(f"/api/books/{book.id}/pages", headers=auth_headers(student)).json()
    assert [p["pageNumber"] for p in pages] == [1]

    res = client.put(
        f"/api/pages/{page['id']}",
        json={"pageNumber": 1, "content": "Updated", "questions": []},
        headers=auth_headers(teacher),
    )
    assert res.json()["questions"] == []


def test_delete_book_cascades(client, db, teacher, student, book):
    db.add(Page(book_id=book.id, page_number=1, content="Text"))
    db.commit()
    badge = client.post("/api/badges", json={"name": "Bookworm"}, headers=auth_headers(teacher)).json()
    client.post(f"/api/books/{book.id}/badges", json={"badgeId": badge["id"]}, headers=auth_headers(teacher))
    client.post(f"/api/books/{book.id}/complete", headers=auth_headers(student))

    res = client.delete(f"/api/books/{book.id}", headers=auth_headers(teacher))
    assert res.status_code == 200
    assert db.query(Page).count() == 0
    assert db.query(Progress).count() == 0
    earned = db.query(EarnedBadge).one()
    db.refresh(earned)
    assert earned.book_id is None


def test_delete_book_keeps_one_award_when_badge_also_held_without_book(client, db, teacher, student, book):
    badge = client.post("/api/badges", json={"name": "Bookworm"}, headers=auth_headers(teacher)).json()
    url = f"/api/users/{student.id}/badges"
    general = client.post(url, json={"badgeId": badge["id"]}, headers=auth_headers(teacher)).json()["earnedBadge"]
    client.post(url, json={"badgeId": badge["id"], "bookId": book.id}, headers=auth_headers(teacher))
    assert db.query(EarnedBadge).count() == 2

    res = client.delete(f"/api/books/{book.id}", headers=auth_headers(teacher))
    assert res.status_code == 200
    remaining = db.query(EarnedBadge).all()
    assert [e.id for e in remaining] == [general["id"]]
    assert remaining[0].book_id is None
