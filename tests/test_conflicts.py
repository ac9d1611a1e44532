"""
Concurrent-writer recovery. Each test lets the service's pre-insert lookup
miss once while a competing row already exists, so the insert hits the
database constraint and the IntegrityError path has to return that row.
"""
from datetime import datetime

from ilaw.models.badge import Badge, EarnedBadge
from ilaw.models.progress import Progress, ReadingSession
from ilaw.models.quiz_attempt import QuizAttempt
from ilaw.services import badge_award, progress_tracker, quiz_attempts
from tests.conftest import auth_headers


def miss_first_lookup(real):
    calls = []

    def lookup(*args, **kwargs):
        calls.append(args)
        if len(calls) == 1:
            return None
        return real(*args, **kwargs)

    return lookup


def make_badge(db, name="Bookworm"):
    badge = Badge(name=name, description="Finished a book")
    db.add(badge)
    db.commit()
    db.refresh(badge)
    return badge


def test_progress_insert_race_updates_winner(db, monkeypatch, student, book):
    winner = Progress(user_id=student.id, book_id=book.id, percent_complete=40, total_reading_time=10)
    db.add(winner)
    db.commit()
    winner_id = winner.id
    monkeypatch.setattr(progress_tracker, "get_progress", miss_first_lookup(progress_tracker.get_progress))

    row, created = progress_tracker.upsert_progress(
        db, student.id, book.id, percent_complete=70, add_reading_seconds=5
    )

    assert created is False
    assert row.id == winner_id
    assert row.percent_complete == 70
    assert row.total_reading_time == 15
    assert db.query(Progress).count() == 1


def test_reading_session_start_race_returns_open_session(db, monkeypatch, student, book):
    winner = ReadingSession(user_id=student.id, book_id=book.id, start_time=datetime(2025, 6, 1, 8, 0))
    db.add(winner)
    db.commit()
    winner_id = winner.id
    monkeypatch.setattr(
        progress_tracker, "get_open_session", miss_first_lookup(progress_tracker.get_open_session)
    )

    session, created = progress_tracker.start_reading_session(db, student.id, book.id)

    assert created is False
    assert session.id == winner_id
    assert db.query(ReadingSession).count() == 1


def test_award_race_returns_existing_book_award(db, monkeypatch, student, book):
    badge = make_badge(db)
    winner = EarnedBadge(user_id=student.id, badge_id=badge.id, book_id=book.id)
    db.add(winner)
    db.commit()
    winner_id = winner.id
    monkeypatch.setattr(badge_award, "find_earned_badge", miss_first_lookup(badge_award.find_earned_badge))

    earned, created = badge_award.award_badge(db, user_id=student.id, badge_id=badge.id, book_id=book.id)

    assert created is False
    assert earned.id == winner_id
    assert db.query(EarnedBadge).count() == 1


def test_award_race_without_book_returns_existing_award(db, monkeypatch, student):
    badge = make_badge(db)
    winner = EarnedBadge(user_id=student.id, badge_id=badge.id, book_id=None)
    db.add(winner)
    db.commit()
    winner_id = winner.id
    monkeypatch.setattr(badge_award, "find_earned_badge", miss_first_lookup(badge_award.find_earned_badge))

    earned, created = badge_award.award_badge(db, user_id=student.id, badge_id=badge.id)

    assert created is False
    assert earned.id == winner_id
    assert db.query(EarnedBadge).count() == 1


def test_taken_attempt_number_is_recomputed(db, monkeypatch, student, book):
    db.add(QuizAttempt(
        user_id=student.id, book_id=book.id, score_correct=1, score_total=2,
        percentage=50, attempt_number=1,
    ))
    db.commit()
    real = quiz_attempts.next_attempt_number
    calls = []

    def stale_number(*args):
        calls.append(args)
        return 1 if len(calls) == 1 else real(*args)

    monkeypatch.setattr(quiz_attempts, "next_attempt_number", stale_number)

    attempt = quiz_attempts.record_attempt(
        db, user_id=student.id, book_id=book.id, page_id=None, score_correct=2, score_total=2,
    )

    assert len(calls) == 2
    assert attempt.attempt_number == 2
    assert db.query(QuizAttempt).count() == 2


def test_attempt_number_conflict_is_409(client, db, monkeypatch, student, book):
    db.add(QuizAttempt(
        user_id=student.id, book_id=book.id, score_correct=1, score_total=2,
        percentage=50, attempt_number=1,
    ))
    db.commit()
    monkeypatch.setattr(quiz_attempts, "next_attempt_number", lambda *args: 1)

    res = client.post(
        "/api/quiz-attempts",
        json={"bookId": book.id, "scoreCorrect": 2, "scoreTotal": 2},
        headers=auth_headers(student),
    )

    assert res.status_code == 409
    assert db.query(QuizAttempt).count() == 1
