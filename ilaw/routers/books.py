import logging
import re
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session
from ilaw.auth import get_current_user, get_current_user_staff
from ilaw.database import get_db
from ilaw.models.badge import BookBadge
from ilaw.models.book import Book, BookType, Page, Question
from ilaw.models.progress import Progress, ReadingSession
from ilaw.models.quiz_attempt import QuizAttempt
from ilaw.models.user import User
from ilaw.schemas.book import BookCreate, BookResponse, BookUpdate
from ilaw.services.badge_award import detach_book_awards

router = APIRouter(prefix="/api/books", tags=["books"])
logger = logging.getLogger(__name__)


def slugify(text: str) -> str:
    slug = re.sub(r"[^\w\s-]", "", text.lower().strip())
    slug = re.sub(r"\s+", "-", slug)
    return re.sub(r"-+", "-", slug)


def unique_slug(db: Session, title: str, exclude_id: str | None = None) -> str:
    root = slugify(title) or "book"
    candidate, n = root, 1
    while True:
        q = db.query(Book.id).filter(Book.slug == candidate)
        if exclude_id:
            q = q.filter(Book.id != exclude_id)
        if q.first() is None:
            return candidate
        n += 1
        candidate = f"{root}-{n}"


def _clean(value: str | None) -> str | None:
    return (value or "").strip() or None


def _apply_book_fields(book: Book, body: BookCreate) -> None:
    subject = _clean(body.subject) if body.type == BookType.EDUCATIONAL else None
    if body.type == BookType.EDUCATIONAL and not subject:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Subject is required for educational books",
        )
    title = body.title.strip()
    if not title:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title is required")
    book.title = title
    book.description = body.description.strip()
    book.type = body.type.value
    book.subject = subject
    book.grade = _clean(body.grade)
    book.cover_image = _clean(body.cover_image)
    book.music_url = _clean(body.music_url)
    book.quiz_mode = body.quiz_mode.value


def get_book_or_404(db: Session, book_id: str) -> Book:
    book = db.query(Book).filter(Book.id == book_id).first()
    if not book:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
    return book


@router.get("", response_model=list[BookResponse])
def list_books(
    type: str | None = None,
    grade: str | None = None,
    subject: str | None = None,
    search: str | None = None,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    """List books, newest first. Filters: type, grade, subject ("all" = no filter), search."""
    q = db.query(Book)
    if type and type != "all":
        q = q.filter(Book.type == type)
    if grade and grade != "all":
        q = q.filter(Book.grade == grade)
    if subject and subject != "all":
        q = q.filter(Book.subject == subject)
    if search:
        like = f"%{search.strip()}%"
        q = q.filter(or_(Book.title.ilike(like), Book.description.ilike(like), Book.subject.ilike(like)))
    return [BookResponse.model_validate(b) for b in q.order_by(Book.created_at.desc()).all()]


@router.get("/{book_id}", response_model=BookResponse)
def get_book(
    book_id: str,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    return BookResponse.model_validate(get_book_or_404(db, book_id))


@router.post("", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
def create_book(
    body: BookCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_staff),
):
    book = Book(added_by_id=user.id)
    _apply_book_fields(book, body)
    book.slug = unique_slug(db, book.title)
    db.add(book)
    db.commit()
    db.refresh(book)
    logger.info("Book %s created by %s", book.id, user.id)
    return BookResponse.model_validate(book)


@router.put("/{book_id}", response_model=BookResponse)
def update_book(
    book_id: str,
    body: BookUpdate,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user_staff),
):
    book = get_book_or_404(db, book_id)
    old_title = book.title
    _apply_book_fields(book, body)
    if book.title != old_title:
        book.slug = unique_slug(db, book.title, exclude_id=book.id)
    db.commit()
    db.refresh(book)
    return BookResponse.model_validate(book)


@router.delete("/{book_id}")
def delete_book(
    book_id: str,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user_staff),
):
    """Delete a book and everything that hangs off it. Earned badges are kept but detached."""
    book = get_book_or_404(db, book_id)
    page_ids = [pid for (pid,) in db.query(Page.id).filter(Page.book_id == book_id).all()]
    if page_ids:
        db.query(Question).filter(Question.page_id.in_(page_ids)).delete(synchronize_session=False)
    db.query(QuizAttempt).filter(QuizAttempt.book_id == book_id).delete(synchronize_session=False)
    db.query(Page).filter(Page.book_id == book_id).delete(synchronize_session=False)
    db.query(ReadingSession).filter(ReadingSession.book_id == book_id).delete(synchronize_session=False)
    db.query(Progress).filter(Progress.book_id == book_id).delete(synchronize_session=False)
    db.query(BookBadge).filter(BookBadge.book_id == book_id).delete(synchronize_session=False)
    detach_book_awards(db, book_id)
    db.delete(book)
    db.commit()
    logger.info("Book %s deleted", book_id)
    return {"message": "Book deleted successfully", "id": book_id}
