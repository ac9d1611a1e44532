"""Book pages and their quiz questions."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from ilaw.auth import get_current_user, get_current_user_staff
from ilaw.database import get_db
from ilaw.models.book import Page, Question
from ilaw.models.user import User
from ilaw.routers.books import get_book_or_404
from ilaw.schemas.book import (
    PageResponse,
    PageWrite,
    QuestionCreate,
    QuestionIn,
    QuestionResponse,
)

router = APIRouter(prefix="/api", tags=["pages"])


def _duplicate_page(page_number: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=f"Page {page_number} already exists in this book",
    )


def _page_response(db: Session, page: Page) -> PageResponse:
    questions = db.query(Question).filter(Question.page_id == page.id).all()
    return PageResponse(
        id=page.id,
        book_id=page.book_id,
        page_number=page.page_number,
        title=page.title,
        content=page.content,
        image_url=page.image_url,
        shuffle_questions=page.shuffle_questions,
        questions=[QuestionResponse.model_validate(q) for q in questions],
    )


def _add_questions(db: Session, page_id: str, questions: list[QuestionIn]) -> None:
    for q in questions:
        text = q.question_text.strip()
        if not text:
            continue
        db.add(Question(
            page_id=page_id,
            question_text=text,
            answer_type=q.answer_type or "text",
            correct_answer=q.correct_answer,
            options=q.options,
        ))


def _get_page_or_404(db: Session, page_id: str) -> Page:
    page = db.query(Page).filter(Page.id == page_id).first()
    if not page:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found")
    return page


# ---------- Pages ----------


@router.get("/books/{book_id}/pages", response_model=list[PageResponse])
def list_pages(
    book_id: str,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    pages = db.query(Page).filter(Page.book_id == book_id).order_by(Page.page_number.asc()).all()
    return [_page_response(db, p) for p in pages]


@router.post("/books/{book_id}/pages", response_model=PageResponse, status_code=status.HTTP_201_CREATED)
def create_page(
    book_id: str,
    body: PageWrite,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user_staff),
):
    """Create a page (optionally with questions). 409 if the page number is taken."""
    if not body.content.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Content is required")
    get_book_or_404(db, book_id)
    exists = (
        db.query(Page.id)
        .filter(Page.book_id == book_id, Page.page_number == body.page_number)
        .first()
    )
    if exists:
        raise _duplicate_page(body.page_number)

    page = Page(
        book_id=book_id,
        page_number=body.page_number,
        title=body.title,
        content=body.content.strip(),
        image_url=body.image_url,
        shuffle_questions=bool(body.shuffle_questions),
    )
    db.add(page)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise _duplicate_page(body.page_number)
    _add_questions(db, page.id, body.questions or [])
    db.commit()
    db.refresh(page)
    return _page_response(db, page)


@router.get("/pages/{page_id}", response_model=PageResponse)
def get_page(
    page_id: str,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    return _page_response(db, _get_page_or_404(db, page_id))


@router.put("/pages/{page_id}", response_model=PageResponse)
def update_page(
    page_id: str,
    body: PageWrite,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user_staff),
):
    """Update a page. A `questions` list replaces all of the page's questions."""
    if not body.content.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Content is required")
    page = _get_page_or_404(db, page_id)
    if body.page_number != page.page_number:
        clash = (
            db.query(Page.id)
            .filter(Page.book_id == page.book_id, Page.page_number == body.page_number)
            .first()
        )
        if clash:
            raise _duplicate_page(body.page_number)
    page.page_number = body.page_number
    page.title = body.title
    page.content = body.content.strip()
    page.image_url = body.image_url
    if body.shuffle_questions is not None:
        page.shuffle_questions = body.shuffle_questions
    if body.questions is not None:
        db.query(Question).filter(Question.page_id == page.id).delete(synchronize_session=False)
        _add_questions(db, page.id, body.questions)
    db.commit()
    db.refresh(page)
    return _page_response(db, page)


@router.delete("/pages/{page_id}")
def delete_page(
    page_id: str,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user_staff),
):
    page = _get_page_or_404(db, page_id)
    db.query(Question).filter(Question.page_id == page.id).delete(synchronize_session=False)
    db.delete(page)
    db.commit()
    return {"message": "Page deleted successfully", "id": page_id}


# ---------- Questions ----------


@router.get("/pages/{page_id}/questions", response_model=list[QuestionResponse])
def list_questions(
    page_id: str,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    questions = db.query(Question).filter(Question.page_id == page_id).all()
    return [QuestionResponse.model_validate(q) for q in questions]


@router.post("/questions", response_model=QuestionResponse, status_code=status.HTTP_201_CREATED)
def create_question(
    body: QuestionCreate,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user_staff),
):
    _get_page_or_404(db, body.page_id)
    if not body.question_text.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Question text is required")
    question = Question(
        page_id=body.page_id,
        question_text=body.question_text.strip(),
        answer_type=body.answer_type,
        correct_answer=body.correct_answer,
        options=body.options,
    )
    db.add(question)
    db.commit()
    db.refresh(question)
    return QuestionResponse.model_validate(question)


@router.put("/questions/{question_id}", response_model=QuestionResponse)
def update_question(
    question_id: str,
    body: QuestionIn,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user_staff),
):
    question = db.query(Question).filter(Question.id == question_id).first()
    if not question:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Question not found")
    question.question_text = body.question_text.strip()
    question.answer_type = body.answer_type
    question.correct_answer = body.correct_answer
    question.options = body.options
    db.commit()
    db.refresh(question)
    return QuestionResponse.model_validate(question)


@router.delete("/questions/{question_id}")
def delete_question(
    question_id: str,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user_staff),
):
    question = db.query(Question).filter(Question.id == question_id).first()
    if not question:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Question not found")
    db.delete(question)
    db.commit()
    return {"message": "Question deleted successfully", "id": question_id}
