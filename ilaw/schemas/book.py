from datetime import datetime
from ilaw.models.book import BookType, QuizMode
from ilaw.schemas.base import CamelModel


class BookCreate(CamelModel):
    title: str
    description: str
    type: BookType
    subject: str | None = None
    grade: str | None = None
    cover_image: str | None = None
    music_url: str | None = None
    quiz_mode: QuizMode = QuizMode.RETRY


class BookUpdate(BookCreate):
    """Full replacement, same rules as create."""


class BookResponse(CamelModel):
    id: str
    slug: str
    title: str
    description: str
    type: str
    subject: str | None
    grade: str | None
    cover_image: str | None
    music_url: str | None
    quiz_mode: str
    added_by_id: str | None
    created_at: datetime
    updated_at: datetime


class BookSummary(CamelModel):
    id: str
    title: str


class QuestionIn(CamelModel):
    question_text: str
    answer_type: str = "text"
    correct_answer: str = ""
    options: str = ""


class QuestionCreate(QuestionIn):
    page_id: str


class QuestionResponse(CamelModel):
    id: str
    page_id: str
    question_text: str
    answer_type: str
    correct_answer: str
    options: str


class PageWrite(CamelModel):
    page_number: int
    content: str
    title: str = ""
    image_url: str = ""
    shuffle_questions: bool | None = None
    questions: list[QuestionIn] | None = None


class PageResponse(CamelModel):
    id: str
    book_id: str
    page_number: int
    title: str
    content: str
    image_url: str
    shuffle_questions: bool
    questions: list[QuestionResponse] = []


class BookListResponse(CamelModel):
    books: list[BookResponse]
