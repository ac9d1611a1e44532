from datetime import datetime
from ilaw.schemas.base import CamelModel


class QuizAttemptCreate(CamelModel):
    book_id: str
    page_id: str | None = None
    score_correct: int
    score_total: int
    percentage: float | None = None
    mode: str | None = None
    duration_sec: int | None = None
    user_id: str | None = None  # staff only; students always submit for themselves


class QuizAttemptResponse(CamelModel):
    id: str
    user_id: str
    book_id: str
    page_id: str | None
    score_correct: int
    score_total: int
    percentage: int
    mode: str
    attempt_number: int
    duration_sec: int
    created_at: datetime


class QuizAttemptCreateResponse(CamelModel):
    success: bool = True
    attempt: QuizAttemptResponse


class QuizAttemptListResponse(CamelModel):
    success: bool = True
    count: int
    attempts: list[QuizAttemptResponse]


class QuizSessionResponse(CamelModel):
    user_id: str
    book_id: str
    start_at: datetime
    end_at: datetime
    total_correct: int
    total_total: int
    percentage: int
    mode: str


class QuizSessionSummaryResponse(CamelModel):
    success: bool = True
    user_id: str
    book_id: str | None
    sessions: list[QuizSessionResponse]
    latest_session: QuizSessionResponse | None
    average_percentage: int | None
