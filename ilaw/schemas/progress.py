from datetime import datetime
from ilaw.schemas.base import CamelModel
from ilaw.schemas.badge import AwardedBadge
from ilaw.schemas.book import BookSummary


class ProgressUpdate(CamelModel):
    book_id: str
    percent_complete: float | None = None
    user_id: str | None = None  # staff only


class ProgressResponse(CamelModel):
    id: str
    user_id: str
    book_id: str
    percent_complete: int
    total_reading_time: int
    last_read_at: datetime
    book: BookSummary | None = None
    student_name: str | None = None


class ProgressListResponse(CamelModel):
    progress: list[ProgressResponse]


class ProgressWriteResponse(CamelModel):
    message: str
    progress: ProgressResponse


class ReadingSessionRequest(CamelModel):
    book_id: str


class ReadingSessionStartResponse(CamelModel):
    success: bool = True
    message: str
    session_id: str
    start_time: datetime


class ReadingSessionEndResponse(CamelModel):
    success: bool = True
    message: str
    session_id: str
    start_time: datetime
    end_time: datetime
    total_seconds: int


class CompletionResponse(CamelModel):
    success: bool = True
    message: str
    progress: ProgressResponse
    awarded_badges: list[AwardedBadge]
