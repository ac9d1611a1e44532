from datetime import datetime
from ilaw.schemas.badge import EarnedBadgeResponse
from ilaw.schemas.base import CamelModel
from ilaw.schemas.progress import ProgressResponse
from ilaw.schemas.quiz import QuizAttemptResponse
from ilaw.schemas.user import UserResponse


class ReadingSessionExport(CamelModel):
    id: str
    book_id: str
    start_time: datetime
    end_time: datetime | None
    total_seconds: int | None


class AccountExport(CamelModel):
    exported_at: datetime
    user: UserResponse
    progress: list[ProgressResponse]
    reading_sessions: list[ReadingSessionExport]
    quiz_attempts: list[QuizAttemptResponse]
    earned_badges: list[EarnedBadgeResponse]


class AccountExportResponse(CamelModel):
    success: bool = True
    message: str = "Data export completed"
    data: AccountExport
