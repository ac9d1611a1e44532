from ilaw.models.user import User, UserRole, ApprovalStatus
from ilaw.models.book import Book, BookType, Page, Question, QuizMode
from ilaw.models.badge import Badge, BookBadge, EarnedBadge, AwardMethod
from ilaw.models.quiz_attempt import QuizAttempt
from ilaw.models.progress import Progress, ReadingSession
from ilaw.models.settings import SystemSetting, TeachingSetting

__all__ = [
    "User", "UserRole", "ApprovalStatus", "Book", "BookType", "Page", "Question", "QuizMode",
    "Badge", "BookBadge", "EarnedBadge", "AwardMethod", "QuizAttempt", "Progress", "ReadingSession",
    "SystemSetting", "TeachingSetting",
]
