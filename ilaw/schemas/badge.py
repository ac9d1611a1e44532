from datetime import datetime
from ilaw.models.badge import AwardMethod
from ilaw.schemas.base import CamelModel
from ilaw.schemas.book import BookSummary


class BadgeCreate(CamelModel):
    name: str
    description: str = ""
    icon_url: str | None = None
    is_generic: bool = True
    is_active: bool = True


class BadgeUpdate(CamelModel):
    name: str | None = None
    description: str | None = None
    icon_url: str | None = None
    is_generic: bool | None = None
    is_active: bool | None = None


class BadgeResponse(CamelModel):
    id: str
    name: str
    description: str
    icon_url: str | None
    is_generic: bool
    is_active: bool
    created_at: datetime


class BookBadgeCreate(CamelModel):
    badge_id: str
    award_method: AwardMethod = AwardMethod.AUTO_ON_BOOK_COMPLETE
    completion_threshold: float | None = None
    is_enabled: bool = True


class BookBadgeResponse(CamelModel):
    id: str
    book_id: str
    badge_id: str
    award_method: str
    completion_threshold: int
    is_enabled: bool
    created_at: datetime
    badge: BadgeResponse | None = None


class BookBadgeAttachResponse(CamelModel):
    success: bool = True
    message: str
    book_badge: BookBadgeResponse


class AwardBadgeRequest(CamelModel):
    badge_id: str
    book_id: str | None = None
    note: str | None = None


class EarnedBadgeResponse(CamelModel):
    id: str
    user_id: str
    badge_id: str
    book_id: str | None
    note: str | None
    awarded_at: datetime
    badge: BadgeResponse | None = None
    book: BookSummary | None = None


class AwardBadgeResponse(CamelModel):
    success: bool = True
    message: str
    earned_badge: EarnedBadgeResponse


class AwardedBadge(CamelModel):
    """A badge credited by the completion call (not previously held)."""
    badge_id: str
    name: str
    description: str
    icon_url: str | None
    is_generic: bool
    awarded_at: datetime
