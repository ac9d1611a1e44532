from ilaw.schemas.base import CamelModel


class DashboardStats(CamelModel):
    average_reading_seconds: int
    total_sessions: int
    total_reading_seconds: int
    completion_rate: int  # % of readers with at least one finished book
    book_completion_rate: int  # % of progress rows at 100
    completed_books_count: int
    readers_count: int


class DashboardStatsResponse(CamelModel):
    success: bool = True
    stats: DashboardStats
