from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./ilaw.db"
    # Create tables on startup (dev only; production uses alembic)
    auto_create_tables: bool = False

    # JWT
    secret_key: str = "your-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24  # 1 day

    # Frontend URL for CORS
    frontend_url: str = "http://localhost:5173"

    log_level: str = "INFO"

    # Registration / approval
    allow_new_registrations: bool = True
    auto_approve_students: bool = False
    auto_approve_teachers: bool = False
    require_strong_passwords: bool = True

    # Quiz attempts closer than this (seconds) are grouped into one session
    quiz_session_gap_seconds: int = 120

    # Completion awards only enabled auto mappings within their threshold
    strict_badge_mapping: bool = False

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
