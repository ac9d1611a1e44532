import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from ilaw.auth import STAFF_ROLES, get_current_user_admin, require_roles
from ilaw.database import get_db
from ilaw.models.book import Book
from ilaw.models.settings import SystemSetting
from ilaw.models.user import User, UserRole
from ilaw.schemas.book import BookListResponse, BookResponse
from ilaw.schemas.settings import (
    MaintenanceStatusResponse,
    SystemSettingsEnvelope,
    SystemSettingsResponse,
    SystemSettingsUpdate,
    TeachingSettingsBody,
    TeachingSettingsEnvelope,
    TeachingSettingsResponse,
)
from ilaw.services import settings as settings_service

router = APIRouter(prefix="/api", tags=["settings"])
logger = logging.getLogger(__name__)

get_current_teacher = require_roles(UserRole.TEACHER.value, detail="Only teachers can access.")
get_current_teaching_staff = require_roles(*STAFF_ROLES, detail="Only teachers can access teaching settings")


def _system_response(row: SystemSetting) -> SystemSettingsResponse:
    return SystemSettingsResponse.model_validate(row)


# ---------- System settings ----------


@router.get("/admin/system-settings", response_model=SystemSettingsEnvelope)
def get_system_settings(
    _admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
):
    return SystemSettingsEnvelope(settings=_system_response(settings_service.get_system_settings(db)))


@router.put("/admin/system-settings", response_model=SystemSettingsEnvelope)
def update_system_settings(
    body: SystemSettingsUpdate,
    admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
):
    row = settings_service.update_system_settings(db, **body.model_dump())
    logger.info("System settings changed by %s", admin.id)
    return SystemSettingsEnvelope(message="System settings saved successfully", settings=_system_response(row))


@router.get("/system/maintenance-status", response_model=MaintenanceStatusResponse)
def maintenance_status(db: Session = Depends(get_db)):
    """Public: lets the client show a maintenance banner before login."""
    return MaintenanceStatusResponse(maintenance_mode=settings_service.get_system_settings(db).maintenance_mode)


# ---------- Teaching settings ----------


@router.get("/user/teaching-settings", response_model=TeachingSettingsEnvelope)
def get_teaching_settings(
    user: User = Depends(get_current_teaching_staff),
    db: Session = Depends(get_db),
):
    """Stored settings, or the defaults (Grade 5, Storybook, 30) when none are saved."""
    row = settings_service.get_teaching_settings(db, user.id)
    if row is None:
        return TeachingSettingsEnvelope(settings=TeachingSettingsResponse(
            preferred_grades=list(settings_service.DEFAULT_PREFERRED_GRADES),
            subjects=list(settings_service.DEFAULT_SUBJECTS),
            max_class_size=settings_service.DEFAULT_MAX_CLASS_SIZE,
        ))
    return TeachingSettingsEnvelope(settings=TeachingSettingsResponse(
        preferred_grades=settings_service.clean_grades(row.preferred_grades),
        subjects=settings_service.normalize_subjects(row.subjects),
        max_class_size=row.max_class_size,
    ))


@router.put("/user/teaching-settings", response_model=TeachingSettingsEnvelope)
def save_teaching_settings(
    body: TeachingSettingsBody,
    user: User = Depends(get_current_teaching_staff),
    db: Session = Depends(get_db),
):
    try:
        row, _ = settings_service.save_teaching_settings(
            db,
            user.id,
            preferred_grades=body.preferred_grades,
            subjects=body.subjects,
            max_class_size=body.max_class_size,
        )
    except settings_service.TeachingSettingsError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return TeachingSettingsEnvelope(
        message="Teaching settings saved successfully",
        settings=TeachingSettingsResponse(
            preferred_grades=row.preferred_grades,
            subjects=row.subjects,
            max_class_size=row.max_class_size,
        ),
    )


@router.get("/teacher/books", response_model=BookListResponse)
def list_teacher_books(
    type: str | None = None,
    grade: str | None = None,
    subject: str | None = None,
    search: str | None = None,
    teacher: User = Depends(get_current_teacher),
    db: Session = Depends(get_db),
):
    """Book catalogue narrowed by the teacher's saved grades and subjects, then by the query filters."""
    q = db.query(Book)
    q = settings_service.filter_books_by_teaching_settings(
        q, settings_service.get_teaching_settings(db, teacher.id)
    )
    q = settings_service.filter_books_by_request(q, type=type, grade=grade, subject=subject, search=search)
    books = q.order_by(Book.created_at.desc()).all()
    return BookListResponse(books=[BookResponse.model_validate(b) for b in books])
