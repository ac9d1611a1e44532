from ilaw.schemas.base import CamelModel


class SystemSettingsResponse(CamelModel):
    maintenance_mode: bool
    allow_new_registrations: bool
    auto_approve_students: bool
    auto_approve_teachers: bool
    require_strong_passwords: bool


class SystemSettingsUpdate(CamelModel):
    """Omitted fields keep their stored value."""
    maintenance_mode: bool | None = None
    allow_new_registrations: bool | None = None
    auto_approve_students: bool | None = None
    auto_approve_teachers: bool | None = None
    require_strong_passwords: bool | None = None


class SystemSettingsEnvelope(CamelModel):
    success: bool = True
    message: str | None = None
    settings: SystemSettingsResponse


class MaintenanceStatusResponse(CamelModel):
    success: bool = True
    maintenance_mode: bool


class TeachingSettingsBody(CamelModel):
    preferred_grades: list[str] = []
    subjects: list[str] = []
    max_class_size: int | None = None


class TeachingSettingsResponse(CamelModel):
    preferred_grades: list[str]
    subjects: list[str]
    max_class_size: int


class TeachingSettingsEnvelope(CamelModel):
    success: bool = True
    message: str | None = None
    settings: TeachingSettingsResponse
