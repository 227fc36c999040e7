"""
Pydantic schemas for destination records with validation.

Every field has an explicit default so a missing source or enrichment value
never leaves a destination column unset. JSON blob fields are coerced to
JSON-safe values (UUIDs and timestamps become strings) before they reach
the database.
"""

from pydantic import BaseModel, Field, validator
from typing import Optional, List, Dict, Any
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
import json

# DailyAttendanceReportRecord has a field named ``date``
CalendarDate = date


def to_json_value(value: Any) -> Any:
    """Recursively convert a value into something json.dumps accepts"""
    if isinstance(value, dict):
        return {str(k): to_json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_value(v) for v in value]
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


def to_text(value: Any) -> Optional[str]:
    """Store a non-string API scalar in a text column (numbers, objects)"""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(to_json_value(value))
    return str(value)


# ============================================================================
# REPORT RECORDS
# ============================================================================

class UserProfileReportRecord(BaseModel):
    """
    One row of ``UserProfileReport``.

    Ensures:
    - customFields is always an object, cohorts always an array
    - automaticMember is always a boolean
    - dob is stored as text
    """

    user_id: UUID
    username: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    mobile: Optional[str] = None
    dob: Optional[str] = None
    gender: Optional[str] = None

    # Tenant and role
    tenant_id: Optional[UUID] = None
    tenant_name: Optional[str] = None
    role_id: Optional[UUID] = None
    role_name: Optional[str] = None

    status: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[UUID] = None
    updated_by: Optional[UUID] = None

    # Enrichment blobs
    custom_fields: Dict[str, Any] = Field(default_factory=dict)
    cohorts: List[Dict[str, Any]] = Field(default_factory=list)
    automatic_member: bool = False

    # Location names
    state: Optional[str] = None
    district: Optional[str] = None
    block: Optional[str] = None
    village: Optional[str] = None

    @validator("dob", pre=True)
    def dob_as_text(cls, v):
        """Dates of birth are kept as text"""
        if isinstance(v, (date, datetime)):
            return v.isoformat()
        return v

    @validator("custom_fields", pre=True)
    def clean_custom_fields(cls, v):
        """Ensure custom fields is a JSON object"""
        if not isinstance(v, dict):
            return {}
        return to_json_value(v)

    @validator("cohorts", pre=True)
    def clean_cohorts(cls, v):
        """Ensure cohorts is a JSON array"""
        if not isinstance(v, list):
            return []
        return to_json_value(v)


class CohortSummaryReportRecord(BaseModel):
    """One row of ``CohortSummaryReport``"""

    cohort_id: UUID
    name: Optional[str] = None
    type: Optional[str] = None
    tenant_id: Optional[UUID] = None
    tenant_name: Optional[str] = None
    academic_year: Optional[str] = None
    member_count: int = Field(0, ge=0)
    custom_fields: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    state: Optional[str] = None
    district: Optional[str] = None
    block: Optional[str] = None
    village: Optional[str] = None

    @validator("academic_year", pre=True)
    def academic_year_as_text(cls, v):
        if v is None:
            return None
        return str(v)

    @validator("member_count", pre=True)
    def clean_member_count(cls, v):
        """COUNT() may arrive as a string or bigint"""
        if v is None or v == "":
            return 0
        return int(v)

    @validator("custom_fields", pre=True)
    def clean_custom_fields(cls, v):
        if not isinstance(v, dict):
            return {}
        return to_json_value(v)


class DailyAttendanceReportRecord(BaseModel):
    """One row of ``DailyAttendanceReport``"""

    attendance_id: UUID
    user_id: Optional[UUID] = None
    cohort_id: Optional[UUID] = None
    context: Optional[str] = None
    date: Optional[CalendarDate] = None
    status: Optional[str] = None
    metadata: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[UUID] = None
    updated_by: Optional[UUID] = None

    @validator("metadata", pre=True)
    def metadata_as_text(cls, v):
        """The report column is varchar; structured metadata is JSON-encoded"""
        if v is None or isinstance(v, str):
            return v
        return json.dumps(to_json_value(v))


# ============================================================================
# CONTENT RECORDS
# ============================================================================

class CourseRecord(BaseModel):
    """
    One row of ``course``.

    List-shaped columns default to an empty array; ``details`` keeps the
    full hierarchy payload.
    """

    course_do_id: str = Field(..., min_length=1)
    course_name: Optional[str] = None
    channel: Optional[str] = None
    language: Any = Field(default_factory=list)
    program: Any = Field(default_factory=list)
    primary_user: Any = Field(default_factory=list)
    target_age_group: Any = Field(default_factory=list)
    keywords: Any = Field(default_factory=list)
    details: Dict[str, Any] = Field(default_factory=dict)

    @validator("language", "program", "primary_user", "target_age_group", "keywords", pre=True)
    def default_empty_list(cls, v):
        if v is None:
            return []
        return to_json_value(v)

    @validator("course_name", "channel", pre=True)
    def scalar_as_text(cls, v):
        return to_text(v)

    @validator("details", pre=True)
    def clean_details(cls, v):
        if not isinstance(v, dict):
            return {}
        return to_json_value(v)


class CourseCertificateRecord(BaseModel):
    """One row of ``user_course_certificate``, copied as-is"""

    usercertificate_id: UUID
    user_id: Optional[UUID] = None
    course_id: Optional[str] = None
    certificate_id: Optional[str] = None
    tenant_id: Optional[UUID] = None
    status: Optional[str] = None
    issued_on: Optional[datetime] = None
    created_on: Optional[datetime] = None
    updated_on: Optional[datetime] = None
    completed_on: Optional[datetime] = None
    completion_percentage: Optional[float] = None
    progress: Optional[int] = None
    last_read_content_id: Optional[str] = None
    last_read_content_status: Optional[str] = None
    created_by: Optional[UUID] = None


class AssessmentTrackingRecord(BaseModel):
    """One row of ``assessment_tracking`` with content search projections"""

    assessment_tracking_id: UUID
    user_id: Optional[UUID] = None
    course_id: Optional[str] = None
    content_id: Optional[str] = None
    attempt_id: Optional[UUID] = None
    created_on: Optional[datetime] = None
    last_attempted_on: Optional[datetime] = None
    assessment_summary: Optional[Any] = None
    total_max_score: Optional[float] = None
    total_score: Optional[float] = None
    updated_on: Optional[datetime] = None
    time_spent: Optional[int] = None
    unit_id: Optional[str] = None

    # Projections
    name: Optional[str] = None
    description: Optional[str] = None
    subject: Optional[str] = None
    domain: Optional[str] = None
    sub_domain: Optional[str] = None
    channel: Optional[str] = None
    assessment_type: Optional[str] = None
    program: Optional[str] = None
    target_age_group: Optional[str] = None
    assessment_name: Optional[str] = None
    content_language: Optional[str] = None
    status: Optional[str] = None
    framework: Optional[str] = None
    summary_type: str = "assessment_tracking"

    @validator(
        "name", "description", "subject", "domain", "sub_domain", "channel",
        "assessment_type", "program", "target_age_group", "assessment_name",
        "content_language", "status", "framework",
        pre=True
    )
    def projection_as_text(cls, v):
        return to_text(v)

    @validator("assessment_summary", pre=True)
    def clean_summary(cls, v):
        """Empty summaries are stored as NULL"""
        if not v:
            return None
        return to_json_value(v)


class AssessmentScoreDetailRecord(BaseModel):
    """One row of ``assessment_tracking_score_detail``, copied as-is"""

    id: UUID
    user_id: Optional[UUID] = None
    assessment_tracking_id: Optional[UUID] = None
    question_id: Optional[str] = None
    passed: Optional[bool] = None
    section_id: Optional[str] = None
    res_value: Optional[str] = None
    duration: Optional[int] = None
    score: Optional[float] = None
    max_score: Optional[float] = None
    que_title: Optional[str] = None
