"""
Legacy source schema.

Column names and types are a contract with the legacy databases; these
definitions only describe what the migration reads. Attribute ``key``
values give each column a snake_case handle.
"""

from sqlalchemy import (
    Table, Column, String, Text, Integer, BigInteger, Float, Boolean,
    Date, DateTime, JSON, Uuid
)
from models.base import source_metadata, AttributeValueType, LocationLevel


# ============================================================================
# USERS, TENANTS, ROLES
# ============================================================================

users = Table(
    "Users", source_metadata,
    Column("userId", Uuid, primary_key=True, key="user_id"),
    Column("username", String, key="username"),
    Column("firstName", String, key="first_name"),
    Column("middleName", String, key="middle_name"),
    Column("lastName", String, key="last_name"),
    Column("email", String, key="email"),
    Column("mobile", String, key="mobile"),
    Column("dob", String, key="dob"),
    Column("gender", String, key="gender"),
    Column("status", String, key="status"),
    Column("createdAt", DateTime, key="created_at"),
    Column("updatedAt", DateTime, key="updated_at"),
    Column("createdBy", Uuid, key="created_by"),
    Column("updatedBy", Uuid, key="updated_by"),
)

tenants = Table(
    "Tenants", source_metadata,
    Column("tenantId", Uuid, primary_key=True, key="tenant_id"),
    Column("name", String, key="name"),
)

roles = Table(
    "Roles", source_metadata,
    Column("roleId", Uuid, primary_key=True, key="role_id"),
    Column("name", String, key="name"),
    Column("code", String, key="code"),
)

user_tenant_mapping = Table(
    "UserTenantMapping", source_metadata,
    Column("id", Uuid, primary_key=True, key="id"),
    Column("userId", Uuid, key="user_id"),
    Column("tenantId", Uuid, key="tenant_id"),
)

user_roles_mapping = Table(
    "UserRolesMapping", source_metadata,
    Column("id", Uuid, primary_key=True, key="id"),
    Column("userId", Uuid, key="user_id"),
    Column("roleId", Uuid, key="role_id"),
)


# ============================================================================
# COHORTS
# ============================================================================

cohorts = Table(
    "Cohort", source_metadata,
    Column("cohortId", Uuid, primary_key=True, key="cohort_id"),
    Column("name", String, key="name"),
    Column("type", String, key="type"),
    Column("tenantId", Uuid, key="tenant_id"),
    Column("status", String, key="status"),
    Column("createdAt", DateTime, key="created_at"),
    Column("updatedAt", DateTime, key="updated_at"),
)

cohort_members = Table(
    "CohortMembers", source_metadata,
    Column("cohortMembershipId", Uuid, primary_key=True, key="cohort_membership_id"),
    Column("cohortId", Uuid, key="cohort_id"),
    Column("userId", Uuid, key="user_id"),
    Column("status", String, key="status"),
    Column("createdAt", DateTime, key="created_at"),
)

cohort_academic_years = Table(
    "CohortAcademicYear", source_metadata,
    Column("cohortAcademicYearId", Uuid, primary_key=True, key="cohort_academic_year_id"),
    Column("cohortId", Uuid, key="cohort_id"),
    Column("academicYearId", Uuid, key="academic_year_id"),
)


# ============================================================================
# ATTRIBUTE STORE
# ============================================================================

fields = Table(
    "Fields", source_metadata,
    Column("fieldId", Uuid, primary_key=True, key="field_id"),
    Column("name", String, key="name"),
    Column("type", String, key="type"),
)

field_values = Table(
    "FieldValues", source_metadata,
    Column("fieldValuesId", Uuid, primary_key=True, key="field_values_id"),
    Column("itemId", Uuid, key="item_id"),
    Column("fieldId", Uuid, key="field_id"),
    Column("value", AttributeValueType, key="value"),
)


# ============================================================================
# LOCATION REFERENCE TABLES
# ============================================================================

def _location_table(level: str) -> Table:
    return Table(
        level, source_metadata,
        Column(f"{level}_id", Integer, primary_key=True, key="id"),
        Column(f"{level}_name", String, key="name"),
    )


location_tables = {
    level: _location_table(level.value) for level in LocationLevel
}


# ============================================================================
# ATTENDANCE
# ============================================================================

attendance = Table(
    "Attendance", source_metadata,
    Column("attendanceId", Uuid, primary_key=True, key="attendance_id"),
    Column("userId", Uuid, key="user_id"),
    Column("contextId", Uuid, key="context_id"),
    Column("context", String, key="context"),
    Column("attendanceDate", Date, key="attendance_date"),
    Column("attendance", String, key="attendance"),
    Column("metaData", JSON, key="meta_data"),
    Column("createdAt", DateTime, key="created_at"),
    Column("updatedAt", DateTime, key="updated_at"),
    Column("createdBy", Uuid, key="created_by"),
    Column("updatedBy", Uuid, key="updated_by"),
)


# ============================================================================
# COURSES AND ASSESSMENTS
# ============================================================================

user_course_certificates = Table(
    "user_course_certificate", source_metadata,
    Column("usercertificateId", Uuid, primary_key=True, key="usercertificate_id"),
    Column("userId", Uuid, key="user_id"),
    Column("courseId", String, key="course_id"),
    Column("certificateId", String, key="certificate_id"),
    Column("tenantId", Uuid, key="tenant_id"),
    Column("status", String, key="status"),
    Column("issuedOn", DateTime, key="issued_on"),
    Column("createdOn", DateTime, key="created_on"),
    Column("updatedOn", DateTime, key="updated_on"),
    Column("completedOn", DateTime, key="completed_on"),
    Column("completionPercentage", Float, key="completion_percentage"),
    Column("progress", Integer, key="progress"),
    Column("lastReadContentId", String, key="last_read_content_id"),
    Column("lastReadContentStatus", String, key="last_read_content_status"),
    Column("createdBy", Uuid, key="created_by"),
)

assessment_tracking = Table(
    "assessment_tracking", source_metadata,
    Column("assessmentTrackingId", Uuid, primary_key=True, key="assessment_tracking_id"),
    Column("userId", Uuid, key="user_id"),
    Column("courseId", String, key="course_id"),
    Column("contentId", String, key="content_id"),
    Column("attemptId", Uuid, key="attempt_id"),
    Column("createdOn", DateTime, key="created_on"),
    Column("lastAttemptedOn", DateTime, key="last_attempted_on"),
    Column("assessmentSummary", JSON, key="assessment_summary"),
    Column("totalMaxScore", Float, key="total_max_score"),
    Column("totalScore", Float, key="total_score"),
    Column("updatedOn", DateTime, key="updated_on"),
    Column("timeSpent", BigInteger, key="time_spent"),
    Column("unitId", String, key="unit_id"),
)

assessment_score_details = Table(
    "assessment_tracking_score_detail", source_metadata,
    Column("id", Uuid, primary_key=True, key="id"),
    Column("userId", Uuid, key="user_id"),
    Column("assessmentTrackingId", Uuid, key="assessment_tracking_id"),
    Column("questionId", String, key="question_id"),
    Column("pass", Boolean, key="passed"),
    Column("sectionId", String, key="section_id"),
    Column("resValue", Text, key="res_value"),
    Column("duration", Integer, key="duration"),
    Column("score", Float, key="score"),
    Column("maxScore", Float, key="max_score"),
    Column("queTitle", Text, key="que_title"),
)
