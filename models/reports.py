"""
Report tables created and owned by the migration.

Each table is keyed by the identifier of the source row it was built from;
no report row has an identity of its own.
"""

from sqlalchemy import Table, Column, String, Integer, Boolean, Date, DateTime, Uuid
from models.base import metadata, JsonBlob


user_profile_reports = Table(
    "UserProfileReport", metadata,
    Column("userId", Uuid, primary_key=True, key="user_id"),
    Column("username", String, key="username"),
    Column("fullName", String, key="full_name"),
    Column("email", String, key="email"),
    Column("mobile", String, key="mobile"),
    Column("dob", String, key="dob"),
    Column("gender", String, key="gender"),
    Column("tenantId", Uuid, key="tenant_id"),
    Column("tenantName", String, key="tenant_name"),
    Column("status", String, key="status"),
    Column("createdAt", DateTime, key="created_at"),
    Column("updatedAt", DateTime, key="updated_at"),
    Column("createdBy", Uuid, key="created_by"),
    Column("updatedBy", Uuid, key="updated_by"),
    Column("roleId", Uuid, key="role_id"),
    Column("roleName", String, key="role_name"),
    Column("customFields", JsonBlob, key="custom_fields"),
    Column("cohorts", JsonBlob, key="cohorts"),
    Column("automaticMember", Boolean, key="automatic_member"),
    Column("state", String, key="state"),
    Column("district", String, key="district"),
    Column("block", String, key="block"),
    Column("village", String, key="village"),
)

cohort_summary_reports = Table(
    "CohortSummaryReport", metadata,
    Column("cohortId", Uuid, primary_key=True, key="cohort_id"),
    Column("name", String, key="name"),
    Column("type", String, key="type"),
    Column("tenantId", Uuid, key="tenant_id"),
    Column("tenantName", String, key="tenant_name"),
    Column("academicYear", String, key="academic_year"),
    Column("memberCount", Integer, key="member_count"),
    Column("customFields", JsonBlob, key="custom_fields"),
    Column("createdAt", DateTime, key="created_at"),
    Column("updatedAt", DateTime, key="updated_at"),
    Column("state", String, key="state"),
    Column("district", String, key="district"),
    Column("block", String, key="block"),
    Column("village", String, key="village"),
)

daily_attendance_reports = Table(
    "DailyAttendanceReport", metadata,
    Column("attendanceId", Uuid, primary_key=True, key="attendance_id"),
    Column("userId", Uuid, key="user_id"),
    Column("cohortId", Uuid, key="cohort_id"),
    Column("context", String, key="context"),
    Column("date", Date, key="date"),
    Column("status", String, key="status"),
    Column("metadata", String, key="metadata"),
    Column("createdAt", DateTime, key="created_at"),
    Column("updatedAt", DateTime, key="updated_at"),
    Column("createdBy", Uuid, key="created_by"),
    Column("updatedBy", Uuid, key="updated_by"),
)
