"""
Course and assessment tables in the reshaped destination schema.

``course``, ``user_course_certificate`` and
``assessment_tracking_score_detail`` carry no uniqueness constraint on
their key column, so they are written with delete-then-insert.
``assessment_tracking`` is keyed by its primary key and upserted.
"""

from sqlalchemy import (
    Table, Column, String, Text, Integer, BigInteger, Float, Boolean, DateTime, Uuid
)
from models.base import metadata, JsonBlob


courses = Table(
    "course", metadata,
    Column("course_do_id", String, key="course_do_id", index=True),
    Column("course_name", String, key="course_name"),
    Column("channel", String, key="channel"),
    Column("language", JsonBlob, key="language"),
    Column("program", JsonBlob, key="program"),
    Column("primary_user", JsonBlob, key="primary_user"),
    Column("target_age_group", JsonBlob, key="target_age_group"),
    Column("keywords", JsonBlob, key="keywords"),
    Column("details", JsonBlob, key="details"),
)

user_course_certificates = Table(
    "user_course_certificate", metadata,
    Column("usercertificateId", Uuid, key="usercertificate_id", index=True),
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
    "assessment_tracking", metadata,
    Column("assessmentTrackingId", Uuid, primary_key=True, key="assessment_tracking_id"),
    Column("userId", Uuid, key="user_id"),
    Column("courseId", String, key="course_id"),
    Column("contentId", String, key="content_id"),
    Column("attemptId", Uuid, key="attempt_id"),
    Column("createdOn", DateTime, key="created_on"),
    Column("lastAttemptedOn", DateTime, key="last_attempted_on"),
    Column("assessmentSummary", JsonBlob, key="assessment_summary"),
    Column("totalMaxScore", Float, key="total_max_score"),
    Column("totalScore", Float, key="total_score"),
    Column("updatedOn", DateTime, key="updated_on"),
    Column("timeSpent", BigInteger, key="time_spent"),
    Column("unitId", String, key="unit_id"),
    # Projections of the content search payload
    Column("name", String, key="name"),
    Column("description", Text, key="description"),
    Column("subject", String, key="subject"),
    Column("domain", String, key="domain"),
    Column("subDomain", String, key="sub_domain"),
    Column("channel", String, key="channel"),
    Column("assessmentType", String, key="assessment_type"),
    Column("program", String, key="program"),
    Column("targetAgeGroup", String, key="target_age_group"),
    Column("assessmentName", String, key="assessment_name"),
    Column("contentLanguage", String, key="content_language"),
    Column("status", String, key="status"),
    Column("framework", String, key="framework"),
    Column("summaryType", String, key="summary_type"),
)

assessment_score_details = Table(
    "assessment_tracking_score_detail", metadata,
    Column("id", Uuid, key="id", index=True),
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
