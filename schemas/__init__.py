"""
Pydantic schemas for destination records.

Each record class mirrors one destination table; its field names equal the
table's column keys so a validated record can be written with
``record.model_dump()`` directly.

Schemas:
    UserProfileReportRecord, CohortSummaryReportRecord,
    DailyAttendanceReportRecord, CourseRecord, CourseCertificateRecord,
    AssessmentTrackingRecord, AssessmentScoreDetailRecord

Usage:
    from schemas.records import UserProfileReportRecord
"""

__all__ = [
    "to_json_value",
    "to_text",
    "UserProfileReportRecord",
    "CohortSummaryReportRecord",
    "DailyAttendanceReportRecord",
    "CourseRecord",
    "CourseCertificateRecord",
    "AssessmentTrackingRecord",
    "AssessmentScoreDetailRecord",
]
