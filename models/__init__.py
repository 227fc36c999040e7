"""
SQLAlchemy table definitions for both sides of the migration.

This package describes the legacy source schema (read-only) and the
destination schema written by the pipelines:

Models:
    base: Shared MetaData objects, portable column types and enums
        (EntityType, RunState, LocationLevel)
    source: Legacy tables (Users, Cohort, FieldValues, Attendance, ...)
    reports: Report tables owned by the migration (UserProfileReport,
        CohortSummaryReport, DailyAttendanceReport)
    content: Course and assessment tables of the destination schema

Database Schema:
    Tables are declared with SQLAlchemy Core so the legacy quoted
    camelCase column names stay exact while each column gets a
    snake_case ``key``. JSON blobs use JSONB on PostgreSQL.

Usage:
    from models.reports import user_profile_reports
    from models.source import users, field_values
    from models.base import metadata, EntityType

Example:
    # Ensure destination tables exist
    await connection.run_sync(metadata.create_all, tables=[user_profile_reports])

Relationships:
    - Users → UserProfileReport (one-to-one, same key)
    - Cohort → CohortSummaryReport (one-to-one, same key)
    - Attendance → DailyAttendanceReport (one-to-one, same key)
"""

__all__ = [
    "metadata",
    "source_metadata",
    "EntityType",
    "RunState",
    "LocationLevel",
]
