"""
Unit tests for idempotent loaders
"""

import pytest
import pytest_asyncio
import uuid
import warnings
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock
from pydantic.warnings import PydanticDeprecatedSince20
from models.base import metadata
from models.reports import user_profile_reports
from models.content import courses, assessment_score_details
from schemas.records import UserProfileReportRecord, CourseRecord, AssessmentScoreDetailRecord
from migration.loaders.postgres_loader import UpsertLoader, DeleteInsertLoader
from core.exceptions import LoadError, UnsupportedDialectError, UpsertError

USER_ID = uuid.UUID("aaaaaaaa-0000-0000-0000-000000000001")


@pytest_asyncio.fixture
async def destination_conn(destination_engine):
    """Destination connection with every destination table created"""
    async with destination_engine.connect() as conn:
        await conn.run_sync(metadata.create_all)
        await conn.commit()
        yield conn


def _profile(**overrides) -> UserProfileReportRecord:
    values = {
        "user_id": USER_ID,
        "username": "asha.rao",
        "full_name": "Asha  Rao",
        "created_at": datetime(2024, 1, 15, 10, 0),
        "created_by": uuid.UUID("bbbbbbbb-0000-0000-0000-000000000001"),
        "custom_fields": {"subject": {"type": "text", "value": "Maths"}},
    }
    values.update(overrides)
    return UserProfileReportRecord(**values)


class TestUpsertLoader:
    """Test insert-or-overwrite writes"""

    @pytest.mark.asyncio
    async def test_insert_then_overwrite(self, destination_conn, destination_engine, fetch_rows):
        loader = UpsertLoader(user_profile_reports, key_columns=["user_id"], immutable=["created_at", "created_by"])

        await loader.write(destination_conn, _profile())
        await loader.write(destination_conn, _profile(
            username="asha.r",
            created_at=datetime(2025, 6, 1, 0, 0),
            created_by=uuid.uuid4(),
            custom_fields={},
        ))

        rows = await fetch_rows(destination_engine, user_profile_reports)
        assert len(rows) == 1
        assert rows[0]["username"] == "asha.r"
        assert rows[0]["custom_fields"] == {}
        # Immutable columns keep their first value
        assert rows[0]["created_at"] == datetime(2024, 1, 15, 10, 0)
        assert rows[0]["created_by"] == uuid.UUID("bbbbbbbb-0000-0000-0000-000000000001")

    @pytest.mark.asyncio
    async def test_identical_write_is_a_no_op(self, destination_conn, destination_engine, fetch_rows):
        loader = UpsertLoader(user_profile_reports, key_columns=["user_id"])

        await loader.write(destination_conn, _profile())
        first = await fetch_rows(destination_engine, user_profile_reports)
        await loader.write(destination_conn, _profile())
        second = await fetch_rows(destination_engine, user_profile_reports)

        assert first == second

    @pytest.mark.asyncio
    async def test_write_uses_current_pydantic_api(self, destination_conn):
        loader = UpsertLoader(user_profile_reports, key_columns=["user_id"])
        record = _profile()

        with warnings.catch_warnings():
            warnings.simplefilter("error", PydanticDeprecatedSince20)
            await loader.write(destination_conn, record)

    @pytest.mark.asyncio
    async def test_unsupported_dialect(self):
        connection = MagicMock()
        connection.dialect.name = "mysql"
        connection.execute = AsyncMock()
        loader = UpsertLoader(user_profile_reports, key_columns=["user_id"])

        with pytest.raises(UnsupportedDialectError):
            await loader.write(connection, _profile())

        connection.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_statement_failure_is_wrapped(self, destination_engine):
        """Writing before the table exists raises UpsertError"""
        loader = UpsertLoader(user_profile_reports, key_columns=["user_id"])

        async with destination_engine.connect() as conn:
            with pytest.raises(UpsertError) as exc_info:
                await loader.write(conn, _profile())

        assert exc_info.value.context["table_name"] == "UserProfileReport"
        assert exc_info.value.original_exception is not None


class TestDeleteInsertLoader:
    """Test delete-then-insert writes"""

    @pytest.mark.asyncio
    async def test_second_write_replaces_first(self, destination_conn, destination_engine, fetch_rows):
        loader = DeleteInsertLoader(courses, key_column="course_do_id")

        await loader.write(destination_conn, CourseRecord(course_do_id="do_course_1", course_name="First"))
        await loader.write(destination_conn, CourseRecord(
            course_do_id="do_course_1", course_name="Second", language=["English"]
        ))

        rows = await fetch_rows(destination_engine, courses)
        assert len(rows) == 1
        assert rows[0]["course_name"] == "Second"
        assert rows[0]["language"] == ["English"]

    @pytest.mark.asyncio
    async def test_other_keys_untouched(self, destination_conn, destination_engine, fetch_rows):
        loader = DeleteInsertLoader(courses, key_column="course_do_id")

        await loader.write(destination_conn, CourseRecord(course_do_id="do_course_1"))
        await loader.write(destination_conn, CourseRecord(course_do_id="do_course_2"))
        await loader.write(destination_conn, CourseRecord(course_do_id="do_course_1", course_name="Again"))

        rows = await fetch_rows(destination_engine, courses)
        assert sorted(row["course_do_id"] for row in rows) == ["do_course_1", "do_course_2"]

    @pytest.mark.asyncio
    async def test_missing_key_is_rejected_before_delete(self):
        connection = MagicMock()
        connection.execute = AsyncMock()
        loader = DeleteInsertLoader(assessment_score_details, key_column="id")
        record = MagicMock()
        record.model_dump.return_value = {"id": None, "score": 1.0}

        with pytest.raises(LoadError):
            await loader.write(connection, record)

        connection.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_copies_every_column(self, destination_conn, destination_engine, fetch_rows):
        loader = DeleteInsertLoader(assessment_score_details, key_column="id")
        detail_id = uuid.uuid4()

        await loader.write(destination_conn, AssessmentScoreDetailRecord(
            id=detail_id, question_id="q1", passed=True, score=1.0, max_score=2.0, que_title="Q1"
        ))

        rows = await fetch_rows(destination_engine, assessment_score_details)
        assert rows[0]["id"] == detail_id
        assert rows[0]["passed"] is True
        assert rows[0]["max_score"] == 2.0
