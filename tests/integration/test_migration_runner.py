"""
Tests for runner orchestration: idempotence, failure isolation, fatal errors
"""

import pytest
import uuid
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock
from migration.runner import MigrationRunner
from migration.pipelines import (
    build_user_profile_pipeline,
    build_course_pipeline,
    build_course_certificate_pipeline,
    build_daily_attendance_pipeline,
)
from migration.resolvers.api_resolver import HierarchyResolver
from models.base import RunState
from models.source import users, user_course_certificates
from models.reports import user_profile_reports
from models.content import courses
from core.exceptions import ConnectionSetupError, ExtractionError, SchemaError


def _certificate(course_id, **overrides):
    row = {
        "usercertificate_id": uuid.uuid4(),
        "user_id": uuid.uuid4(),
        "course_id": course_id,
        "status": "completed",
        "issued_on": datetime(2024, 5, 1, 12, 0),
        "progress": 100,
    }
    row.update(overrides)
    return row


def _spy_on_close(runner):
    """Record (side, was_open) for every connection the runner releases"""
    closed = []
    original_close = runner._close

    async def spy(connection, side):
        closed.append((side, connection is not None and not connection.closed))
        await original_close(connection, side)

    runner._close = spy
    return closed


@pytest.mark.asyncio
async def test_rerun_against_unchanged_source_is_idempotent(
    source_engine, destination_engine, seed, fetch_rows, user_row, location_field_ids
):
    """Two runs leave the destination in the same state"""
    await seed(source_engine, users, [user_row])

    runner = MigrationRunner(source_engine, destination_engine)
    await runner.run([build_user_profile_pipeline(location_field_ids)])
    first = await fetch_rows(destination_engine, user_profile_reports)

    runner = MigrationRunner(source_engine, destination_engine)
    await runner.run([build_user_profile_pipeline(location_field_ids)])
    second = await fetch_rows(destination_engine, user_profile_reports)

    assert len(first) == 1
    assert first == second


@pytest.mark.asyncio
async def test_enrichment_failure_still_writes_record(
    source_engine, destination_engine, seed, fetch_rows, make_failing_transport
):
    """API down: records are written with defaults and the run completes"""
    await seed(source_engine, user_course_certificates, [
        _certificate("do_course_1"),
        _certificate("do_course_2"),
    ])

    pipeline = build_course_pipeline(
        HierarchyResolver(base_url="http://middleware/", transport=make_failing_transport())
    )
    runner = MigrationRunner(source_engine, destination_engine)
    results = await runner.run([pipeline])

    assert runner.state == RunState.COMPLETED
    assert results["course"]["status"] == "success"
    assert results["course"]["records_loaded"] == 2

    rows = await fetch_rows(destination_engine, courses)
    assert sorted(row["course_do_id"] for row in rows) == ["do_course_1", "do_course_2"]
    for row in rows:
        assert row["course_name"] is None
        assert row["language"] == []
        assert row["details"] == {}


@pytest.mark.asyncio
async def test_failed_record_does_not_abort_batch(
    source_engine, destination_engine, seed, fetch_rows, make_failing_transport
):
    """A certificate without a course id yields one failed course record"""
    await seed(source_engine, user_course_certificates, [
        _certificate("do_course_1"),
        _certificate(None),
        _certificate("do_course_2"),
    ])

    pipeline = build_course_pipeline(
        HierarchyResolver(base_url="http://middleware/", transport=make_failing_transport())
    )
    runner = MigrationRunner(source_engine, destination_engine)
    results = await runner.run([pipeline])

    result = results["course"]
    assert runner.state == RunState.COMPLETED
    assert result["status"] == "partial_success"
    assert result["records_extracted"] == 3
    assert result["records_loaded"] == 2
    assert result["records_failed"] == 1
    assert result["error_details"][0]["error_type"] == "TransformationError"
    assert result["error_details"][0]["record_key"] == "None"

    rows = await fetch_rows(destination_engine, courses)
    assert len(rows) == 2


@pytest.mark.asyncio
async def test_course_id_unusable_in_url_is_still_written(
    source_engine, destination_engine, seed, fetch_rows, make_failing_transport
):
    await seed(source_engine, user_course_certificates, [_certificate("do_1\x01bad")])

    pipeline = build_course_pipeline(
        HierarchyResolver(base_url="http://middleware/", transport=make_failing_transport())
    )
    runner = MigrationRunner(source_engine, destination_engine)
    results = await runner.run([pipeline])

    assert results["course"]["status"] == "success"
    rows = await fetch_rows(destination_engine, courses)
    assert [row["course_do_id"] for row in rows] == ["do_1\x01bad"]
    assert rows[0]["details"] == {}


@pytest.mark.asyncio
async def test_write_failure_is_isolated(source_engine, destination_engine, seed, fetch_rows, user_row):
    """One failed write is counted and the next record is still written"""
    second_user = dict(user_row, user_id=uuid.uuid4(), username="second")
    await seed(source_engine, users, [user_row, second_user])

    pipeline = build_user_profile_pipeline()
    original_write = pipeline.loader.write
    calls = []

    async def flaky_write(connection, record):
        calls.append(record.user_id)
        if len(calls) == 1:
            raise RuntimeError("deadlock detected")
        await original_write(connection, record)

    pipeline.loader.write = flaky_write

    runner = MigrationRunner(source_engine, destination_engine)
    results = await runner.run([pipeline])

    assert results["user_profile"]["records_failed"] == 1
    assert results["user_profile"]["records_loaded"] == 1
    assert len(await fetch_rows(destination_engine, user_profile_reports)) == 1


@pytest.mark.asyncio
async def test_pipelines_share_one_connection_pair(
    source_engine, destination_engine, seed, make_failing_transport
):
    """Certificates then courses over the same two connections"""
    await seed(source_engine, user_course_certificates, [_certificate("do_course_1")])

    runner = MigrationRunner(source_engine, destination_engine)
    opened = []
    original_connect = runner._connect

    async def spy(engine, side, autocommit=False):
        opened.append(side)
        return await original_connect(engine, side, autocommit=autocommit)

    runner._connect = spy
    closed = _spy_on_close(runner)

    results = await runner.run([
        build_course_certificate_pipeline(),
        build_course_pipeline(
            HierarchyResolver(base_url="http://middleware/", transport=make_failing_transport())
        ),
    ])

    assert opened == ["source", "destination"]
    assert closed == [("destination", True), ("source", True)]
    assert list(results) == ["course_certificate", "course"]
    assert results["course_certificate"]["records_loaded"] == 1
    assert results["course"]["records_loaded"] == 1


@pytest.mark.asyncio
async def test_empty_source_completes(source_engine, destination_engine):
    runner = MigrationRunner(source_engine, destination_engine)
    results = await runner.run([build_daily_attendance_pipeline()])

    assert runner.state == RunState.COMPLETED
    assert results["daily_attendance"] == {
        "status": "success",
        "records_extracted": 0,
        "records_loaded": 0,
        "records_failed": 0,
    }


@pytest.mark.asyncio
async def test_connection_failure_is_fatal_and_releases_source(tmp_path, make_engine):
    """Destination unreachable: run fails, the open source connection is closed"""
    source_connection = MagicMock()
    source_connection.execution_options = AsyncMock(return_value=source_connection)
    source_connection.close = AsyncMock()
    source_engine = MagicMock()
    source_engine.connect = AsyncMock(return_value=source_connection)

    unreachable = make_engine(tmp_path / "missing" / "destination.db")

    runner = MigrationRunner(source_engine, unreachable)
    with pytest.raises(ConnectionSetupError) as exc_info:
        await runner.run([build_daily_attendance_pipeline()])

    assert runner.state == RunState.FAILED
    assert exc_info.value.context["side"] == "destination"
    source_connection.execution_options.assert_awaited_once_with(isolation_level="AUTOCOMMIT")
    source_connection.close.assert_awaited_once()

    await unreachable.dispose()


@pytest.mark.asyncio
async def test_extraction_failure_is_fatal_and_closes_both(tmp_path, destination_engine, make_engine):
    """Missing source table: ExtractionError, both connections released once"""
    empty_source = make_engine(tmp_path / "empty_source.db")

    runner = MigrationRunner(empty_source, destination_engine)
    closed = _spy_on_close(runner)

    with pytest.raises(ExtractionError) as exc_info:
        await runner.run([build_daily_attendance_pipeline()])

    assert runner.state == RunState.FAILED
    assert exc_info.value.context["pipeline"] == "daily_attendance"
    assert closed == [("destination", True), ("source", True)]

    await empty_source.dispose()


@pytest.mark.asyncio
async def test_schema_failure_is_fatal(source_engine):
    destination_connection = MagicMock()
    destination_connection.run_sync = AsyncMock(side_effect=Exception("permission denied for schema public"))
    destination_connection.close = AsyncMock()
    destination_engine = MagicMock()
    destination_engine.connect = AsyncMock(return_value=destination_connection)

    runner = MigrationRunner(source_engine, destination_engine)
    with pytest.raises(SchemaError) as exc_info:
        await runner.run([build_daily_attendance_pipeline()])

    assert runner.state == RunState.FAILED
    assert exc_info.value.context["tables"] == ["DailyAttendanceReport"]
    destination_connection.close.assert_awaited_once()
