"""
Pytest configuration and fixtures
"""

import pytest
import pytest_asyncio
import httpx
import uuid
from datetime import datetime
from sqlalchemy import Table, insert, select
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool
from typing import Any, AsyncGenerator, Dict, List
from models.base import source_metadata, LocationLevel
from models.source import location_tables

# Field ids used by the attribute-store fixtures
TEST_LOCATION_FIELD_IDS = {
    "state": "11111111-1111-1111-1111-111111111111",
    "district": "22222222-2222-2222-2222-222222222222",
    "block": "33333333-3333-3333-3333-333333333333",
    "village": "44444444-4444-4444-4444-444444444444",
}


def sqlite_engine(path) -> AsyncEngine:
    """Create an engine on a throwaway SQLite file"""
    return create_async_engine(
        f"sqlite+aiosqlite:///{path}",
        echo=False,
        poolclass=NullPool,
    )


@pytest_asyncio.fixture(scope="function")
async def source_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Source database with the legacy schema"""
    engine = sqlite_engine(tmp_path / "source.db")

    async with engine.begin() as conn:
        await conn.run_sync(source_metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def destination_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Empty destination database; tables are created by the runner"""
    engine = sqlite_engine(tmp_path / "destination.db")
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def source_conn(source_engine) -> AsyncGenerator[AsyncConnection, None]:
    """Source connection configured the way the runner opens it"""
    async with source_engine.connect() as conn:
        conn = await conn.execution_options(isolation_level="AUTOCOMMIT")
        yield conn


@pytest.fixture
def seed():
    """Insert rows into a table of the given engine"""
    async def _seed(engine: AsyncEngine, table: Table, rows: List[Dict[str, Any]]):
        async with engine.begin() as conn:
            for row in rows:
                await conn.execute(insert(table).values({table.c[k]: v for k, v in row.items()}))
    return _seed


@pytest.fixture
def fetch_rows():
    """Read every row of a table as plain dicts keyed by column key"""
    async def _fetch(engine: AsyncEngine, table: Table) -> List[Dict[str, Any]]:
        async with engine.connect() as conn:
            result = await conn.execute(select(*[c.label(c.key) for c in table.c]))
            return [dict(row) for row in result.mappings().all()]
    return _fetch


@pytest.fixture
def make_engine():
    """Factory for extra SQLite engines (e.g. an empty or unreachable database)"""
    return sqlite_engine


@pytest.fixture
def location_field_ids() -> Dict[str, str]:
    return dict(TEST_LOCATION_FIELD_IDS)


@pytest_asyncio.fixture
async def seeded_locations(source_engine, seed):
    """One row per location level: id 42 → '<Level> 42'"""
    for level in LocationLevel:
        await seed(source_engine, location_tables[level], [
            {"id": 42, "name": f"{level.value.title()} 42"},
        ])


@pytest.fixture
def user_row() -> Dict[str, Any]:
    """Users row with an empty middle name"""
    return {
        "user_id": uuid.UUID("aaaaaaaa-0000-0000-0000-000000000001"),
        "username": "asha.rao",
        "first_name": "Asha",
        "middle_name": "",
        "last_name": "Rao",
        "email": "asha@example.org",
        "mobile": "",
        "dob": "1990-04-01",
        "gender": "female",
        "status": "active",
        "created_at": datetime(2024, 1, 15, 10, 0, 0),
        "updated_at": datetime(2024, 1, 16, 10, 0, 0),
        "created_by": None,
        "updated_by": None,
    }


@pytest.fixture
def hierarchy_payload() -> Dict[str, Any]:
    """Course hierarchy API response"""
    return {
        "id": "api.course.hierarchy",
        "result": {
            "content": {
                "identifier": "do_course_1",
                "name": "Foundations of Numeracy",
                "channel": "pratham",
                "language": ["English", "Hindi"],
                "program": ["Second Chance"],
                "primaryUser": ["Learner"],
                "targetAgeGroup": ["14-18"],
                "keywords": None,
                "children": [{"identifier": "do_unit_1"}],
            }
        }
    }


@pytest.fixture
def search_payload() -> Dict[str, Any]:
    """Content search API response"""
    return {
        "id": "api.search",
        "result": {
            "count": 1,
            "QuestionSet": [
                {
                    "identifier": "do_qs_1",
                    "name": "Unit Test 1",
                    "description": "",
                    "subject": ["Mathematics", "Science"],
                    "domain": "Learning for School",
                    "subDomain": ["Numeracy"],
                    "channel": "pratham",
                    "assessmentType": "post",
                    "program": [],
                    "targetAgeGroup": ["14-18"],
                    "language": ["English"],
                    "status": "Live",
                    "framework": "scp-framework",
                }
            ]
        }
    }


def json_transport(payload: Dict[str, Any], status_code: int = 200) -> httpx.MockTransport:
    """Transport answering every request with the same JSON payload"""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=payload)
    return httpx.MockTransport(handler)


def failing_transport() -> httpx.MockTransport:
    """Transport raising a network error for every request"""
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)
    return httpx.MockTransport(handler)


@pytest.fixture
def make_json_transport():
    return json_transport


@pytest.fixture
def make_failing_transport():
    return failing_transport
