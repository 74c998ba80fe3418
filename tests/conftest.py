import os

# settings are read at import time, point them at sqlite before the app loads
os.environ["DB_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from course_admin.database.session import build_engine, create_db_tables, get_session
from course_admin.main import app


def make_row(**overrides):
    row = {
        "dept": "CSE",
        "semester": "3",
        "coursetype": "Core",
        "coursecode": "CS101",
        "coursename": "Data Structures",
        "coursenature": "Theory",
        "facultyid": "F001",
        "regulation": "2021",
        "degree": "B.E",
        "academicyear": "2024-2025",
        "hodapproval": "",
    }
    row.update(overrides)
    return row


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'courses.db'}")
    await create_db_tables(engine)
    yield engine
    await engine.dispose()


BAD_ROW_TRIGGER = """
CREATE TRIGGER reject_bad_course BEFORE INSERT ON courses
WHEN NEW.coursecode = 'BAD1'
BEGIN
    SELECT RAISE(ABORT, 'bad row');
END
"""


@pytest_asyncio.fixture
async def bad_row_trigger(engine):
    """Makes the store refuse any course coded BAD1."""
    async with engine.begin() as conn:
        await conn.execute(text(BAD_ROW_TRIGGER))


@pytest.fixture
def session_maker(engine):
    return sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_maker):
    async def override_get_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
