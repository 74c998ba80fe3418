import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from course_admin.database.models import ACTIVE, CourseRecord, NATURAL_KEY_FIELDS
from course_admin.services.normalizer import RowDiagnostic

logger = logging.getLogger(__name__)

# the only fields overwritten when the natural key already exists
CONFLICT_UPDATE_FIELDS = ("dept", "coursename", "facultyid", "hodapproval")


class UpsertEngine:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _find_by_natural_key(self, row: dict[str, str]) -> CourseRecord | None:
        stmt = await self.session.execute(
            select(CourseRecord).where(
                *(getattr(CourseRecord, f) == row[f] for f in NATURAL_KEY_FIELDS)
            )
        )
        return stmt.scalar_one_or_none()

    async def _upsert_one(self, row: dict[str, str]) -> CourseRecord:
        course = await self._find_by_natural_key(row)

        if not course:
            course = CourseRecord(**row, status=ACTIVE)
            self.session.add(course)
        else:
            for field in CONFLICT_UPDATE_FIELDS:
                setattr(course, field, row[field])
            course.status = ACTIVE

        await self.session.flush()
        return course

    async def upsert_rows(
        self,
        rows: Sequence[dict[str, str]],
        numbers: Sequence[int] | None = None,
    ) -> list[RowDiagnostic]:
        """
        Inserts or updates every row, each inside its own savepoint.
        A failing row is rolled back alone and reported; the rest of
        the batch keeps going. Never commits.
        """
        if numbers is None:
            numbers = range(1, len(rows) + 1)

        failed: list[RowDiagnostic] = []
        for number, row in zip(numbers, rows):
            try:
                async with self.session.begin_nested():
                    await self._upsert_one(row)
            except (SQLAlchemyError, ValueError) as e:
                logger.warning("Error processing course %s (row %s): %s", row.get("coursecode"), number, e)
                failed.append(RowDiagnostic(row=number, data=dict(row), error=str(e)))

        return failed
