import logging
from typing import Iterable

from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from course_admin.database.models import ACTIVE, CourseDetail, CourseRecord, GROUP_KEY_FIELDS

logger = logging.getLogger(__name__)

NATURE_RANKS = {
    "theory & lab": 1,
    "theory with lab": 1,
    "theory": 2,
    "lab": 3,
}
OTHER_RANK = 4

DETAIL_FIELDS = (
    "dept",
    "semester",
    "coursetype",
    "coursecode",
    "coursename",
    "coursenature",
    "regulation",
    "degree",
    "academicyear",
)


def nature_rank(nature: str | None) -> int:
    return NATURE_RANKS.get((nature or "").strip().lower(), OTHER_RANK)


def group_key(course) -> tuple[str, ...]:
    return tuple(getattr(course, f) for f in GROUP_KEY_FIELDS)


def pick_representatives(courses: Iterable[CourseRecord]) -> list[CourseRecord]:
    """
    One course per group: best nature rank first, earliest id on ties.
    Result is ordered by the chosen id.
    """
    best: dict[tuple[str, ...], CourseRecord] = {}
    for course in courses:
        key = group_key(course)
        current = best.get(key)
        if current is None or (nature_rank(course.coursenature), course.id) < (nature_rank(current.coursenature), current.id):
            best[key] = course

    return sorted(best.values(), key=lambda c: c.id)


async def reconcile(session: AsyncSession) -> int:
    """
    Rebuilds course_details from the active courses inside the caller's
    transaction. Returns the number of groups written.
    """
    await session.execute(delete(CourseDetail))

    stmt = await session.execute(
        select(CourseRecord)
        .where(CourseRecord.status == ACTIVE)
        .order_by(CourseRecord.id)
        .execution_options(populate_existing=True)
    )
    representatives = pick_representatives(stmt.scalars().all())

    if representatives:
        await session.execute(
            insert(CourseDetail),
            [
                {"id": course.id, **{f: getattr(course, f) for f in DETAIL_FIELDS}}
                for course in representatives
            ],
        )

    logger.debug("course_details rebuilt with %d groups", len(representatives))
    return len(representatives)
