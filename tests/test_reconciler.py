import pytest
from sqlalchemy import select

from course_admin.database.models import CourseDetail, CourseRecord
from course_admin.services.reconciler import nature_rank, pick_representatives, reconcile

from conftest import make_row


def _course(id, **overrides):
    return CourseRecord(id=id, status=1, **make_row(**overrides))


class TestNatureRank:
    @pytest.mark.parametrize("nature", ["Theory & Lab", "theory with lab", " THEORY & LAB "])
    def test_theory_and_lab_first(self, nature):
        assert nature_rank(nature) == 1

    def test_order(self):
        assert nature_rank("Theory") < nature_rank("Lab") < nature_rank("Project")

    def test_unknown_and_empty(self):
        assert nature_rank("Seminar") == 4
        assert nature_rank("") == 4
        assert nature_rank(None) == 4


class TestPickRepresentatives:
    def test_theory_beats_lab(self):
        lab = _course(1, coursenature="Lab")
        theory = _course(2, coursenature="Theory")
        assert pick_representatives([lab, theory]) == [theory]

    def test_theory_and_lab_beats_theory(self):
        theory = _course(1, coursenature="Theory")
        both = _course(5, coursenature="Theory with Lab")
        assert pick_representatives([theory, both]) == [both]

    def test_tie_breaks_on_lowest_id(self):
        later = _course(7, coursenature="Lab", coursetype="Elective")
        earlier = _course(3, coursenature="Lab")
        assert pick_representatives([later, earlier]) == [earlier]
        assert pick_representatives([earlier, later]) == [earlier]

    def test_one_per_group(self):
        courses = [
            _course(1, coursenature="Lab"),
            _course(2, coursenature="Theory"),
            _course(3, coursecode="CS102", coursenature="Lab"),
            _course(4, semester="4", coursenature="Other"),
        ]
        picked = pick_representatives(courses)
        assert [c.id for c in picked] == [2, 3, 4]

    def test_empty(self):
        assert pick_representatives([]) == []


class TestReconcile:
    async def test_rebuilds_from_active_courses(self, session):
        session.add_all([
            CourseRecord(**make_row(coursenature="Lab")),
            CourseRecord(**make_row(coursenature="Theory")),
            CourseRecord(**make_row(coursecode="CS200", coursenature="Theory"), status=0),
        ])
        await session.flush()

        assert await reconcile(session) == 1
        await session.commit()

        details = (await session.execute(select(CourseDetail))).scalars().all()
        assert len(details) == 1
        assert details[0].coursecode == "CS101"
        assert details[0].coursenature == "Theory"
        assert details[0].id == 2

    async def test_repeated_runs_are_stable(self, session):
        session.add_all([
            CourseRecord(**make_row(coursenature="Lab", coursetype="Core")),
            CourseRecord(**make_row(coursenature="Lab", coursetype="Elective")),
        ])
        await session.flush()

        await reconcile(session)
        first = (await session.execute(select(CourseDetail.id))).scalars().all()
        await reconcile(session)
        second = (await session.execute(select(CourseDetail.id))).scalars().all()

        assert first == second == [1]

    async def test_reselects_after_nature_change(self, session):
        lab = CourseRecord(**make_row(coursenature="Lab"))
        theory = CourseRecord(**make_row(coursenature="Theory"))
        session.add_all([lab, theory])
        await session.flush()
        await reconcile(session)

        lab.coursenature = "Theory & Lab"
        await session.flush()
        await reconcile(session)

        detail = (await session.execute(select(CourseDetail))).scalar_one()
        assert detail.id == lab.id
        assert detail.coursenature == "Theory & Lab"

    async def test_no_active_courses_empties_table(self, session):
        session.add(CourseRecord(**make_row()))
        await session.flush()
        await reconcile(session)

        course = (await session.execute(select(CourseRecord))).scalar_one()
        course.status = 0
        await session.flush()

        assert await reconcile(session) == 0
        assert (await session.execute(select(CourseDetail))).scalars().all() == []
