import logging
from contextlib import asynccontextmanager
from typing import Any, Literal, Mapping, Sequence

from fastapi import HTTPException, UploadFile
from fastapi.encoders import jsonable_encoder
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from course_admin.api.schema.courses import CourseUpdate, UploadResult
from course_admin.database.models import ACTIVE, INACTIVE, CourseDetail, CourseRecord, GROUP_KEY_FIELDS
from course_admin.services.normalizer import normalize_rows
from course_admin.services.reconciler import group_key, reconcile
from course_admin.services.spreadsheet import read_spreadsheet
from course_admin.services.upsert import UpsertEngine

logger = logging.getLogger(__name__)

# written to every course of the group
SHARED_FIELDS = ("coursecode", "coursename", "dept")
# written to the targeted course only
ROW_FIELDS = (
    "coursenature",
    "facultyid",
    "hodapproval",
    "coursetype",
    "semester",
    "regulation",
    "degree",
    "academicyear",
)


class CourseService:
    def __init__(self, session: AsyncSession, delete_mode: Literal["soft", "hard"] = "soft"):
        self.session = session
        self.delete_mode = delete_mode

    @asynccontextmanager
    async def _transaction(self, failure_message: str):
        """
        Runs the mutation and the course_details rebuild as one unit.
        Client errors are re-raised as they are, anything else becomes a 500.
        """
        try:
            yield
            await reconcile(self.session)
            await self.session.commit()
        except HTTPException:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.exception(failure_message)
            raise HTTPException(status_code=500, detail={"message": failure_message, "error": str(e)})

    # -------- Upload --------
    async def upload_rows(
        self,
        rows: Sequence[Mapping[str, Any]],
        numbers: Sequence[int] | None = None,
    ) -> UploadResult:
        if not rows:
            raise HTTPException(status_code=400, detail="No course rows provided")

        batch = normalize_rows(rows, numbers)
        if not batch.rows:
            # nothing usable, same as the upload dialog refusing the file
            raise HTTPException(
                status_code=400,
                detail={
                    "message": "Upload failed. The file must contain readable 'Course Code' and 'Course Name' columns.",
                    "notProcessed": jsonable_encoder(batch.rejected),
                },
            )

        async with self._transaction("Failed to upload courses"):
            failed = await UpsertEngine(self.session).upsert_rows(batch.rows, batch.numbers)

        not_processed = sorted(batch.rejected + failed, key=lambda d: d.row)
        processed = len(batch.rows) - len(failed)

        if not not_processed:
            return UploadResult(message="Courses uploaded successfully.")

        logger.info("Upload finished: %d processed, %d not processed", processed, len(not_processed))
        return UploadResult(
            message=f"{processed} course row(s) uploaded, {len(not_processed)} row(s) could not be processed.",
            not_processed=not_processed,
        )

    async def upload_file(self, file: UploadFile) -> UploadResult:
        sheet = read_spreadsheet(file)
        return await self.upload_rows(sheet.rows, sheet.numbers)

    # -------- Read --------
    async def get_courses(self) -> Sequence[CourseRecord]:
        stmt = await self.session.execute(
            select(CourseRecord)
            .where(CourseRecord.status == ACTIVE)
            .order_by(CourseRecord.id)
        )
        return stmt.scalars().all()

    async def get_course_details(self) -> Sequence[CourseDetail]:
        stmt = await self.session.execute(
            select(CourseDetail).order_by(
                *(getattr(CourseDetail, f) for f in GROUP_KEY_FIELDS),
                CourseDetail.id,
            )
        )
        return stmt.scalars().all()

    # -------- Update --------
    async def update_course(self, course_id: int, data: CourseUpdate) -> str:
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        async with self._transaction("Failed to update course"):
            course = await self.session.get(CourseRecord, course_id)
            if not course:
                raise HTTPException(detail="No course found with the given ID", status_code=404)

            shared = {f: changes[f] for f in SHARED_FIELDS if f in changes}
            if shared:
                await self.session.execute(
                    update(CourseRecord)
                    .where(
                        *(getattr(CourseRecord, f) == v for f, v in zip(GROUP_KEY_FIELDS, group_key(course)))
                    )
                    .values(**shared)
                )

            for field in ROW_FIELDS:
                if field in changes:
                    setattr(course, field, changes[field])
            await self.session.flush()

        return "Course group and individual course details updated successfully"

    # -------- Delete --------
    async def delete_course(self, course_id: int) -> str:
        async with self._transaction("Failed to delete course"):
            course = await self.session.get(CourseRecord, course_id)
            if not course or course.status != ACTIVE:
                raise HTTPException(detail="No course found with the given ID", status_code=404)

            if self.delete_mode == "hard":
                await self.session.delete(course)
            else:
                course.status = INACTIVE
            await self.session.flush()

        if self.delete_mode == "hard":
            return "Course deleted successfully"
        return "Course soft-deleted successfully"
