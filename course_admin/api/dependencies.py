from fastapi import Depends
from typing import Annotated

from course_admin.config import app_settings
from course_admin.database.session import get_session,AsyncSession
from course_admin.services.courses import CourseService


db_session = Annotated[AsyncSession,Depends(get_session)]


async def get_course_session(session:db_session):
    return CourseService(session,delete_mode=app_settings.DELETE_MODE)
course_session = Annotated[CourseService,Depends(get_course_session)]
