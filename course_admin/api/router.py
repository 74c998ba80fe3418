from fastapi import APIRouter
from course_admin.api.routers import courses

master_router = APIRouter(prefix="/api")

master_router.include_router(courses.router)
