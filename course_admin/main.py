import logging
import time

from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rich import panel,print
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from course_admin.config import app_settings
from course_admin.core.log import setup_logging
from course_admin.database.session import create_db_tables
from course_admin.api.router import master_router

setup_logging(app_settings.LOG_LEVEL)
logger = logging.getLogger("course_admin.access")


async def life_cycle(app:FastAPI):
    await create_db_tables()
    print(panel.Panel("DB Tables created",border_style="green"))
    yield
    print(panel.Panel("BYE",border_style="red"))

app = FastAPI(
    title="Course Catalog Admin",
    lifespan=life_cycle,
)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        client = request.client.host if request.client else "-"
        logger.info(
            '%s "%s %s" %d %.1fms',
            client,request.method,request.url.path,response.status_code,elapsed_ms,
        )
        return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"message":"Invalid data provided","error":jsonable_encoder(exc.errors())},
    )


app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(master_router)
