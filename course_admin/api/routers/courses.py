from io import BytesIO
from typing import Any, List

from fastapi import APIRouter, Body, UploadFile, File
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, StreamingResponse

from course_admin.api.dependencies import course_session
from course_admin.api.schema.courses import CourseDetailOUT, CourseOUT, CourseUpdate, Message, UploadResult
from course_admin.services.export import XLSX_MEDIA_TYPE, build_not_processed_workbook, build_sample_workbook
from course_admin.services.normalizer import RowDiagnostic

router = APIRouter(
    tags=["courses"],
    prefix="/courses"
)


def _upload_response(result:UploadResult):
    if not result.not_processed:
        return {"message":result.message}
    # 207 tells the client some rows need fixing
    return JSONResponse(
        status_code=207,
        content=jsonable_encoder(result.model_dump(by_alias=True)),
    )


def _xlsx_response(xlsx_bytes:bytes,filename:str):
    return StreamingResponse(
        BytesIO(xlsx_bytes),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.post("/upload",response_model=Message,responses={207:{"model":UploadResult}})
async def upload_courses(session:course_session,rows:List[dict[str,Any]] = Body(...)):
    """
    Rows already parsed from the spreadsheet by the client.
    Headers may use any spelling ("Course Code", "coursecode", ...).
    """
    return _upload_response(await session.upload_rows(rows))


@router.post("/upload-file",response_model=Message,responses={207:{"model":UploadResult}})
async def upload_courses_file(session:course_session,file:UploadFile = File(...)):
    return _upload_response(await session.upload_file(file))


@router.get("",response_model=List[CourseOUT])
async def get_courses(session:course_session):
    return await session.get_courses()


@router.get("/details",response_model=List[CourseDetailOUT])
async def get_course_details(session:course_session):
    return await session.get_course_details()


@router.put("/{course_id}",response_model=Message)
async def update_course(course_id:int,data:CourseUpdate,session:course_session):
    return {"message":await session.update_course(course_id,data)}


@router.delete("/{course_id}",response_model=Message)
async def delete_course(course_id:int,session:course_session):
    return {"message":await session.delete_course(course_id)}


@router.post("/not-processed/excel")
async def download_not_processed(rows:List[RowDiagnostic]):
    return _xlsx_response(*build_not_processed_workbook(rows))


@router.get("/sample-file")
async def download_sample_file():
    return _xlsx_response(*build_sample_workbook())
