from pydantic import BaseModel, ConfigDict, Field, field_validator

from course_admin.services.normalizer import RowDiagnostic, to_text


class CourseBase(BaseModel):
    dept:str = ""
    semester:str = ""
    coursetype:str = ""
    coursecode:str = ""
    coursename:str = ""
    coursenature:str = ""
    facultyid:str = ""
    regulation:str = ""
    degree:str = ""
    academicyear:str = ""
    hodapproval:str = ""


class CourseOUT(CourseBase):
    model_config = ConfigDict(from_attributes=True)
    id:int
    status:int


class CourseDetailOUT(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id:int
    dept:str
    semester:str
    coursetype:str
    coursecode:str
    coursename:str
    coursenature:str
    regulation:str
    degree:str
    academicyear:str


class CourseUpdate(BaseModel):
    """Only the fields present in the request body are applied."""
    model_config = ConfigDict(extra="ignore")

    # shared by every course of the group
    coursecode:str|None = None
    coursename:str|None = None
    dept:str|None = None

    # this course only
    coursenature:str|None = None
    facultyid:str|None = None
    hodapproval:str|None = None
    coursetype:str|None = None
    semester:str|None = None
    regulation:str|None = None
    degree:str|None = None
    academicyear:str|None = None

    @field_validator("*",mode="before")
    @classmethod
    def number_to_text(cls,value):
        # spreadsheet-edited cells can arrive as numbers
        if isinstance(value,(int,float)) and not isinstance(value,bool):
            return to_text(value)
        return value


class Message(BaseModel):
    message:str


class UploadResult(BaseModel):
    message:str
    not_processed:list[RowDiagnostic] = Field(default_factory=list,serialization_alias="notProcessed")
