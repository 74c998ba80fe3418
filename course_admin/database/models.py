from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint


# CourseRecord.status values
ACTIVE = 1
INACTIVE = 0

GROUP_KEY_FIELDS = ("coursecode", "semester", "regulation", "degree", "academicyear")
NATURAL_KEY_FIELDS = (
    "coursecode",
    "semester",
    "coursetype",
    "coursenature",
    "regulation",
    "degree",
    "academicyear",
)


class CourseRecord(SQLModel, table=True):
    __tablename__ = "courses"
    __table_args__ = (
        UniqueConstraint(*NATURAL_KEY_FIELDS, name="uq_courses_natural_key"),
    )

    id: int | None = Field(default=None, primary_key=True)

    dept: str = Field(default="")
    semester: str = Field(default="")
    coursetype: str = Field(default="")
    coursecode: str = Field(default="", index=True)
    coursename: str = Field(default="")
    coursenature: str = Field(default="")
    facultyid: str = Field(default="")
    regulation: str = Field(default="")
    degree: str = Field(default="")
    academicyear: str = Field(default="")
    hodapproval: str = Field(default="")

    status: int = Field(default=ACTIVE, index=True)


class CourseDetail(SQLModel, table=True):
    """One row per course group, rebuilt from the active CourseRecord rows."""

    __tablename__ = "course_details"
    __table_args__ = (
        UniqueConstraint(*GROUP_KEY_FIELDS, name="uq_course_details_group"),
    )

    # id of the representative CourseRecord
    id: int = Field(primary_key=True, sa_column_kwargs={"autoincrement": False})

    dept: str = Field(default="")
    semester: str = Field(default="")
    coursetype: str = Field(default="")
    coursecode: str = Field(default="")
    coursename: str = Field(default="")
    coursenature: str = Field(default="")
    regulation: str = Field(default="")
    degree: str = Field(default="")
    academicyear: str = Field(default="")
