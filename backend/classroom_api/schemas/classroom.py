"""Pydantic schemas for classrooms, their students and attendance records.

Wire format is camelCase (``startYear``, ``admNo``, ``attendanceRecords``);
attributes stay snake_case so the same models validate ORM rows.
"""

from datetime import datetime
from typing import Optional, List

from pydantic import AnyUrl, BaseModel, Field, ConfigDict, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RequestModel(CamelModel):
    # Unknown keys, createdBy included, are rejected at the boundary
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid", str_strip_whitespace=True)


class ResponseModel(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


_url_adapter = TypeAdapter(AnyUrl)


def _reject_null(value):
    # Omit a field to leave it unchanged; an explicit null is not a value for it
    if value is None:
        raise ValueError("must not be null")
    return value


def _check_url(value: Optional[str]) -> Optional[str]:
    if value is not None:
        _url_adapter.validate_python(value)
    return value


# ─── Students ────────────────────────────────────────────────────────────────

class StudentCreate(RequestModel):
    name: str = Field(..., min_length=1, max_length=120)
    adm_no: str = Field(..., min_length=1, max_length=50)
    image_url: str = Field(..., min_length=1, max_length=500)


class StudentUpdate(RequestModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    adm_no: Optional[str] = Field(None, min_length=1, max_length=50)
    image_url: Optional[str] = Field(None, min_length=1, max_length=500)

    check_not_null = field_validator("name", "adm_no", "image_url")(_reject_null)


class StudentResponse(ResponseModel):
    id: str
    name: str
    adm_no: str
    image_url: str


# ─── Attendance ──────────────────────────────────────────────────────────────

class AttendanceRecordCreate(RequestModel):
    day: datetime
    presentees: List[str] = Field(default_factory=list, description="Ids of the students present that day")

    @field_validator("presentees")
    @classmethod
    def distinct_presentees(cls, value: List[str]) -> List[str]:
        return list(dict.fromkeys(value))


class AttendanceRecordResponse(ResponseModel):
    id: str
    day: datetime
    presentees: List[str] = Field(default_factory=list)


# ─── Classrooms ──────────────────────────────────────────────────────────────

class ClassroomCreate(RequestModel):
    name: str = Field(..., min_length=1, max_length=120)
    image_url: Optional[str] = Field(None, max_length=500)
    start_year: int = Field(..., ge=1900, le=3000)
    end_year: int = Field(..., ge=1900, le=3000)
    students: Optional[List[StudentCreate]] = None

    check_image_url = field_validator("image_url")(_check_url)


class ClassroomUpdate(RequestModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    image_url: Optional[str] = Field(None, max_length=500)
    start_year: Optional[int] = Field(None, ge=1900, le=3000)
    end_year: Optional[int] = Field(None, ge=1900, le=3000)
    students: Optional[List[StudentCreate]] = None

    check_not_null = field_validator("name", "start_year", "end_year", "students")(_reject_null)
    check_image_url = field_validator("image_url")(_check_url)


class ClassroomSummaryResponse(ResponseModel):
    id: str
    name: Optional[str] = None
    start_year: int
    end_year: int
    image_url: Optional[str] = None


class ClassroomResponse(ClassroomSummaryResponse):
    students: List[StudentResponse] = Field(default_factory=list)
    attendance_records: List[AttendanceRecordResponse] = Field(default_factory=list)
    created_by: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
