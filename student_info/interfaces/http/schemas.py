from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from ...domain.entities import Role, Semester, TeacherTitle, Weekday

T = TypeVar("T")

PHONE_PATTERN = r"^[0-9+\-\s()]+$"
TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"
COURSE_CODE_PATTERN = r"^[A-Z]{2,4}[0-9]{3}$"
ACADEMIC_YEAR_PATTERN = r"^\d{4}-\d{4}$"


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )


# --- envelope

class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class Envelope(CamelModel, Generic[T]):
    success: bool = True
    message: str = "İşlem başarılı"
    data: T | None = None
    error: str | None = None
    pagination: Pagination | None = None


# --- auth / users

class RegisterReq(CamelModel):
    email: EmailStr
    password: str = Field(min_length=6)
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    role: Role


class LoginReq(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserUpdate(CamelModel):
    first_name: str | None = Field(default=None, min_length=1, max_length=50)
    last_name: str | None = Field(default=None, min_length=1, max_length=50)
    is_active: bool | None = None


class UserSummary(CamelModel):
    id: str
    email: str
    first_name: str
    last_name: str
    is_active: bool


class UserOut(UserSummary):
    role: Role
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AuthData(CamelModel):
    user: UserOut
    token: str


# --- students

class StudentCreate(CamelModel):
    user_id: str = Field(min_length=1)
    student_number: str = Field(min_length=1)
    class_level: str = Field(min_length=1)
    department: str = Field(min_length=1)
    phone_number: str | None = Field(default=None, pattern=PHONE_PATTERN)
    address: str | None = Field(default=None, max_length=200)
    enrollment_date: datetime | None = None


class StudentUpdate(CamelModel):
    student_number: str | None = Field(default=None, min_length=1)
    class_level: str | None = Field(default=None, min_length=1)
    department: str | None = Field(default=None, min_length=1)
    phone_number: str | None = Field(default=None, pattern=PHONE_PATTERN)
    address: str | None = Field(default=None, max_length=200)
    enrollment_date: datetime | None = None


class StudentOut(CamelModel):
    id: str
    user_id: str
    user: UserSummary | None = None
    student_number: str
    class_level: str
    department: str
    phone_number: str | None = None
    address: str | None = None
    enrollment_date: datetime
    created_at: datetime | None = None
    updated_at: datetime | None = None


# --- teachers

class TeacherCreate(CamelModel):
    user_id: str = Field(min_length=1)
    employee_number: str = Field(min_length=1)
    department: str = Field(min_length=1)
    title: TeacherTitle
    specialization: str = Field(min_length=1)
    phone_number: str | None = Field(default=None, pattern=PHONE_PATTERN)
    office_location: str | None = None
    hire_date: datetime | None = None


class TeacherUpdate(CamelModel):
    employee_number: str | None = Field(default=None, min_length=1)
    department: str | None = Field(default=None, min_length=1)
    title: TeacherTitle | None = None
    specialization: str | None = Field(default=None, min_length=1)
    phone_number: str | None = Field(default=None, pattern=PHONE_PATTERN)
    office_location: str | None = None
    hire_date: datetime | None = None


class TeacherOut(CamelModel):
    id: str
    user_id: str
    user: UserSummary | None = None
    employee_number: str | None = None
    department: str
    title: str
    specialization: str
    phone_number: str | None = None
    office_location: str | None = None
    hire_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TeacherSummary(CamelModel):
    id: str
    department: str
    title: str
    specialization: str
    user: UserSummary | None = None


# --- courses

class ScheduleSlot(CamelModel):
    day: Weekday
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)
    classroom: str = Field(min_length=1)


class CourseCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    code: str = Field(pattern=COURSE_CODE_PATTERN)
    description: str = Field(default="", max_length=500)
    credits: int = Field(ge=1, le=8)
    teacher_id: str | None = Field(default=None, min_length=1)
    department: str = Field(min_length=1)
    semester: Semester
    academic_year: str = Field(pattern=ACADEMIC_YEAR_PATTERN)
    schedule: list[ScheduleSlot] = Field(default_factory=list)
    max_capacity: int = Field(ge=1, le=200)
    is_active: bool = True


class CourseUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    code: str | None = Field(default=None, pattern=COURSE_CODE_PATTERN)
    description: str | None = Field(default=None, max_length=500)
    credits: int | None = Field(default=None, ge=1, le=8)
    teacher_id: str | None = Field(default=None, min_length=1)
    department: str | None = Field(default=None, min_length=1)
    semester: Semester | None = None
    academic_year: str | None = Field(default=None, pattern=ACADEMIC_YEAR_PATTERN)
    schedule: list[ScheduleSlot] | None = None
    max_capacity: int | None = Field(default=None, ge=1, le=200)
    is_active: bool | None = None


class CourseOut(CamelModel):
    id: str
    name: str
    code: str
    description: str = ""
    credits: int
    teacher_id: str
    teacher: TeacherSummary | None = None
    department: str
    semester: Semester
    academic_year: str
    schedule: list[ScheduleSlot] = Field(default_factory=list)
    enrolled_students: list[str] = Field(default_factory=list)
    max_capacity: int
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class EnrollReq(CamelModel):
    student_id: str | None = Field(default=None, min_length=1)
