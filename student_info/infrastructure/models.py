from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, DateTime, Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from ..domain.entities import AttendanceStatus, ExamType


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def enum_column(enum_cls) -> Enum:
    # храним значения ("midterm"), а не имена членов
    return Enum(enum_cls, native_enum=False, length=16, validate_strings=True,
                values_callable=lambda e: [m.value for m in e])


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


class UserORM(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"UserORM(id={self.id!r}, email={self.email!r}, role={self.role!r})"


# Профили ссылаются на пользователя без внешнего ключа: удаление пользователя
# не каскадируется и не блокируется на уровне БД.
class StudentORM(TimestampMixin, Base):
    __tablename__ = "students"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(32), unique=True, index=True, nullable=False)
    student_number: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    class_level: Mapped[str] = mapped_column(String(64), nullable=False)
    department: Mapped[str] = mapped_column(String(128), index=True, nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    address: Mapped[str | None] = mapped_column(String(200), nullable=True)
    enrollment_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    user: Mapped[UserORM | None] = relationship(
        "UserORM",
        primaryjoin="foreign(StudentORM.user_id) == UserORM.id",
        viewonly=True,
        lazy="joined",
    )

    def __repr__(self) -> str:
        return f"StudentORM(id={self.id!r}, student_number={self.student_number!r})"


class TeacherORM(TimestampMixin, Base):
    __tablename__ = "teachers"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(32), unique=True, index=True, nullable=False)
    employee_number: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    department: Mapped[str] = mapped_column(String(128), index=True, nullable=False)
    title: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    specialization: Mapped[str] = mapped_column(String(128), nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    office_location: Mapped[str | None] = mapped_column(String(128), nullable=True)
    hire_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    user: Mapped[UserORM | None] = relationship(
        "UserORM",
        primaryjoin="foreign(TeacherORM.user_id) == UserORM.id",
        viewonly=True,
        lazy="joined",
    )

    def __repr__(self) -> str:
        return f"TeacherORM(id={self.id!r}, employee_number={self.employee_number!r})"


class CourseORM(TimestampMixin, Base):
    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    code: Mapped[str] = mapped_column(String(16), unique=True, index=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    credits: Mapped[int] = mapped_column(Integer, nullable=False)
    teacher_id: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    department: Mapped[str] = mapped_column(String(128), index=True, nullable=False)
    semester: Mapped[str] = mapped_column(String(16), nullable=False)
    academic_year: Mapped[str] = mapped_column(String(9), nullable=False)
    schedule: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    max_capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # Оптимистичная блокировка: каждая запись на курс поднимает версию
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    teacher: Mapped[TeacherORM | None] = relationship(
        "TeacherORM",
        primaryjoin="foreign(CourseORM.teacher_id) == TeacherORM.id",
        viewonly=True,
        lazy="joined",
    )
    enrollments: Mapped[list[EnrollmentORM]] = relationship(
        "EnrollmentORM",
        back_populates="course",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="EnrollmentORM.enrolled_at",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def enrolled_students(self) -> list[str]:
        return [e.student_id for e in self.enrollments]

    def __repr__(self) -> str:
        return f"CourseORM(id={self.id!r}, code={self.code!r})"


class EnrollmentORM(Base):
    __tablename__ = "course_enrollments"

    course_id: Mapped[str] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True
    )
    student_id: Mapped[str] = mapped_column(String(32), primary_key=True, index=True)
    enrolled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    course: Mapped[CourseORM] = relationship("CourseORM", back_populates="enrollments")


class GradeORM(TimestampMixin, Base):
    __tablename__ = "grades"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    student_id: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    course_id: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    exam_type: Mapped[ExamType] = mapped_column(enum_column(ExamType), nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    max_score: Mapped[float] = mapped_column(Float, nullable=False)
    exam_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class AttendanceORM(TimestampMixin, Base):
    __tablename__ = "attendance"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    student_id: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    course_id: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[AttendanceStatus] = mapped_column(enum_column(AttendanceStatus), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)


__all__ = [
    "Base",
    "UserORM",
    "StudentORM",
    "TeacherORM",
    "CourseORM",
    "EnrollmentORM",
    "GradeORM",
    "AttendanceORM",
]
