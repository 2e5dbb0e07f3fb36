from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session
from sqlalchemy.orm.exc import StaleDataError

from ..application.dto import PageRequest
from ..domain.errors import Conflict
from .models import CourseORM, EnrollmentORM, StudentORM, TeacherORM, UserORM, utcnow


class SqlRepository:
    model: type = None

    def __init__(self, db: Session): self.db = db

    def get(self, record_id: str):
        return self.db.get(self.model, record_id)

    def _commit(self, conflict_message: str) -> None:
        # Уникальные индексы и версия курса - последний рубеж при гонках
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise Conflict(conflict_message)
        except StaleDataError:
            self.db.rollback()
            raise Conflict("Kayıt eşzamanlı olarak değiştirildi, lütfen tekrar deneyin")

    def _page(self, query: Query, page: PageRequest) -> tuple[list, int]:
        total = query.order_by(None).count()
        rows = query.offset(page.offset).limit(page.limit).all()
        return rows, total

    def add(self, row, conflict_message: str = "Kayıt zaten mevcut"):
        self.db.add(row)
        self._commit(conflict_message)
        self.db.refresh(row)
        return row

    def insert(self, fields: dict[str, Any], conflict_message: str = "Kayıt zaten mevcut"):
        row = self.model(**{k: v for k, v in fields.items() if v is not None})
        return self.add(row, conflict_message)

    def update(self, row, changes: dict[str, Any], conflict_message: str = "Kayıt zaten mevcut"):
        for field, value in changes.items():
            setattr(row, field, value)
        self._commit(conflict_message)
        self.db.refresh(row)
        return row

    def delete(self, row) -> None:
        self.db.delete(row)
        self._commit("Kayıt silinemedi")


class UserRepository(SqlRepository):
    model = UserORM

    def get_by_email(self, email: str) -> UserORM | None:
        return self.db.query(UserORM).filter(UserORM.email == email.strip().lower()).first()

    def create(self, email: str, password_hash: str, first_name: str, last_name: str, role: str) -> UserORM:
        row = UserORM(
            email=email.strip().lower(),
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            role=role,
            is_active=True,
        )
        return self.add(row, "Bu email adresi zaten kullanılmaktadır")

    def page(self, page: PageRequest) -> tuple[list[UserORM], int]:
        q = self.db.query(UserORM).order_by(UserORM.created_at.desc())
        return self._page(q, page)


class StudentRepository(SqlRepository):
    model = StudentORM

    def get_by_user_id(self, user_id: str) -> StudentORM | None:
        return self.db.query(StudentORM).filter(StudentORM.user_id == user_id).first()

    def number_taken(self, student_number: str, exclude_id: str | None = None) -> bool:
        q = self.db.query(StudentORM.id).filter(StudentORM.student_number == student_number)
        if exclude_id:
            q = q.filter(StudentORM.id != exclude_id)
        return q.first() is not None

    ORDERINGS = {
        "recent": (StudentORM.created_at.desc(),),
        "number": (StudentORM.student_number.asc(),),
    }

    def page(self, criteria: dict[str, Any], page: PageRequest, order: str = "recent") -> tuple[list[StudentORM], int]:
        q = self.db.query(StudentORM).filter_by(**criteria).order_by(*self.ORDERINGS[order])
        return self._page(q, page)


class TeacherRepository(SqlRepository):
    model = TeacherORM

    def get_by_user_id(self, user_id: str) -> TeacherORM | None:
        return self.db.query(TeacherORM).filter(TeacherORM.user_id == user_id).first()

    def number_taken(self, employee_number: str, exclude_id: str | None = None) -> bool:
        q = self.db.query(TeacherORM.id).filter(TeacherORM.employee_number == employee_number)
        if exclude_id:
            q = q.filter(TeacherORM.id != exclude_id)
        return q.first() is not None

    ORDERINGS = {
        "default": (TeacherORM.department.asc(), TeacherORM.title.desc()),
        "department": (TeacherORM.title.desc(), TeacherORM.employee_number.asc()),
        "title": (TeacherORM.department.asc(), TeacherORM.employee_number.asc()),
    }

    def page(self, criteria: dict[str, Any], page: PageRequest, order: str = "default") -> tuple[list[TeacherORM], int]:
        q = self.db.query(TeacherORM).filter_by(**criteria).order_by(*self.ORDERINGS[order])
        return self._page(q, page)


class CourseRepository(SqlRepository):
    model = CourseORM

    def code_taken(self, code: str, exclude_id: str | None = None) -> bool:
        q = self.db.query(CourseORM.id).filter(CourseORM.code == code)
        if exclude_id:
            q = q.filter(CourseORM.id != exclude_id)
        return q.first() is not None

    def count_active_for_teacher(self, teacher_id: str) -> int:
        return (
            self.db.query(func.count(CourseORM.id))
            .filter(CourseORM.teacher_id == teacher_id, CourseORM.is_active.is_(True))
            .scalar()
        )

    def is_student_enrolled_anywhere(self, student_id: str) -> bool:
        return (
            self.db.query(EnrollmentORM.course_id)
            .filter(EnrollmentORM.student_id == student_id)
            .first()
        ) is not None

    def page(self, criteria: dict[str, Any], page: PageRequest) -> tuple[list[CourseORM], int]:
        q = (
            self.db.query(CourseORM)
            .filter_by(**criteria)
            .order_by(CourseORM.department.asc(), CourseORM.academic_year.desc(), CourseORM.semester.asc())
        )
        return self._page(q, page)

    def add_enrollment(self, course: CourseORM, student_id: str) -> CourseORM:
        course.enrollments.append(EnrollmentORM(student_id=student_id))
        # Явное изменение строки курса, чтобы сработала проверка версии
        course.updated_at = utcnow()
        self._commit("Öğrenci zaten bu derse kayıtlı")
        self.db.refresh(course)
        return course

    def remove_enrollment(self, course: CourseORM, student_id: str) -> CourseORM:
        course.enrollments = [e for e in course.enrollments if e.student_id != student_id]
        course.updated_at = utcnow()
        self._commit("Ders kaydı güncellenemedi")
        self.db.refresh(course)
        return course
