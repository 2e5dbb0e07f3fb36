from fastapi import Depends, Query
from sqlalchemy.orm import Session

from ...application.dto import DEFAULT_PAGE_LIMIT, PageRequest
from ...application.use_cases.courses import CourseCatalog
from ...application.use_cases.profiles import StudentRegistry, TeacherRegistry
from ...application.use_cases.users import UserAdmin
from ...infrastructure.db import get_db
from ...infrastructure.repositories import (
    CourseRepository,
    StudentRepository,
    TeacherRepository,
    UserRepository,
)
from ...infrastructure.security import PasswordHasher


def page_params(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_LIMIT),
) -> PageRequest:
    # limit не валидируем, а прижимаем к [1, 50]
    return PageRequest(page=page, limit=limit)


def get_user_admin(db: Session = Depends(get_db)) -> UserAdmin:
    return UserAdmin(UserRepository(db), PasswordHasher())


def get_student_registry(db: Session = Depends(get_db)) -> StudentRegistry:
    return StudentRegistry(StudentRepository(db), UserRepository(db), TeacherRepository(db), CourseRepository(db))


def get_teacher_registry(db: Session = Depends(get_db)) -> TeacherRegistry:
    return TeacherRegistry(TeacherRepository(db), UserRepository(db), CourseRepository(db))


def get_course_catalog(db: Session = Depends(get_db)) -> CourseCatalog:
    return CourseCatalog(CourseRepository(db), TeacherRepository(db), StudentRepository(db))
