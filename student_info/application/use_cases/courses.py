"""Каталог курсов и запись на курсы.

Курс активен или нет; править можно в обоих состояниях, записываться только
на активный. Число записанных не больше max_capacity, дубликатов нет.
"""
from typing import Any

import structlog

from ...domain import policy
from ...domain.entities import Identity
from ...domain.errors import Conflict, InvalidState, NotFound
from ..dto import Page, PageRequest

logger = structlog.get_logger()

CODE_TAKEN = "Bu ders kodu zaten kullanılmaktadır"


class CourseCatalog:
    def __init__(self, courses, teachers, students):
        self.courses = courses
        self.teachers = teachers
        self.students = students

    def _own_teacher(self, identity: Identity):
        return self.teachers.get_by_user_id(identity.user_id) if identity.is_teacher else None

    def _own_student(self, identity: Identity):
        return self.students.get_by_user_id(identity.user_id) if identity.is_student else None

    def _get(self, course_id: str):
        course = self.courses.get(course_id)
        if course is None:
            raise NotFound("Ders")
        return course

    def list_filter(self, identity: Identity) -> dict[str, Any]:
        return policy.course_list_filter(identity, self._own_teacher(identity))

    def list(self, criteria: dict[str, Any], page: PageRequest) -> Page:
        rows, total = self.courses.page(criteria, page)
        return Page(items=rows, total=total, request=page)

    def get(self, identity: Identity, course_id: str):
        course = self._get(course_id)
        policy.check_course_view(identity, course, self._own_teacher(identity), self._own_student(identity))
        return course

    def create(self, identity: Identity, fields: dict[str, Any]):
        fields = policy.course_create_fields(identity, fields, self._own_teacher(identity))
        if self.teachers.get(fields["teacher_id"]) is None:
            raise NotFound("Öğretmen")
        if self.courses.code_taken(fields["code"]):
            raise Conflict(CODE_TAKEN)
        course = self.courses.insert(fields, CODE_TAKEN)
        logger.info("course_created", course_id=course.id, code=course.code, teacher_id=course.teacher_id)
        return course

    def update(self, identity: Identity, course_id: str, changes: dict[str, Any]):
        course = self._get(course_id)
        changes = policy.course_update_fields(identity, course, changes, self._own_teacher(identity))
        if "teacher_id" in changes and self.teachers.get(changes["teacher_id"]) is None:
            raise NotFound("Öğretmen")
        if "code" in changes and self.courses.code_taken(changes["code"], exclude_id=course.id):
            raise Conflict(CODE_TAKEN)
        if "max_capacity" in changes and changes["max_capacity"] < len(course.enrolled_students):
            raise InvalidState("Maksimum kapasite kayıtlı öğrenci sayısından az olamaz")
        return self.courses.update(course, changes, CODE_TAKEN)

    def delete(self, identity: Identity, course_id: str) -> None:
        policy.require_admin(identity)
        course = self._get(course_id)
        if course.enrolled_students:
            raise InvalidState("Bu derste kayıtlı öğrenciler bulunmaktadır. Önce tüm öğrencilerin kaydını silin.")
        self.courses.delete(course)
        logger.info("course_deleted", course_id=course_id)

    def enroll(self, identity: Identity, course_id: str, student_id: str | None = None):
        course = self._get(course_id)
        if not course.is_active:
            logger.info("enrollment_rejected", course_id=course_id, reason="inactive")
            raise InvalidState("Pasif derslere kayıt olunamaz")
        target = policy.resolve_enrollment_target(identity, student_id, self._own_student(identity))
        if self.students.get(target) is None:
            raise NotFound("Öğrenci")
        if target in course.enrolled_students:
            raise Conflict("Öğrenci zaten bu derse kayıtlı")
        if len(course.enrolled_students) >= course.max_capacity:
            logger.info("enrollment_rejected", course_id=course_id, reason="capacity")
            raise InvalidState("Ders kapasitesi dolu")
        course = self.courses.add_enrollment(course, target)
        logger.info("student_enrolled", course_id=course_id, student_id=target, by=identity.user_id)
        return course

    def unenroll(self, identity: Identity, course_id: str, student_id: str):
        course = self._get(course_id)
        policy.check_unenroll(identity, student_id, self._own_student(identity))
        if student_id not in course.enrolled_students:
            raise NotFound("Öğrenci", "Öğrenci bu derse kayıtlı değil")
        course = self.courses.remove_enrollment(course, student_id)
        logger.info("student_unenrolled", course_id=course_id, student_id=student_id, by=identity.user_id)
        return course
