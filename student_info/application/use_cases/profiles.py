from typing import Any

import structlog

from ...domain import policy
from ...domain.entities import Identity, Role
from ...domain.errors import Conflict, InvalidState, NotFound
from ..dto import Page, PageRequest

logger = structlog.get_logger()

STUDENT_NUMBER_TAKEN = "Bu öğrenci numarası zaten kullanılmaktadır"
EMPLOYEE_NUMBER_TAKEN = "Bu personel numarası zaten kullanılmaktadır"


def _require_role_user(users, user_id: str, role: Role, message: str):
    user = users.get(user_id)
    if user is None:
        raise NotFound("Kullanıcı")
    if user.role != role.value:
        raise InvalidState(message)
    return user


class StudentRegistry:
    def __init__(self, students, users, teachers, courses):
        self.students = students
        self.users = users
        self.teachers = teachers
        self.courses = courses

    def _own_teacher(self, identity: Identity):
        return self.teachers.get_by_user_id(identity.user_id) if identity.is_teacher else None

    def _get(self, student_id: str):
        student = self.students.get(student_id)
        if student is None:
            raise NotFound("Öğrenci")
        return student

    def list(self, identity: Identity, page: PageRequest) -> Page:
        criteria = policy.student_list_filter(identity, self._own_teacher(identity))
        rows, total = self.students.page(criteria, page)
        return Page(items=rows, total=total, request=page)

    def list_by_department(self, identity: Identity, department: str, page: PageRequest) -> Page:
        policy.check_student_department_access(identity, department, self._own_teacher(identity))
        rows, total = self.students.page({"department": department}, page, order="number")
        return Page(items=rows, total=total, request=page)

    def get(self, identity: Identity, student_id: str):
        student = self._get(student_id)
        policy.check_student_view(identity, student, self._own_teacher(identity))
        return student

    def create(self, identity: Identity, fields: dict[str, Any]):
        policy.require_admin(identity)
        _require_role_user(self.users, fields["user_id"], Role.STUDENT, "Kullanıcı öğrenci rolünde değil")
        if self.students.get_by_user_id(fields["user_id"]):
            raise Conflict("Bu kullanıcı için zaten öğrenci kaydı mevcut")
        if self.students.number_taken(fields["student_number"]):
            raise Conflict(STUDENT_NUMBER_TAKEN)
        student = self.students.insert(fields, STUDENT_NUMBER_TAKEN)
        logger.info("profile_created", kind="student", student_id=student.id, user_id=student.user_id)
        return student

    def update(self, identity: Identity, student_id: str, changes: dict[str, Any]):
        student = self._get(student_id)
        policy.check_student_update(identity, student)
        if "student_number" in changes and self.students.number_taken(changes["student_number"], exclude_id=student.id):
            raise Conflict(STUDENT_NUMBER_TAKEN)
        return self.students.update(student, changes, STUDENT_NUMBER_TAKEN)

    def delete(self, identity: Identity, student_id: str) -> None:
        policy.require_admin(identity)
        student = self._get(student_id)
        if self.courses.is_student_enrolled_anywhere(student.id):
            raise InvalidState("Öğrencinin kayıtlı olduğu dersler bulunmaktadır. Önce ders kayıtlarını silin.")
        self.students.delete(student)
        logger.info("profile_deleted", kind="student", student_id=student_id)


class TeacherRegistry:
    def __init__(self, teachers, users, courses):
        self.teachers = teachers
        self.users = users
        self.courses = courses

    def _get(self, teacher_id: str):
        teacher = self.teachers.get(teacher_id)
        if teacher is None:
            raise NotFound("Öğretmen")
        return teacher

    def list(self, identity: Identity, page: PageRequest) -> Page:
        rows, total = self.teachers.page(policy.teacher_list_filter(identity), page)
        return Page(items=rows, total=total, request=page)

    def list_by_department(self, identity: Identity, department: str, page: PageRequest) -> Page:
        rows, total = self.teachers.page({"department": department}, page, order="department")
        return Page(items=rows, total=total, request=page)

    def list_by_title(self, identity: Identity, title: str, page: PageRequest) -> Page:
        rows, total = self.teachers.page({"title": title}, page, order="title")
        return Page(items=rows, total=total, request=page)

    def get(self, identity: Identity, teacher_id: str):
        return self._get(teacher_id)

    def create(self, identity: Identity, fields: dict[str, Any]):
        policy.require_admin(identity)
        _require_role_user(self.users, fields["user_id"], Role.TEACHER, "Kullanıcı öğretmen rolünde değil")
        if self.teachers.get_by_user_id(fields["user_id"]):
            raise Conflict("Bu kullanıcı için zaten öğretmen kaydı mevcut")
        if self.teachers.number_taken(fields["employee_number"]):
            raise Conflict(EMPLOYEE_NUMBER_TAKEN)
        teacher = self.teachers.insert(fields, EMPLOYEE_NUMBER_TAKEN)
        logger.info("profile_created", kind="teacher", teacher_id=teacher.id, user_id=teacher.user_id)
        return teacher

    def update(self, identity: Identity, teacher_id: str, changes: dict[str, Any]):
        teacher = self._get(teacher_id)
        changes = policy.teacher_update_fields(identity, teacher, changes)
        if "employee_number" in changes and self.teachers.number_taken(changes["employee_number"], exclude_id=teacher.id):
            raise Conflict(EMPLOYEE_NUMBER_TAKEN)
        return self.teachers.update(teacher, changes, EMPLOYEE_NUMBER_TAKEN)

    def delete(self, identity: Identity, teacher_id: str) -> None:
        policy.require_admin(identity)
        teacher = self._get(teacher_id)
        if self.courses.count_active_for_teacher(teacher.id) > 0:
            raise InvalidState(
                "Bu öğretmenin aktif dersleri bulunmaktadır. "
                "Önce dersleri başka bir öğretmene atayın veya pasif hale getirin."
            )
        self.teachers.delete(teacher)
        logger.info("profile_deleted", kind="teacher", teacher_id=teacher_id)
