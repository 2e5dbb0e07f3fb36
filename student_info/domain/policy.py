"""Правила авторизации.

На каждое действие своя проверка: молча проходит, возвращает очищенные
данные или фильтр, либо кидает доменную ошибку. Профиль вызывающего
(Teacher/Student) ищет вызывающий код, здесь к хранилищу не обращаемся.
"""
from typing import Any, Iterable

from .entities import Identity, Role
from .errors import Forbidden, InvalidOperation, NotFound, ValidationError

COURSE_FIELDS_LOCKED_FOR_TEACHER = ("code", "teacher_id")
TEACHER_FIELDS_LOCKED_FOR_SELF = ("title", "department", "employee_number", "hire_date")
TEACHER_PRIVATE_FIELDS = ("phone_number", "office_location", "employee_number")


def authorize_role(identity: Identity, allowed: Iterable[Role]) -> None:
    if identity.role not in set(allowed):
        raise Forbidden()


def require_admin(identity: Identity) -> None:
    authorize_role(identity, (Role.ADMIN,))


def _strip(changes: dict[str, Any], fields: Iterable[str]) -> dict[str, Any]:
    return {k: v for k, v in changes.items() if k not in set(fields)}


# --- list filters

def course_list_filter(identity: Identity, own_teacher) -> dict[str, Any]:
    # Преподаватель видит только свои курсы, включая неактивные
    if identity.is_teacher:
        return {"teacher_id": own_teacher.id if own_teacher else None}
    return {"is_active": True}


def student_list_filter(identity: Identity, own_teacher) -> dict[str, Any]:
    authorize_role(identity, (Role.TEACHER, Role.ADMIN))
    if identity.is_teacher:
        return {"department": own_teacher.department if own_teacher else None}
    return {}


def check_student_department_access(identity: Identity, department: str, own_teacher) -> None:
    authorize_role(identity, (Role.TEACHER, Role.ADMIN))
    if identity.is_teacher and (own_teacher is None or own_teacher.department != department):
        raise Forbidden("Bu bölümün öğrencilerini görme yetkiniz yok")


def teacher_list_filter(identity: Identity) -> dict[str, Any]:
    return {}


# --- courses

def owns_course(own_teacher, course) -> bool:
    return own_teacher is not None and course.teacher_id == own_teacher.id


def check_course_view(identity: Identity, course, own_teacher=None, own_student=None) -> None:
    if identity.is_admin:
        return
    if identity.is_teacher:
        if not owns_course(own_teacher, course):
            raise Forbidden("Bu dersi görme yetkiniz yok")
        return
    enrolled = own_student is not None and own_student.id in course.enrolled_students
    if not enrolled and not course.is_active:
        raise Forbidden("Bu dersi görme yetkiniz yok")


def course_create_fields(identity: Identity, fields: dict[str, Any], own_teacher) -> dict[str, Any]:
    authorize_role(identity, (Role.TEACHER, Role.ADMIN))
    fields = dict(fields)
    if identity.is_teacher:
        if own_teacher is None:
            raise NotFound("Öğretmen profili")
        fields["teacher_id"] = own_teacher.id
    elif not fields.get("teacher_id"):
        raise ValidationError("Öğretmen ID zorunludur")
    return fields


def course_update_fields(identity: Identity, course, changes: dict[str, Any], own_teacher) -> dict[str, Any]:
    authorize_role(identity, (Role.TEACHER, Role.ADMIN))
    if identity.is_teacher:
        if not owns_course(own_teacher, course):
            raise Forbidden("Bu dersi güncelleme yetkiniz yok")
        return _strip(changes, COURSE_FIELDS_LOCKED_FOR_TEACHER)
    return dict(changes)


def resolve_enrollment_target(identity: Identity, requested_student_id: str | None, own_student) -> str:
    """Id студента, к которому относится запись на курс.

    Студент записывает только себя, преподаватель и админ указывают id явно.
    """
    if identity.is_student:
        if own_student is None:
            raise NotFound("Öğrenci profili")
        if requested_student_id and requested_student_id != own_student.id:
            raise Forbidden("Yalnızca kendinizi derse kaydedebilirsiniz")
        return own_student.id
    if not requested_student_id:
        raise ValidationError("Öğrenci ID gerekli")
    return requested_student_id


def check_unenroll(identity: Identity, student_id: str, own_student) -> None:
    if identity.is_student and (own_student is None or own_student.id != student_id):
        raise Forbidden("Bu öğrencinin kaydını silme yetkiniz yok")


# --- student profiles

def check_student_view(identity: Identity, student, own_teacher=None) -> None:
    if identity.is_admin:
        return
    if identity.is_student:
        if student.user_id != identity.user_id:
            raise Forbidden("Bu öğrencinin bilgilerini görme yetkiniz yok")
        return
    if own_teacher is None or own_teacher.department != student.department:
        raise Forbidden("Bu öğrencinin bilgilerini görme yetkiniz yok")


def check_student_update(identity: Identity, student) -> None:
    if identity.is_admin:
        return
    if identity.is_student and student.user_id == identity.user_id:
        return
    raise Forbidden("Bu öğrencinin bilgilerini güncelleme yetkiniz yok")


# --- teacher profiles

def teacher_update_fields(identity: Identity, teacher, changes: dict[str, Any]) -> dict[str, Any]:
    if identity.is_admin:
        return dict(changes)
    if identity.is_teacher and teacher.user_id == identity.user_id:
        return _strip(changes, TEACHER_FIELDS_LOCKED_FOR_SELF)
    raise Forbidden("Bu öğretmenin bilgilerini güncelleme yetkiniz yok")


def teacher_hidden_fields(identity: Identity, teacher) -> frozenset[str]:
    """Поля профиля преподавателя, скрытые от вызывающего"""
    if identity.is_admin or teacher.user_id == identity.user_id:
        return frozenset()
    hidden = set(TEACHER_PRIVATE_FIELDS)
    if identity.is_student:
        hidden.add("hire_date")
    return frozenset(hidden)


# --- users

def check_user_access(identity: Identity, target_user_id: str) -> None:
    if not identity.is_admin and identity.user_id != target_user_id:
        raise Forbidden("Bu kullanıcının bilgilerine erişim yetkiniz yok")


def user_update_fields(identity: Identity, target_user_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    check_user_access(identity, target_user_id)
    if not identity.is_admin:
        return _strip(changes, ("is_active",))
    return dict(changes)


def check_user_delete(identity: Identity, target_user_id: str) -> None:
    require_admin(identity)
    if identity.user_id == target_user_id:
        raise InvalidOperation("Kendi hesabınızı silemezsiniz")
