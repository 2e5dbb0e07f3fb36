from types import SimpleNamespace

import pytest

from student_info.domain import policy
from student_info.domain.entities import Identity, Role
from student_info.domain.errors import Forbidden, InvalidOperation, NotFound, ValidationError

ADMIN = Identity(user_id="u-admin", email="admin@example.com", role=Role.ADMIN)
TEACHER = Identity(user_id="u-teacher", email="teacher@example.com", role=Role.TEACHER)
STUDENT = Identity(user_id="u-student", email="student@example.com", role=Role.STUDENT)

OWN_TEACHER = SimpleNamespace(id="t1", user_id="u-teacher", department="CS")
OWN_STUDENT = SimpleNamespace(id="s1", user_id="u-student", department="CS")


def course(teacher_id="t1", is_active=True, enrolled=()):
    return SimpleNamespace(teacher_id=teacher_id, is_active=is_active, enrolled_students=list(enrolled))


def test_authorize_role():
    """Роль вне списка - Forbidden"""
    policy.authorize_role(ADMIN, (Role.ADMIN,))
    with pytest.raises(Forbidden):
        policy.authorize_role(STUDENT, (Role.TEACHER, Role.ADMIN))


def test_course_list_filter_per_role():
    """Преподаватель видит свои курсы, остальные только активные"""
    assert policy.course_list_filter(TEACHER, OWN_TEACHER) == {"teacher_id": "t1"}
    assert policy.course_list_filter(STUDENT, None) == {"is_active": True}
    assert policy.course_list_filter(ADMIN, None) == {"is_active": True}


def test_course_list_filter_teacher_without_profile_matches_nothing():
    assert policy.course_list_filter(TEACHER, None) == {"teacher_id": None}


def test_student_list_filter():
    assert policy.student_list_filter(ADMIN, None) == {}
    assert policy.student_list_filter(TEACHER, OWN_TEACHER) == {"department": "CS"}
    with pytest.raises(Forbidden):
        policy.student_list_filter(STUDENT, None)


def test_student_department_access():
    policy.check_student_department_access(TEACHER, "CS", OWN_TEACHER)
    with pytest.raises(Forbidden):
        policy.check_student_department_access(TEACHER, "EE", OWN_TEACHER)
    with pytest.raises(Forbidden):
        policy.check_student_department_access(STUDENT, "CS", None)


def test_course_view_rules():
    """Просмотр курса: владелец, записанный студент или активный курс"""
    policy.check_course_view(ADMIN, course(teacher_id="other", is_active=False))
    policy.check_course_view(TEACHER, course(), OWN_TEACHER)
    with pytest.raises(Forbidden):
        policy.check_course_view(TEACHER, course(teacher_id="other"), OWN_TEACHER)
    with pytest.raises(Forbidden):
        policy.check_course_view(TEACHER, course(), None)

    policy.check_course_view(STUDENT, course(is_active=True), own_student=OWN_STUDENT)
    policy.check_course_view(STUDENT, course(is_active=False, enrolled=["s1"]), own_student=OWN_STUDENT)
    with pytest.raises(Forbidden):
        policy.check_course_view(STUDENT, course(is_active=False), own_student=OWN_STUDENT)


def test_course_create_fields_forces_teacher_id():
    fields = policy.course_create_fields(TEACHER, {"code": "CS101", "teacher_id": "someone"}, OWN_TEACHER)
    assert fields["teacher_id"] == "t1"

    with pytest.raises(NotFound):
        policy.course_create_fields(TEACHER, {"code": "CS101"}, None)
    with pytest.raises(ValidationError):
        policy.course_create_fields(ADMIN, {"code": "CS101"}, None)
    with pytest.raises(Forbidden):
        policy.course_create_fields(STUDENT, {"code": "CS101", "teacher_id": "t1"}, None)


def test_course_update_fields_strips_locked_fields_for_teacher():
    """Преподаватель не меняет code и teacherId, поля молча отбрасываются"""
    changes = {"code": "NEW999", "teacher_id": "other-id", "name": "X"}
    assert policy.course_update_fields(TEACHER, course(), changes, OWN_TEACHER) == {"name": "X"}
    assert policy.course_update_fields(ADMIN, course(), changes, None) == changes
    with pytest.raises(Forbidden):
        policy.course_update_fields(TEACHER, course(teacher_id="other"), changes, OWN_TEACHER)


def test_resolve_enrollment_target():
    assert policy.resolve_enrollment_target(STUDENT, None, OWN_STUDENT) == "s1"
    assert policy.resolve_enrollment_target(STUDENT, "s1", OWN_STUDENT) == "s1"
    assert policy.resolve_enrollment_target(ADMIN, "s9", None) == "s9"

    with pytest.raises(Forbidden):
        policy.resolve_enrollment_target(STUDENT, "s9", OWN_STUDENT)
    with pytest.raises(NotFound):
        policy.resolve_enrollment_target(STUDENT, None, None)
    with pytest.raises(ValidationError):
        policy.resolve_enrollment_target(TEACHER, None, None)


def test_check_unenroll():
    policy.check_unenroll(STUDENT, "s1", OWN_STUDENT)
    policy.check_unenroll(TEACHER, "s9", None)
    with pytest.raises(Forbidden):
        policy.check_unenroll(STUDENT, "s9", OWN_STUDENT)


def test_student_view_and_update():
    other = SimpleNamespace(id="s2", user_id="u-other", department="EE")
    policy.check_student_view(STUDENT, OWN_STUDENT)
    policy.check_student_view(TEACHER, OWN_STUDENT, OWN_TEACHER)
    with pytest.raises(Forbidden):
        policy.check_student_view(STUDENT, other)
    with pytest.raises(Forbidden):
        policy.check_student_view(TEACHER, other, OWN_TEACHER)

    policy.check_student_update(STUDENT, OWN_STUDENT)
    policy.check_student_update(ADMIN, other)
    with pytest.raises(Forbidden):
        policy.check_student_update(TEACHER, OWN_STUDENT)


def test_teacher_update_fields():
    changes = {"title": "Doçent", "department": "EE", "specialization": "ML", "phone_number": "123"}
    assert policy.teacher_update_fields(TEACHER, OWN_TEACHER, changes) == {"specialization": "ML", "phone_number": "123"}
    assert policy.teacher_update_fields(ADMIN, OWN_TEACHER, changes) == changes
    with pytest.raises(Forbidden):
        policy.teacher_update_fields(STUDENT, OWN_TEACHER, changes)


def test_teacher_hidden_fields():
    """Контакты преподавателя скрыты от посторонних, студенты не видят дату найма"""
    assert policy.teacher_hidden_fields(ADMIN, OWN_TEACHER) == frozenset()
    assert policy.teacher_hidden_fields(TEACHER, OWN_TEACHER) == frozenset()

    other_teacher = Identity(user_id="u-x", email="x@example.com", role=Role.TEACHER)
    assert policy.teacher_hidden_fields(other_teacher, OWN_TEACHER) == {"phone_number", "office_location", "employee_number"}
    assert "hire_date" in policy.teacher_hidden_fields(STUDENT, OWN_TEACHER)


def test_user_rules():
    policy.check_user_access(STUDENT, "u-student")
    with pytest.raises(Forbidden):
        policy.check_user_access(STUDENT, "u-admin")

    assert policy.user_update_fields(STUDENT, "u-student", {"first_name": "A", "is_active": False}) == {"first_name": "A"}
    assert policy.user_update_fields(ADMIN, "u-student", {"is_active": False}) == {"is_active": False}

    with pytest.raises(InvalidOperation):
        policy.check_user_delete(ADMIN, "u-admin")
    with pytest.raises(Forbidden):
        policy.check_user_delete(TEACHER, "u-student")
