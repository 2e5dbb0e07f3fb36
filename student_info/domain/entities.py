from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class TeacherTitle(str, Enum):
    RESEARCH_ASSISTANT = "Araştırma Görevlisi"
    LECTURER = "Öğretim Görevlisi"
    FACULTY_MEMBER = "Öğretim Üyesi"
    ASSOCIATE_PROFESSOR = "Doçent"
    PROFESSOR = "Profesör"


class Semester(str, Enum):
    FALL = "Fall"
    SPRING = "Spring"
    SUMMER = "Summer"


class Weekday(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


# Типы колонок grades и attendance; сами оценки нигде не вычисляются
class ExamType(str, Enum):
    MIDTERM = "midterm"
    FINAL = "final"
    QUIZ = "quiz"
    ASSIGNMENT = "assignment"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"


@dataclass(frozen=True)
class Identity:
    """Аутентифицированный вызывающий, восстановленный из bearer-токена."""
    user_id: str
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_teacher(self) -> bool:
        return self.role == Role.TEACHER

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT
