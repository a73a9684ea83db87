from enum import Enum


class Role(str, Enum):
    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"
    PARENT = "parent"


class DenyKind(str, Enum):
    UNAUTHENTICATED = "Unauthenticated"
    FORBIDDEN = "Forbidden"


class RuleKind(str, Enum):
    """Business-rule failures raised by the calendar rule engine."""

    INVALID_RANGE = "InvalidRange"
    OVERLAP = "Overlap"
    OUT_OF_BOUNDS = "OutOfBounds"
    LOCKED = "Locked"


class RelationKind(str, Enum):
    TEACHER_OWNS_LESSON = "teacher_owns_lesson"
    TEACHER_SUPERVISES_CLASS = "teacher_supervises_class"
    PARENT_OWNS_STUDENT = "parent_owns_student"
    STUDENT_OWNS_RECORD = "student_owns_record"
    STUDENT_IN_CLASS = "student_in_class"


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
