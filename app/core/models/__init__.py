from app.core.models.academic_year import AcademicYear
from app.core.models.lesson import Lesson
from app.core.models.school_class import SchoolClass
from app.core.models.student import Student, StudentResult
from app.core.models.tenant import Tenant
from app.core.models.term import Term

__all__ = [
    "AcademicYear",
    "Lesson",
    "SchoolClass",
    "Student",
    "StudentResult",
    "Tenant",
    "Term",
]
