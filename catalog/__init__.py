"""Course catalog tables and query engine."""

from .engine import (
    CatalogNotFoundError,
    CourseNotFoundError,
    InstructorNotFoundError,
    get_course_detail,
    get_instructor_detail,
    get_stats,
    list_categories,
    list_courses,
    list_featured_courses,
    list_instructors,
)
from .models import Course, Instructor, ModelValidationError, Review, User
from .tables import CatalogTables

__all__ = [
    "CatalogNotFoundError",
    "CatalogTables",
    "Course",
    "CourseNotFoundError",
    "Instructor",
    "InstructorNotFoundError",
    "ModelValidationError",
    "Review",
    "User",
    "get_course_detail",
    "get_instructor_detail",
    "get_stats",
    "list_categories",
    "list_courses",
    "list_featured_courses",
    "list_instructors",
]
