"""In-memory query engine for the course catalog.

Every function here is a pure read over a ``CatalogTables`` value: search,
filter, sort, paginate and join the four tables into JSON-ready payloads.
Lookups are linear scans and the first row with a matching id wins.
"""

from __future__ import annotations

import math
import unicodedata
from collections import Counter
from typing import Any, Callable, Iterable

from .models import Course, Instructor, Review, User
from .tables import CatalogTables

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 12
DEFAULT_SORT = "title"
FEATURED_LIMIT = 8
FEATURED_MIN_RATING = 4.8
RELATED_COURSES_LIMIT = 4


class CatalogNotFoundError(LookupError):
    """Raised when a lookup by id has no matching row."""


class CourseNotFoundError(CatalogNotFoundError):
    def __init__(self, course_id: str) -> None:
        super().__init__(f"course not found: {course_id}")
        self.course_id = course_id


class InstructorNotFoundError(CatalogNotFoundError):
    def __init__(self, instructor_id: str) -> None:
        super().__init__(f"instructor not found: {instructor_id}")
        self.instructor_id = instructor_id


def _number(value: float | int | None) -> float | int:
    return value if value is not None else 0


def _mean(values: list[float | int]) -> float:
    if not values:
        return 0
    return sum(values) / len(values)


def _title_collation_key(course: Course) -> tuple[str, str, str]:
    """Approximate locale-aware ordering: base letters, then accents, then lowercase first."""
    text = course.title or ""
    decomposed = unicodedata.normalize("NFD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), decomposed.casefold(), text.swapcase())


_SORTS: dict[str, tuple[Callable[[Course], Any], bool]] = {
    "price_asc": (lambda course: _number(course.price), False),
    "price_desc": (lambda course: _number(course.price), True),
    "rating": (lambda course: _number(course.rating), True),
    "reviews": (lambda course: _number(course.number_of_reviews), True),
}


def sort_courses(courses: Iterable[Course], sort: str | None) -> list[Course]:
    """Stable sort by one of the supported keys; anything else sorts by title."""
    key, descending = _SORTS.get(sort or DEFAULT_SORT, (_title_collation_key, False))
    # sorted() keeps equal keys in input order even with reverse=True.
    return sorted(courses, key=key, reverse=descending)


def parse_positive_int(value: Any, default: int) -> int:
    """Parse a 1-based query parameter, falling back to ``default`` on bad input.

    Only plain ASCII digit strings count; ``int()`` alone would also accept
    underscores and non-ASCII digits.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        number = value
    else:
        text = str(value).strip()
        if not (text.isascii() and text.isdigit()):
            return default
        number = int(text)
    return number if number >= 1 else default


def _contains(haystack: str | None, needle: str) -> bool:
    return haystack is not None and needle in haystack.lower()


def course_matches(course: Course, *, query: str = "", category: str = "", level: str = "") -> bool:
    """Case-insensitive text search ANDed with exact category and level matches."""
    if query:
        needle = query.lower()
        if not (
            _contains(course.title, needle)
            or _contains(course.description, needle)
            or _contains(course.category, needle)
        ):
            return False
    if category and course.category != category:
        return False
    if level and course.level != level:
        return False
    return True


def _find_instructor(tables: CatalogTables, instructor_id: str | None) -> Instructor | None:
    if instructor_id is None:
        return None
    return next((row for row in tables.instructors if row.id == instructor_id), None)


def _find_user(tables: CatalogTables, user_id: str | None) -> User | None:
    if user_id is None:
        return None
    return next((row for row in tables.users if row.id == user_id), None)


def _reviews_for_course(tables: CatalogTables, course_id: str) -> list[Review]:
    return [review for review in tables.reviews if review.course_id == course_id]


def _instructor_summary(tables: CatalogTables, course: Course) -> dict[str, Any] | None:
    instructor = _find_instructor(tables, course.instructor_id)
    return instructor.to_summary_dict() if instructor is not None else None


def _with_instructor_summary(tables: CatalogTables, course: Course) -> dict[str, Any]:
    payload = course.to_api_dict()
    payload["instructor"] = _instructor_summary(tables, course)
    return payload


def _review_with_user(tables: CatalogTables, review: Review) -> dict[str, Any]:
    payload = review.to_api_dict()
    user = _find_user(tables, review.user_id)
    payload["user"] = user.to_summary_dict() if user is not None else None
    return payload


def _average_review_rating(reviews: list[Review]) -> float:
    return _mean([_number(review.rating) for review in reviews])


def list_courses(
    tables: CatalogTables,
    *,
    query: str | None = "",
    category: str | None = "",
    level: str | None = "",
    page: Any = DEFAULT_PAGE,
    limit: Any = DEFAULT_LIMIT,
    sort: str | None = DEFAULT_SORT,
) -> dict[str, Any]:
    """Search, filter, sort and paginate courses.

    Args:
        tables: Loaded catalog tables.
        query: Case-insensitive text matched against title, description and category.
        category: Exact category match; empty matches every course.
        level: Exact level match; empty matches every course.
        page: 1-based page number; raw query-string values are accepted.
        limit: Page size; raw query-string values are accepted.
        sort: One of ``price_asc``, ``price_desc``, ``rating``, ``reviews`` or ``title``.

    Returns:
        ``{"courses": [...], "pagination": {...}}`` where each course carries a
        reduced ``instructor`` and its ``actual_review_count``.
    """
    page_number = parse_positive_int(page, DEFAULT_PAGE)
    per_page = parse_positive_int(limit, DEFAULT_LIMIT)

    filtered = [
        course
        for course in tables.courses
        if course_matches(course, query=query or "", category=category or "", level=level or "")
    ]
    ordered = sort_courses(filtered, sort)

    start = (page_number - 1) * per_page
    review_counts = Counter(review.course_id for review in tables.reviews)

    rows = []
    for course in ordered[start : start + per_page]:
        payload = _with_instructor_summary(tables, course)
        payload["actual_review_count"] = review_counts.get(course.id, 0)
        rows.append(payload)

    return {
        "courses": rows,
        "pagination": {
            "current_page": page_number,
            "total_pages": math.ceil(len(filtered) / per_page),
            "total_courses": len(filtered),
            "per_page": per_page,
        },
    }


def list_featured_courses(tables: CatalogTables) -> list[dict[str, Any]]:
    """Bestsellers and highly rated courses, best rated first."""
    featured = [
        course
        for course in tables.courses
        if course.bestseller or (course.rating is not None and course.rating >= FEATURED_MIN_RATING)
    ]
    ordered = sort_courses(featured, "rating")[:FEATURED_LIMIT]
    return [_with_instructor_summary(tables, course) for course in ordered]


def get_course_detail(tables: CatalogTables, course_id: str) -> dict[str, Any]:
    """Course with full instructor, reviews, related courses and review stats."""
    course = next((row for row in tables.courses if row.id == course_id), None)
    if course is None:
        raise CourseNotFoundError(course_id)

    instructor = _find_instructor(tables, course.instructor_id)
    reviews = _reviews_for_course(tables, course.id)
    related = [
        row for row in tables.courses if row.category == course.category and row.id != course.id
    ][:RELATED_COURSES_LIMIT]

    payload = course.to_api_dict()
    payload["instructor"] = instructor.to_api_dict() if instructor is not None else None
    payload["reviews"] = [_review_with_user(tables, review) for review in reviews]
    payload["related_courses"] = [_with_instructor_summary(tables, row) for row in related]
    payload["stats"] = {
        "total_reviews": len(reviews),
        "average_rating": _average_review_rating(reviews),
    }
    return payload


def _courses_by_instructor(tables: CatalogTables, instructor_id: str) -> list[Course]:
    return [course for course in tables.courses if course.instructor_id == instructor_id]


def _total_students(courses: list[Course]) -> int:
    # number_of_reviews doubles as the enrollment figure.
    return sum(_number(course.number_of_reviews) for course in courses)


def list_instructors(tables: CatalogTables) -> list[dict[str, Any]]:
    rows = []
    for instructor in tables.instructors:
        courses = _courses_by_instructor(tables, instructor.id)
        payload = instructor.to_api_dict()
        payload["course_count"] = len(courses)
        payload["total_students"] = _total_students(courses)
        payload["average_rating"] = _mean([_number(course.rating) for course in courses])
        rows.append(payload)
    return rows


def get_instructor_detail(tables: CatalogTables, instructor_id: str) -> dict[str, Any]:
    """Instructor with their courses and review stats across those courses."""
    instructor = _find_instructor(tables, instructor_id)
    if instructor is None:
        raise InstructorNotFoundError(instructor_id)

    courses = _courses_by_instructor(tables, instructor.id)
    course_ids = {course.id for course in courses}
    reviews = [review for review in tables.reviews if review.course_id in course_ids]

    payload = instructor.to_api_dict()
    payload["courses"] = [course.to_api_dict() for course in courses]
    payload["stats"] = {
        "total_courses": len(courses),
        "total_students": _total_students(courses),
        "total_reviews": len(reviews),
        "average_rating": _average_review_rating(reviews),
    }
    return payload


def _category_counts(tables: CatalogTables) -> Counter[str]:
    # Counter keeps first-occurrence order.
    return Counter(course.category for course in tables.courses if course.category)


def list_categories(tables: CatalogTables) -> list[dict[str, Any]]:
    return [
        {"name": name, "course_count": count}
        for name, count in _category_counts(tables).items()
    ]


def get_stats(tables: CatalogTables) -> dict[str, Any]:
    return {
        "total_courses": len(tables.courses),
        "total_instructors": len(tables.instructors),
        "total_users": len(tables.users),
        "total_reviews": len(tables.reviews),
        "categories": len(_category_counts(tables)),
        "average_rating": _mean([_number(course.rating) for course in tables.courses]),
        "bestseller_count": sum(1 for course in tables.courses if course.bestseller),
        "new_courses_count": sum(1 for course in tables.courses if course.new),
    }
