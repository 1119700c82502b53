"""Read-only catalog tables shared by every query."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, TypeVar

from .models import Course, Instructor, ModelValidationError, Review, User

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")


def is_complete_course_row(row: Any) -> bool:
    """Course rows without an id or title never reach the tables."""
    return isinstance(row, Mapping) and bool(row.get("id")) and bool(row.get("title"))


def parse_rows(
    rows: Iterable[Any],
    build: Callable[[Any], RecordT],
    label: str,
    keep: Callable[[Any], bool] | None = None,
) -> tuple[RecordT, ...]:
    """Build one record per row, skipping rows that fail validation.

    Rows rejected by ``keep`` are dropped silently. Logged indexes are
    positions in the source array.
    """
    records = []
    for index, row in enumerate(rows):
        if keep is not None and not keep(row):
            continue
        try:
            records.append(build(row))
        except ModelValidationError as exc:
            logger.warning("Skipping invalid %s row %d: %s", label, index, exc)
    return tuple(records)


def parse_courses(rows: Iterable[Any]) -> tuple[Course, ...]:
    return parse_rows(rows, Course.from_api_dict, "course", keep=is_complete_course_row)


def parse_instructors(rows: Iterable[Any]) -> tuple[Instructor, ...]:
    return parse_rows(rows, Instructor.from_api_dict, "instructor")


def parse_reviews(rows: Iterable[Any]) -> tuple[Review, ...]:
    return parse_rows(rows, Review.from_api_dict, "review")


def parse_users(rows: Iterable[Any]) -> tuple[User, ...]:
    return parse_rows(rows, User.from_api_dict, "user")


@dataclass(frozen=True)
class CatalogTables:
    """The four catalog tables, loaded once and never mutated."""

    courses: tuple[Course, ...] = ()
    instructors: tuple[Instructor, ...] = ()
    reviews: tuple[Review, ...] = ()
    users: tuple[User, ...] = ()

    @classmethod
    def empty(cls) -> "CatalogTables":
        return cls()

    @classmethod
    def from_rows(
        cls,
        *,
        courses: Iterable[Any] = (),
        instructors: Iterable[Any] = (),
        reviews: Iterable[Any] = (),
        users: Iterable[Any] = (),
    ) -> "CatalogTables":
        """Build tables from raw JSON rows, dropping incomplete courses."""
        return cls(
            courses=parse_courses(courses),
            instructors=parse_instructors(instructors),
            reviews=parse_reviews(reviews),
            users=parse_users(users),
        )

    def data_loaded(self) -> dict[str, int]:
        return {
            "courses": len(self.courses),
            "instructors": len(self.instructors),
            "reviews": len(self.reviews),
            "users": len(self.users),
        }
