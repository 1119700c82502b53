"""Catalog record models built from mock-data JSON rows."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

COURSE_FIELDS = (
    "id",
    "title",
    "description",
    "category",
    "level",
    "price",
    "rating",
    "number_of_reviews",
    "is_bestseller",
    "is_new",
    "instructor_id",
)
INSTRUCTOR_FIELDS = ("id", "fullname", "avatar")
REVIEW_FIELDS = ("id", "course_id", "user_id", "rating")
USER_FIELDS = ("id", "username", "fullname", "avatar")


class ModelValidationError(ValueError):
    """Raised when catalog rows fail validation."""


def _require_mapping(payload: Any, label: str) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise ModelValidationError(f"{label}: expected JSON object")
    return payload


def _validate_id(value: Any, field_name: str) -> str:
    """Require non-empty string identifiers."""
    if not isinstance(value, str):
        raise ModelValidationError(f"{field_name}: expected string")
    if not value:
        raise ModelValidationError(f"{field_name}: must not be empty")
    return value


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ModelValidationError(f"{field_name}: expected string")
    return value


def _optional_number(value: Any, field_name: str) -> float | int | None:
    if value is None:
        return None
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ModelValidationError(f"{field_name}: expected number")
    return value


def _optional_int(value: Any, field_name: str) -> int | None:
    if value is None:
        return None
    if not isinstance(value, int) or isinstance(value, bool):
        raise ModelValidationError(f"{field_name}: expected integer")
    return value


def _optional_flag(value: Any, field_name: str) -> int | None:
    """0/1 flags; JSON booleans are kept as-is and never count as set."""
    if value is None:
        return None
    if not isinstance(value, int):
        raise ModelValidationError(f"{field_name}: expected 0/1 flag")
    return value


def _flag_is_set(value: int | None) -> bool:
    return value == 1 and not isinstance(value, bool)


def _extra_fields(payload: Mapping[str, Any], known: tuple[str, ...]) -> dict[str, Any]:
    return {key: value for key, value in payload.items() if key not in known}


@dataclass(frozen=True)
class Course:
    """Catalog course row."""

    id: str
    title: str
    description: str | None = None
    category: str | None = None
    level: str | None = None
    price: float | int | None = None
    rating: float | int | None = None
    number_of_reviews: int | None = None
    is_bestseller: int | None = None
    is_new: int | None = None
    instructor_id: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def bestseller(self) -> bool:
        return _flag_is_set(self.is_bestseller)

    @property
    def new(self) -> bool:
        return _flag_is_set(self.is_new)

    @classmethod
    def from_api_dict(cls, payload: Mapping[str, Any]) -> "Course":
        """Build a course from a mock-data row; unknown keys are kept in ``extra``."""
        row = _require_mapping(payload, "Course")
        title = row.get("title")
        if not isinstance(title, str) or not title:
            raise ModelValidationError("title: expected non-empty string")
        return cls(
            id=_validate_id(row.get("id"), "id"),
            title=title,
            description=_optional_string(row.get("description"), "description"),
            category=_optional_string(row.get("category"), "category"),
            level=_optional_string(row.get("level"), "level"),
            price=_optional_number(row.get("price"), "price"),
            rating=_optional_number(row.get("rating"), "rating"),
            number_of_reviews=_optional_int(row.get("number_of_reviews"), "number_of_reviews"),
            is_bestseller=_optional_flag(row.get("is_bestseller"), "is_bestseller"),
            is_new=_optional_flag(row.get("is_new"), "is_new"),
            instructor_id=_optional_string(row.get("instructor_id"), "instructor_id"),
            extra=_extra_fields(row, COURSE_FIELDS),
        )

    def to_api_dict(self) -> dict[str, Any]:
        payload = {name: getattr(self, name) for name in COURSE_FIELDS}
        payload.update(self.extra)
        return payload


@dataclass(frozen=True)
class Instructor:
    """Catalog instructor row."""

    id: str
    fullname: str | None = None
    avatar: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api_dict(cls, payload: Mapping[str, Any]) -> "Instructor":
        row = _require_mapping(payload, "Instructor")
        return cls(
            id=_validate_id(row.get("id"), "id"),
            fullname=_optional_string(row.get("fullname"), "fullname"),
            avatar=_optional_string(row.get("avatar"), "avatar"),
            extra=_extra_fields(row, INSTRUCTOR_FIELDS),
        )

    def to_api_dict(self) -> dict[str, Any]:
        payload = {name: getattr(self, name) for name in INSTRUCTOR_FIELDS}
        payload.update(self.extra)
        return payload

    def to_summary_dict(self) -> dict[str, Any]:
        """Reduced projection embedded in course payloads."""
        return {"id": self.id, "fullname": self.fullname, "avatar": self.avatar}


@dataclass(frozen=True)
class Review:
    """Catalog course review row."""

    id: str
    course_id: str | None = None
    user_id: str | None = None
    rating: float | int | None = None
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api_dict(cls, payload: Mapping[str, Any]) -> "Review":
        row = _require_mapping(payload, "Review")
        return cls(
            id=_validate_id(row.get("id"), "id"),
            course_id=_optional_string(row.get("course_id"), "course_id"),
            user_id=_optional_string(row.get("user_id"), "user_id"),
            rating=_optional_number(row.get("rating"), "rating"),
            extra=_extra_fields(row, REVIEW_FIELDS),
        )

    def to_api_dict(self) -> dict[str, Any]:
        payload = {name: getattr(self, name) for name in REVIEW_FIELDS}
        payload.update(self.extra)
        return payload


@dataclass(frozen=True)
class User:
    """Catalog user row."""

    id: str
    username: str | None = None
    fullname: str | None = None
    avatar: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api_dict(cls, payload: Mapping[str, Any]) -> "User":
        row = _require_mapping(payload, "User")
        return cls(
            id=_validate_id(row.get("id"), "id"),
            username=_optional_string(row.get("username"), "username"),
            fullname=_optional_string(row.get("fullname"), "fullname"),
            avatar=_optional_string(row.get("avatar"), "avatar"),
            extra=_extra_fields(row, USER_FIELDS),
        )

    def to_api_dict(self) -> dict[str, Any]:
        payload = {name: getattr(self, name) for name in USER_FIELDS}
        payload.update(self.extra)
        return payload

    def to_summary_dict(self) -> dict[str, Any]:
        """Reduced projection embedded in review payloads."""
        return {
            "id": self.id,
            "username": self.username,
            "fullname": self.fullname,
            "avatar": self.avatar,
        }
