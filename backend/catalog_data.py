"""Mock-data sources and the fail-open catalog loader."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Protocol, runtime_checkable

from catalog.tables import CatalogTables, parse_courses, parse_instructors, parse_reviews, parse_users

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).resolve().parent / "fixtures"

COURSES_FILE = "courses.json"
INSTRUCTORS_FILE = "instructors.json"
REVIEWS_FILE = "course_reviews.json"
USERS_FILE = "users.json"


class CatalogDataError(RuntimeError):
    """Raised when a mock-data file cannot be read or decoded."""


@runtime_checkable
class CatalogDataSource(Protocol):
    """Read interface for the JSON arrays backing each catalog table."""

    def read_rows(self, filename: str) -> list[Any]:
        """Return the decoded JSON array stored under ``filename``."""


def _decode_rows(raw: str, location: str) -> list[Any]:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CatalogDataError(f"{location} is not valid JSON") from exc
    if not isinstance(payload, list):
        raise CatalogDataError(f"{location} must contain a JSON array")
    return payload


class DirectoryDataSource:
    """Reads mock-data files from a local directory."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)

    def read_rows(self, filename: str) -> list[Any]:
        path = self._root / filename
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise CatalogDataError(f"cannot read {path}: {exc}") from exc
        return _decode_rows(raw, str(path))


class S3DataSource:
    """Reads mock-data files from an S3 bucket with an optional key prefix."""

    def __init__(self, client: Any, bucket: str, prefix: str = "") -> None:
        self._client = client
        self._bucket = bucket
        self._prefix = prefix.strip("/")

    def _key(self, filename: str) -> str:
        return f"{self._prefix}/{filename}" if self._prefix else filename

    def read_rows(self, filename: str) -> list[Any]:
        key = self._key(filename)
        location = f"s3://{self._bucket}/{key}"
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=key)
            raw = response["Body"].read().decode("utf-8")
        except Exception as exc:  # noqa: BLE001 - botocore raises many client error types
            raise CatalogDataError(f"cannot read {location}: {exc}") from exc
        return _decode_rows(raw, location)


def create_default_s3_client() -> Any:
    """Create boto3 S3 client lazily so local runs never need AWS credentials."""
    import boto3

    return boto3.client("s3")


def data_source_from_env() -> CatalogDataSource:
    """S3 when CATALOG_DATA_BUCKET is set, otherwise the local fixtures directory."""
    bucket = os.getenv("CATALOG_DATA_BUCKET", "").strip()
    if bucket:
        prefix = os.getenv("CATALOG_DATA_PREFIX", "").strip()
        return S3DataSource(create_default_s3_client(), bucket, prefix)

    data_dir = os.getenv("CATALOG_DATA_DIR", "").strip()
    return DirectoryDataSource(Path(data_dir) if data_dir else DEFAULT_DATA_DIR)


def _load_table(source: CatalogDataSource, filename: str, parse: Callable[[list[Any]], tuple]) -> tuple:
    try:
        return parse(source.read_rows(filename))
    except CatalogDataError:
        logger.exception("Error loading mock data from %s; serving it as empty", filename)
        return ()


def load_catalog_tables(source: CatalogDataSource | None = None) -> CatalogTables:
    """Load all four tables; an unreadable table is served empty, invalid rows are skipped."""
    source = source or data_source_from_env()
    tables = CatalogTables(
        courses=_load_table(source, COURSES_FILE, parse_courses),
        instructors=_load_table(source, INSTRUCTORS_FILE, parse_instructors),
        reviews=_load_table(source, REVIEWS_FILE, parse_reviews),
        users=_load_table(source, USERS_FILE, parse_users),
    )
    counts = tables.data_loaded()
    logger.info(
        "Loaded: %d courses, %d instructors, %d reviews, %d users",
        counts["courses"],
        counts["instructors"],
        counts["reviews"],
        counts["users"],
    )
    return tables
