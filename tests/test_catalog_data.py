"""Unit tests for mock-data sources and the fail-open loader."""

from __future__ import annotations

import io
import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import backend
from backend.catalog_data import (
    COURSES_FILE,
    DEFAULT_DATA_DIR,
    INSTRUCTORS_FILE,
    REVIEWS_FILE,
    USERS_FILE,
    CatalogDataError,
    DirectoryDataSource,
    S3DataSource,
    data_source_from_env,
    load_catalog_tables,
)


class _MemorySource:
    def __init__(self, files: dict[str, object]) -> None:
        self.files = files

    def read_rows(self, filename: str) -> list:
        if filename not in self.files:
            raise CatalogDataError(f"missing {filename}")
        return self.files[filename]  # type: ignore[return-value]


class _FakeS3Client:
    def __init__(self, objects: dict[tuple[str, str], bytes]) -> None:
        self.objects = objects
        self.requested: list[tuple[str, str]] = []

    def get_object(self, *, Bucket: str, Key: str) -> dict:  # noqa: N803 - boto3 shape
        self.requested.append((Bucket, Key))
        if (Bucket, Key) not in self.objects:
            raise KeyError(Key)
        return {"Body": io.BytesIO(self.objects[(Bucket, Key)])}


class DirectoryDataSourceTests(unittest.TestCase):
    def test_reads_json_arrays(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            Path(tmp, "users.json").write_text(json.dumps([{"id": "u1"}]), encoding="utf-8")
            self.assertEqual(DirectoryDataSource(tmp).read_rows("users.json"), [{"id": "u1"}])

    def test_missing_file_raises_data_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(CatalogDataError):
                DirectoryDataSource(tmp).read_rows("users.json")

    def test_non_array_payload_raises_data_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            Path(tmp, "users.json").write_text('{"id": "u1"}', encoding="utf-8")
            with self.assertRaises(CatalogDataError):
                DirectoryDataSource(tmp).read_rows("users.json")

    def test_invalid_json_raises_data_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            Path(tmp, "users.json").write_text("[{", encoding="utf-8")
            with self.assertRaises(CatalogDataError):
                DirectoryDataSource(tmp).read_rows("users.json")


class S3DataSourceTests(unittest.TestCase):
    def test_reads_object_under_prefix(self) -> None:
        client = _FakeS3Client({("mock-bucket", "data/users.json"): b'[{"id": "u1"}]'})
        source = S3DataSource(client, "mock-bucket", "/data/")

        self.assertEqual(source.read_rows("users.json"), [{"id": "u1"}])
        self.assertEqual(client.requested, [("mock-bucket", "data/users.json")])

    def test_client_errors_become_data_errors(self) -> None:
        source = S3DataSource(_FakeS3Client({}), "mock-bucket")
        with self.assertRaises(CatalogDataError):
            source.read_rows("users.json")


class DataSourceFromEnvTests(unittest.TestCase):
    def test_defaults_to_bundled_fixtures(self) -> None:
        with patch.dict("os.environ", {}, clear=True):
            source = data_source_from_env()
        self.assertIsInstance(source, DirectoryDataSource)
        self.assertGreater(len(source.read_rows("courses.json")), 0)

    def test_bundled_fixtures_live_inside_backend_package(self) -> None:
        package_dir = Path(backend.__file__).resolve().parent
        self.assertEqual(DEFAULT_DATA_DIR, package_dir / "fixtures")
        for filename in (COURSES_FILE, INSTRUCTORS_FILE, REVIEWS_FILE, USERS_FILE):
            self.assertTrue((DEFAULT_DATA_DIR / filename).is_file(), filename)

    def test_bucket_selects_s3_source(self) -> None:
        client = _FakeS3Client({("mock-bucket", "v1/users.json"): b"[]"})
        env = {"CATALOG_DATA_BUCKET": "mock-bucket", "CATALOG_DATA_PREFIX": "v1"}
        with patch.dict("os.environ", env, clear=True), patch(
            "backend.catalog_data.create_default_s3_client", return_value=client
        ):
            source = data_source_from_env()
        self.assertIsInstance(source, S3DataSource)
        self.assertEqual(source.read_rows("users.json"), [])


class LoadCatalogTablesTests(unittest.TestCase):
    def test_loads_bundled_fixtures(self) -> None:
        tables = load_catalog_tables(DirectoryDataSource(DEFAULT_DATA_DIR))
        self.assertEqual(
            tables.data_loaded(),
            {"courses": 11, "instructors": 4, "reviews": 11, "users": 5},
        )

    def test_failed_table_is_served_empty(self) -> None:
        source = _MemorySource(
            {
                "courses.json": [{"id": "c1", "title": "T", "instructor_id": "i1"}],
                "instructors.json": [{"id": "i1", "fullname": "Ada"}],
                "users.json": [{"id": "u1"}],
            }
        )
        with self.assertLogs("backend.catalog_data", level="ERROR"):
            tables = load_catalog_tables(source)

        self.assertEqual(tables.data_loaded(), {"courses": 1, "instructors": 1, "reviews": 0, "users": 1})

    def test_invalid_row_is_skipped_and_neighbours_survive(self) -> None:
        source = _MemorySource(
            {
                "courses.json": [
                    {"id": "c1", "title": "Python Basics"},
                    {"id": "c2", "title": "SQL"},
                    {"id": 3, "title": "Numeric id"},
                ],
                "instructors.json": [],
                "course_reviews.json": [{"id": "r1", "course_id": "c1", "rating": 5}],
                "users.json": [],
            }
        )
        with self.assertLogs("catalog.tables", level="WARNING") as logs:
            tables = load_catalog_tables(source)

        self.assertEqual([course.id for course in tables.courses], ["c1", "c2"])
        self.assertEqual(len(tables.reviews), 1)
        self.assertIn("course row 2", logs.output[0])

    def test_invalid_field_type_skips_only_that_row(self) -> None:
        source = _MemorySource(
            {
                "courses.json": [
                    {"id": "c1", "title": "T", "price": "free"},
                    {"id": "c2", "title": "U", "price": 10},
                ],
                "instructors.json": ["not-an-object", {"id": "i1", "fullname": "Ada"}],
                "course_reviews.json": [],
                "users.json": [],
            }
        )
        with self.assertLogs("catalog.tables", level="WARNING") as logs:
            tables = load_catalog_tables(source)

        self.assertEqual([course.id for course in tables.courses], ["c2"])
        self.assertEqual([instructor.id for instructor in tables.instructors], ["i1"])
        self.assertEqual(len(logs.output), 2)

    def test_env_source_is_used_when_none_given(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with patch.dict("os.environ", {"CATALOG_DATA_DIR": tmp}, clear=True), self.assertLogs(
                "backend.catalog_data", level="ERROR"
            ):
                tables = load_catalog_tables()
        self.assertEqual(tables.data_loaded(), {"courses": 0, "instructors": 0, "reviews": 0, "users": 0})


if __name__ == "__main__":
    unittest.main()
