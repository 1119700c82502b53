"""API Gateway Lambda runtime handler for the course catalog mock API."""

from __future__ import annotations

import json
import logging
import os
import re
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, Mapping

from backend.catalog_data import load_catalog_tables
from catalog import engine
from catalog.engine import CourseNotFoundError, InstructorNotFoundError
from catalog.tables import CatalogTables

logger = logging.getLogger(__name__)

_API_PREFIX = "/api"
_COURSE_DETAIL_PATH = re.compile(r"/api/courses/([^/]+)")
_INSTRUCTOR_DETAIL_PATH = re.compile(r"/api/instructors/([^/]+)")
_DEFAULT_ALLOW_METHODS = "GET,HEAD,PUT,PATCH,POST,DELETE"
_DEFAULT_ALLOW_HEADERS = "Content-Type,Authorization,X-Amz-Date,X-Api-Key,X-Amz-Security-Token"


@lru_cache(maxsize=1)
def _catalog_tables() -> CatalogTables:
    return load_catalog_tables()


def _cors_headers() -> Dict[str, str]:
    origin = os.getenv("CORS_ALLOW_ORIGIN", "*").strip() or "*"
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Methods": _DEFAULT_ALLOW_METHODS,
        "Access-Control-Allow-Headers": _DEFAULT_ALLOW_HEADERS,
    }


def _json_response(status_code: int, payload: Any) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json", **_cors_headers()},
        "body": json.dumps(payload),
    }


def _preflight_response() -> Dict[str, Any]:
    return {"statusCode": 204, "headers": _cors_headers(), "body": ""}


def _request_method(event: Mapping[str, Any]) -> str:
    if isinstance(event.get("requestContext"), dict):
        context = event["requestContext"]
        if isinstance(context.get("http"), dict):
            method = context["http"].get("method")
            if isinstance(method, str) and method:
                return method.upper()

    method = event.get("httpMethod", "")
    if isinstance(method, str):
        return method.upper()
    return ""


def _request_path(event: Mapping[str, Any]) -> str:
    raw_path = event.get("rawPath")
    if isinstance(raw_path, str) and raw_path:
        return raw_path

    path = event.get("path")
    if isinstance(path, str) and path:
        return path

    return "/"


def _normalized_path(event: Mapping[str, Any], path: str) -> str:
    """Strip API Gateway stage prefixes (for example '/dev') and trailing slashes.

    The prefix is only removed when what remains is still an /api path, so a
    stage named 'api' does not eat the route's own /api segment.
    """
    context = event.get("requestContext")
    stage = context.get("stage") if isinstance(context, dict) else None
    if isinstance(stage, str) and stage.strip() and stage.strip() != "$default":
        stage_prefix = f"/{stage.strip()}"
        remainder = path[len(stage_prefix) :] if path.startswith(f"{stage_prefix}/") else ""
        if remainder.rstrip("/") == _API_PREFIX or remainder.startswith(f"{_API_PREFIX}/"):
            path = remainder

    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


def _query_params(event: Mapping[str, Any]) -> dict[str, str]:
    raw = event.get("queryStringParameters")
    if not isinstance(raw, dict):
        return {}

    params: dict[str, str] = {}
    for key, value in raw.items():
        if isinstance(key, str) and isinstance(value, str):
            params[key] = value
    return params


def _utc_now_iso() -> str:
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def _handle_list_courses(event: Mapping[str, Any], tables: CatalogTables) -> Dict[str, Any]:
    params = _query_params(event)
    result = engine.list_courses(
        tables,
        query=params.get("q", ""),
        category=params.get("category", ""),
        level=params.get("level", ""),
        page=params.get("page"),
        limit=params.get("limit"),
        sort=params.get("sort", engine.DEFAULT_SORT),
    )
    return _json_response(200, result)


def _handle_health(tables: CatalogTables) -> Dict[str, Any]:
    return _json_response(
        200,
        {
            "status": "OK",
            "timestamp": _utc_now_iso(),
            "data_loaded": tables.data_loaded(),
        },
    )


def _route(method: str, path: str, event: Mapping[str, Any], tables: CatalogTables) -> Dict[str, Any]:
    if method in ("GET", "HEAD"):
        if path == "/api/health":
            return _handle_health(tables)

        if path == "/api/courses":
            return _handle_list_courses(event, tables)

        # Literal "featured" must win over the course id pattern below.
        if path == "/api/courses/featured":
            return _json_response(200, engine.list_featured_courses(tables))

        match = _COURSE_DETAIL_PATH.fullmatch(path)
        if match:
            try:
                return _json_response(200, engine.get_course_detail(tables, match.group(1)))
            except CourseNotFoundError:
                return _json_response(404, {"error": "Course not found"})

        if path == "/api/instructors":
            return _json_response(200, engine.list_instructors(tables))

        match = _INSTRUCTOR_DETAIL_PATH.fullmatch(path)
        if match:
            try:
                return _json_response(200, engine.get_instructor_detail(tables, match.group(1)))
            except InstructorNotFoundError:
                return _json_response(404, {"error": "Instructor not found"})

        if path == "/api/categories":
            return _json_response(200, engine.list_categories(tables))

        if path == "/api/stats":
            return _json_response(200, engine.get_stats(tables))

    if path == _API_PREFIX or path.startswith(f"{_API_PREFIX}/"):
        return _json_response(404, {"error": "API endpoint not found"})

    return _json_response(404, {"error": "not found"})


def handle_request(event: Mapping[str, Any], tables: CatalogTables) -> Dict[str, Any]:
    """Dispatch one API Gateway-shaped event against the given tables."""
    method = _request_method(event)
    path = _normalized_path(event, _request_path(event))

    if method == "OPTIONS":
        return _preflight_response()

    try:
        return _route(method, path, event, tables)
    except Exception as exc:  # noqa: BLE001 - every route reports faults as 500
        logger.exception("Unhandled error serving %s %s", method, path)
        return _json_response(500, {"error": "Internal server error", "message": str(exc)})


def lambda_handler(event: Mapping[str, Any], context: Any) -> Dict[str, Any]:
    """API Gateway Lambda entrypoint for the catalog routes."""
    return handle_request(event, _catalog_tables())
