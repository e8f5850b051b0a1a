"""
JSON response envelope shared by every API route.

Success::

    {"success": true, "message": "...", "data": ..., "pagination": {...}}

Failure::

    {"success": false, "message": "...", "errors": [{"field": ..., "message": ...}]}
"""

from typing import Any, Callable

from flask import jsonify

from app.pagination import PaginationResult


def success(data: Any = None, message: str = "Success", status: int = 200):
    body = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def paginated(result: PaginationResult, serialize: Callable[[Any], dict], message: str = "Success"):
    return (
        jsonify(
            {
                "success": True,
                "message": message,
                "data": [serialize(item) for item in result.data],
                "pagination": result.pagination.to_dict(),
            }
        ),
        200,
    )


def error(message: str, status: int = 500, errors: list[dict] | None = None):
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return jsonify(body), status
