"""
Standardized API response utilities.

All responses follow the envelope:
{
    "status": "success" | "error",
    "message": str,
    "data": Any,              # optional
    "timestamp": ISO-8601 str,
    "pagination": {...}       # list endpoints only
}
"""

import math
from datetime import UTC, datetime
from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def _timestamp() -> str:
    return datetime.now(UTC).isoformat()


def build_pagination(page: int, per_page: int, total_count: int) -> dict[str, Any]:
    """
    Build the pagination block for list responses.

    Args:
        page: Current page (1-based)
        per_page: Items per page
        total_count: Number of matching items across all pages

    Returns:
        Pagination metadata dictionary
    """
    total_pages = math.ceil(total_count / per_page) if per_page else 0
    return {
        "current_page": page,
        "total_pages": total_pages,
        "per_page": per_page,
        "total_count": total_count,
        "has_next": page < total_pages,
        "has_prev": page > 1,
    }


def success_response(
    message: str = "Operation successful",
    data: Any = None,
    status_code: int = status.HTTP_200_OK,
    pagination: dict[str, Any] | None = None,
) -> JSONResponse:
    """
    Create a standardized success response.

    Example:
        return success_response(
            message="Sermon retrieved successfully",
            data=SermonOut.model_validate(sermon).model_dump(mode="json"),
        )
    """
    content: dict[str, Any] = {
        "status": "success",
        "message": message,
        "timestamp": _timestamp(),
    }
    if data is not None:
        content["data"] = jsonable_encoder(data)
    if pagination is not None:
        content["pagination"] = pagination
    return JSONResponse(status_code=status_code, content=content)


def created_response(message: str, data: Any = None) -> JSONResponse:
    return success_response(message=message, data=data, status_code=status.HTTP_201_CREATED)


def error_response(
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
    message: str = "An error occurred",
    error_code: str | None = None,
    data: Any = None,
    errors: list[dict[str, str]] | None = None,
) -> JSONResponse:
    """
    Create a standardized error response.

    Args:
        status_code: HTTP error status code
        message: Stable, user-facing error message
        error_code: Machine-readable error name (e.g. ``AccountNotApproved``)
        data: Optional error details
        errors: Optional field-level ``{field, message}`` pairs

    Returns:
        JSONResponse with standard format
    """
    content: dict[str, Any] = {
        "status": "error",
        "message": message,
        "timestamp": _timestamp(),
    }
    if error_code:
        content["error_code"] = error_code
    if data is not None:
        content["data"] = jsonable_encoder(data)
    if errors is not None:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content)


def format_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """
    Flatten pydantic error dicts into ``{field, message}`` pairs.

    The location prefix added by FastAPI ("body", "query", "path") is dropped.
    """
    formatted = []
    for error in errors:
        location = [
            str(part)
            for part in error.get("loc", ())
            if part not in ("body", "query", "path", "form")
        ]
        message = error.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, ") :]
        formatted.append({"field": ".".join(location) or "request", "message": message})
    return formatted
