"""Response envelope shared by every endpoint."""

from typing import Any


def api_response(status_code: int, data: Any = None, message: str = "Success") -> dict[str, Any]:
    """Success envelope. ``success`` follows the status code."""
    return {
        "statusCode": status_code,
        "data": data,
        "message": message,
        "success": status_code < 400,
    }


def error_response(status_code: int, message: str, errors: list[Any] | None = None) -> dict[str, Any]:
    """Failure envelope."""
    return {
        "statusCode": status_code,
        "message": message,
        "success": False,
        "errors": errors or [],
    }
