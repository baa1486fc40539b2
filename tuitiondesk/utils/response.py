"""
Standard API response envelope.

Every endpoint answers with the same shape:
    {"success": bool, "data": ..., "message": str}
plus an "errors" list of {field, message} pairs on validation failures.
"""

from typing import Any, Optional


def success_response(data: Any = None, message: str = "Success") -> dict:
    return {"success": True, "data": data, "message": message}


def error_response(message: str = "Error", data: Any = None, errors: Optional[list] = None) -> dict:
    body = {"success": False, "data": data, "message": message}
    if errors:
        body["errors"] = errors
    return body
