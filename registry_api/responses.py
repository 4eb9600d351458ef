"""JSend envelope builders for error responses."""

from typing import Any


def jsend_fail(data: Any) -> dict:
    return {"status": "fail", "data": data}


def jsend_error(message: str) -> dict:
    return {"status": "error", "message": message}
