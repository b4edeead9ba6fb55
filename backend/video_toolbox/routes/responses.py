"""
Response envelope shared by every endpoint.

    {"success": true, "data": ...}
    {"success": false, "error": "...", "details": [...]}
"""

from typing import Any, List, Optional

from fastapi.responses import JSONResponse


def success(data: Any = None, status_code: int = 200, **extra: Any) -> JSONResponse:
    body = {"success": True}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return JSONResponse(status_code=status_code, content=body)


def failure(message: str, status_code: int, details: Optional[List[Any]] = None) -> JSONResponse:
    body = {"success": False, "error": message}
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)
