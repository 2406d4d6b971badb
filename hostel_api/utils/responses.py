"""
Response envelope helpers.
Every endpoint answers with {success, data?, count?, message?, error?, details?}.
"""
from typing import Any, Optional
from fastapi import HTTPException, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def envelope(
    success: bool = True,
    data: Any = None,
    count: Optional[int] = None,
    message: Optional[str] = None,
    error: Optional[str] = None,
    details: Any = None,
) -> dict:
    """Build the envelope, leaving out keys that carry no value."""
    body = {"success": success}
    if data is not None:
        body["data"] = data
    if count is not None:
        body["count"] = count
    if message is not None:
        body["message"] = message
    if error is not None:
        body["error"] = error
    if details is not None:
        body["details"] = details
    return jsonable_encoder(body)


def success_response(
    data: Any = None,
    message: Optional[str] = None,
    count: Optional[int] = None,
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=envelope(data=data, count=count, message=message),
    )


def api_error(status_code: int, error: str, details: Any = None) -> HTTPException:
    """
    Build an HTTPException whose detail is already an error envelope.
    The app's HTTPException handler returns dict details unchanged.
    """
    return HTTPException(
        status_code=status_code,
        detail=envelope(success=False, error=error, details=details),
    )


def parse_id(raw: str, label: str) -> int:
    """
    Parse a path or query identifier.

    Raises:
        HTTPException: 400 "Invalid <label> ID" if the value is not an integer
    """
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        raise api_error(status.HTTP_400_BAD_REQUEST, f"Invalid {label} ID")
