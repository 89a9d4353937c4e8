from __future__ import annotations

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def envelope(status: int, message: str, data: Any = None, error: str | None = None) -> dict:
    body: dict[str, Any] = {"status": status, "message": message}
    if data is not None:
        body["data"] = data
    if error:
        body["error"] = error
    return body


def api_response(
    status: int,
    message: str,
    data: Any = None,
    error: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content=jsonable_encoder(envelope(status, message, data, error)),
        headers=headers,
    )
