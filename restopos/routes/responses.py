"""
Standardized API response envelope

Successful calls return ``{"success": true, "data": ...}``; failures are
produced by the exception handlers in ``restopos.middleware``.
"""

from typing import Any, Optional

from fastapi.responses import Response


def ok(data: Any = None, message: Optional[str] = None) -> dict[str, Any]:
    payload: dict[str, Any] = {"success": True, "data": data}
    if message:
        payload["message"] = message
    return payload


def attachment(content: bytes, media_type: str, filename: str) -> Response:
    """Binary download (PDF, PNG, XLSX) with a ``Content-Disposition`` header."""
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
