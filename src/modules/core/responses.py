"""JSON envelope helpers: every body carries a ``success`` flag."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from rest_framework import status
from rest_framework.response import Response


def success_response(
    data: Any = None,
    status_code: int = status.HTTP_200_OK,
    **extra: Any,
) -> Response:
    body: Dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return Response(body, status=status_code)


def error_response(
    message: str,
    status_code: int,
    errors: Optional[List[Dict[str, str]]] = None,
) -> Response:
    body: Dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return Response(body, status=status_code)
