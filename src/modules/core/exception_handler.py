"""Project-wide DRF exception handler.

Renders every failure as ``{"success": false, "message": ..., "errors"?: [...]}``:

- ``DomainError`` subclasses map to 400 / 404 / 409 / 503 by kind.
- Pydantic ``ValidationError`` raised while building a DTO becomes a 400
  with one entry per offending field.
- Database connectivity errors that escape the repositories become 503.
- DRF's own exceptions (parse errors, 405, ...) keep their status code.
- Anything else is an internal error: logged with its traceback and
  reported without detail unless ``DEBUG`` is on.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.conf import settings
from django.db import InterfaceError, OperationalError
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

from modules.core.exceptions import (
    Conflict,
    DomainError,
    EntityNotFound,
    StorageUnavailable,
    ValidationFailed,
)
from modules.core.responses import error_response

logger = structlog.get_logger(__name__)

STATUS_BY_KIND = (
    (ValidationFailed, status.HTTP_400_BAD_REQUEST),
    (EntityNotFound, status.HTTP_404_NOT_FOUND),
    (Conflict, status.HTTP_409_CONFLICT),
    (StorageUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
)

_VALUE_ERROR_PREFIX = "Value error, "


def pydantic_errors(exc: PydanticValidationError) -> List[Dict[str, str]]:
    """Flatten a Pydantic error into ``[{"field": ..., "message": ...}]``."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "non_field_errors"
        message = error["msg"]
        if message.startswith(_VALUE_ERROR_PREFIX):
            message = message[len(_VALUE_ERROR_PREFIX) :]
        errors.append({"field": field, "message": message})
    return errors


def _drf_errors(data: Any, prefix: str = "") -> List[Dict[str, str]]:
    if isinstance(data, dict):
        errors = []
        for key, value in data.items():
            name = f"{prefix}.{key}" if prefix else str(key)
            errors.extend(_drf_errors(value, name))
        return errors
    if isinstance(data, list):
        errors = []
        for item in data:
            errors.extend(_drf_errors(item, prefix))
        return errors
    return [{"field": prefix or "non_field_errors", "message": str(data)}]


def _status_for(exc: DomainError) -> int:
    for kind, status_code in STATUS_BY_KIND:
        if isinstance(exc, kind):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def api_exception_handler(exc: Exception, context: Dict[str, Any]) -> Optional[Response]:
    view = context.get("view")
    log = logger.bind(
        view=view.__class__.__name__ if view else None,
        exception=exc.__class__.__name__,
    )

    if isinstance(exc, DomainError):
        status_code = _status_for(exc)
        log.info("api.domain_error", status_code=status_code, message=exc.message)
        set_rollback()
        return error_response(exc.message, status_code, exc.errors)

    if isinstance(exc, PydanticValidationError):
        errors = pydantic_errors(exc)
        log.info("api.validation_error", fields=[e["field"] for e in errors])
        return error_response(
            "Validation failed.", status.HTTP_400_BAD_REQUEST, errors
        )

    if isinstance(exc, (OperationalError, InterfaceError)):
        log.error("api.storage_unavailable", error=str(exc))
        set_rollback()
        return error_response(
            StorageUnavailable.default_message,
            status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    response = exception_handler(exc, context)
    if response is not None:
        data = response.data
        if isinstance(data, dict) and "detail" in data:
            return error_response(str(data["detail"]), response.status_code)
        return error_response(
            "Validation failed.", response.status_code, _drf_errors(data)
        )

    log.exception("api.unhandled_error")
    set_rollback()
    message = str(exc) if settings.DEBUG else "Internal server error."
    return error_response(message, status.HTTP_500_INTERNAL_SERVER_ERROR)
