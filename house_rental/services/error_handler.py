"""
Error response formatting shared by every exception handler and the request middleware.

Every failure leaves the API as::

    {"error": {"code", "message", "timestamp", "request_id", "details"?}}
"""

from typing import Dict, Any, Optional, List, Mapping
from datetime import datetime, timezone
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from house_rental.config import get_settings
from house_rental.utils.exceptions import APIException, ValidationError
import logging
import traceback
import uuid

logger = logging.getLogger(__name__)

# Error codes for framework exceptions that never pass through APIException
HTTP_ERROR_CODES = {404: "NOT_FOUND", 405: "METHOD_NOT_ALLOWED", 413: "PAYLOAD_TOO_LARGE"}

# Client-facing text for 500s outside development
GENERIC_SERVER_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."

# Substrings of driver messages mapped to a client-safe explanation
CONSTRAINT_MESSAGES = (
    ("unique", "Duplicate value for unique field"),
    ("foreign key", "Referenced record does not exist"),
    ("not null", "Required field cannot be empty"),
    ("check constraint", "Value does not meet validation requirements"),
)


class ErrorHandlerService:
    """Builds error envelopes and logs each failure once with its request id."""

    @staticmethod
    def format_error_response(
        error_code: str,
        message: str,
        details: Optional[Any] = None,
        request_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Build the error envelope.

        Args:
            error_code: Machine-readable code such as NOT_FOUND
            message: Human-readable message
            details: Field errors or debugging data; omitted when empty
            request_id: Id assigned by the request middleware
        """
        error: Dict[str, Any] = {
            "code": error_code,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "request_id": request_id,
        }
        if details:
            error["details"] = details
        return {"error": error}

    @staticmethod
    def _respond(
        request_id: str,
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[Any] = None,
        headers: Optional[Mapping[str, str]] = None
    ) -> JSONResponse:
        body = ErrorHandlerService.format_error_response(
            error_code=error_code,
            message=message,
            details=details,
            request_id=request_id
        )
        return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)

    @staticmethod
    def _context(request: Optional[Request], **extra: Any) -> Dict[str, Any]:
        return {
            "request_id": ErrorHandlerService._get_request_id(request),
            "path": request.url.path if request else None,
            **extra,
        }

    @staticmethod
    def handle_api_exception(
        exception: APIException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Raised domain errors keep their status code and error code.
        A 500 detail is shown to clients only in development.
        """
        context = ErrorHandlerService._context(
            request,
            error_code=exception.error_code,
            status_code=exception.status_code
        )
        log = logger.error if exception.status_code >= 500 else logger.warning
        log(f"[{context['request_id']}] {exception.status_code} {exception.error_code}: {exception.detail}", extra=context)

        details = exception.field_errors if isinstance(exception, ValidationError) else None
        message = exception.detail
        if exception.status_code == 500 and not get_settings().is_development:
            message = GENERIC_SERVER_ERROR_MESSAGE
        return ErrorHandlerService._respond(
            context["request_id"],
            exception.status_code,
            exception.error_code or "API_ERROR",
            message,
            details=details,
            headers=exception.headers
        )

    @staticmethod
    def handle_validation_error(
        exception: Any,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Request and model validation failures, answered with 400 and one entry per field.
        ``exception`` is anything exposing pydantic's ``errors()``.
        """
        details: List[Dict[str, Any]] = [
            {
                "field": " -> ".join(str(part) for part in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
                "input": error.get("input"),
            }
            for error in exception.errors()
        ]

        context = ErrorHandlerService._context(request, error_count=len(details))
        logger.warning(f"[{context['request_id']}] validation failed on {len(details)} field(s)", extra=context)

        body = ErrorHandlerService.format_error_response(
            error_code="VALIDATION_ERROR",
            message="Request validation failed",
            details=details,
            request_id=context["request_id"]
        )
        # Raw multipart or body input may arrive as bytes
        content = jsonable_encoder(body, custom_encoder={bytes: lambda b: b.decode(errors="replace")})
        return JSONResponse(status_code=400, content=content)

    @staticmethod
    def handle_database_error(
        exception: SQLAlchemyError,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """Integrity violations answer 409; any other database failure answers 500."""
        if isinstance(exception, IntegrityError):
            status_code, error_code = 409, "INTEGRITY_ERROR"
            constraint = ErrorHandlerService._extract_constraint_info(exception)
            message = f"Constraint violation: {constraint}" if constraint else "Data integrity constraint violation"
        else:
            status_code, error_code = 500, "DATABASE_ERROR"
            message = "Database operation failed"

        context = ErrorHandlerService._context(
            request,
            error_code=error_code,
            exception_type=type(exception).__name__
        )
        logger.error(f"[{context['request_id']}] {error_code}: {exception}", extra=context, exc_info=True)

        return ErrorHandlerService._respond(context["request_id"], status_code, error_code, message)

    @staticmethod
    def handle_http_exception(
        exception: StarletteHTTPException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """Framework errors such as unmatched routes and wrong methods."""
        context = ErrorHandlerService._context(request, status_code=exception.status_code)
        logger.warning(f"[{context['request_id']}] HTTP {exception.status_code}: {exception.detail}", extra=context)

        return ErrorHandlerService._respond(
            context["request_id"],
            exception.status_code,
            HTTP_ERROR_CODES.get(exception.status_code, f"HTTP_{exception.status_code}"),
            str(exception.detail),
            headers=getattr(exception, "headers", None)
        )

    @staticmethod
    def handle_unexpected_error(
        exception: Exception,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Anything unhandled becomes a 500 with a generic message.
        The traceback is attached only in development.
        """
        context = ErrorHandlerService._context(request, exception_type=type(exception).__name__)
        logger.error(
            f"[{context['request_id']}] unhandled {type(exception).__name__}: {exception}",
            extra=context,
            exc_info=exception
        )

        details = None
        if get_settings().is_development:
            details = {
                "exception": type(exception).__name__,
                "traceback": "".join(
                    traceback.format_exception(type(exception), exception, exception.__traceback__)
                ),
            }

        return ErrorHandlerService._respond(
            context["request_id"],
            500,
            "INTERNAL_SERVER_ERROR",
            GENERIC_SERVER_ERROR_MESSAGE,
            details=details
        )

    @staticmethod
    def _get_request_id(request: Optional[Request]) -> str:
        """Id set by RequestContextMiddleware, or a fresh one outside a request."""
        request_id = getattr(request.state, "request_id", None) if request is not None else None
        return request_id or str(uuid.uuid4())[:8]

    @staticmethod
    def _extract_constraint_info(exception: IntegrityError) -> Optional[str]:
        driver_message = str(exception.orig).lower()
        for needle, message in CONSTRAINT_MESSAGES:
            if needle in driver_message:
                return message
        return None
