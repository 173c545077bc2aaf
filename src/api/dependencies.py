"""Shared helpers for API routes: event parsing, error mapping, request logging."""

from contextlib import contextmanager
from typing import Any, Iterator

from fastapi import HTTPException, Request, status
from pydantic import ValidationError

from api.logging import RequestLog, log_request
from api.models.responses import ErrorCodes
from core.config import MAX_EVENTS_PER_REQUEST
from core.errors import EngineError, InvalidWindow
from core.logging_config import get_logger
from core.validation import validate_templates
from models.events import EventTemplate

logger = get_logger(__name__)


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def http_error(status_code: int, error: str, code: str, details: list[str] | None = None) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={"error": error, "code": code, "details": details or []},
    )


def parse_templates(records: list[dict[str, Any]]) -> list[EventTemplate]:
    """
    Parse raw event records into templates.

    Raises:
        HTTPException: 413 when the request carries too many events
        EngineError: on malformed patterns, instants or duplicate ids
        ValidationError: on records with missing or mistyped fields
    """
    if len(records) > MAX_EVENTS_PER_REQUEST:
        raise http_error(
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            f"Request exceeds {MAX_EVENTS_PER_REQUEST} events",
            ErrorCodes.TOO_MANY_EVENTS,
            [f"Received: {len(records)}"],
        )
    templates = [EventTemplate.model_validate(record) for record in records]
    return validate_templates(templates)


def engine_error_status(exc: EngineError) -> int:
    if isinstance(exc, InvalidWindow):
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_422_UNPROCESSABLE_ENTITY


def validation_details(exc: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    ]


@contextmanager
def logged_request(request_log: RequestLog) -> Iterator[RequestLog]:
    """
    Translate engine and validation errors into HTTP errors and always log.

    The route records success itself via ``request_log.finish(200)``.
    """
    try:
        yield request_log

    except HTTPException as e:
        if isinstance(e.detail, dict):
            request_log.finish(
                e.status_code,
                e.detail.get("code"),
                e.detail.get("error"),
                e.detail.get("details", []),
            )
        else:
            request_log.finish(e.status_code, error_message=str(e.detail))
        raise

    except EngineError as e:
        status_code = engine_error_status(e)
        request_log.finish(status_code, e.code, e.message, e.details)
        raise http_error(status_code, e.message, e.code, e.details) from e

    except ValidationError as e:
        details = validation_details(e)
        request_log.finish(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            ErrorCodes.VALIDATION_ERROR,
            "Event record validation failed",
            details,
        )
        raise http_error(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "Event record validation failed",
            ErrorCodes.VALIDATION_ERROR,
            details,
        ) from e

    except Exception as e:
        request_log.finish(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ErrorCodes.INTERNAL_ERROR,
            str(e),
        )
        logger.exception("Unhandled error", endpoint=request_log.endpoint)
        raise http_error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            ErrorCodes.INTERNAL_ERROR,
        ) from e

    finally:
        # Don't fail the request if logging fails
        try:
            log_request(request_log)
        except Exception as e:
            logger.warning("Request log write failed", error=str(e), request_id=request_log.request_id)
