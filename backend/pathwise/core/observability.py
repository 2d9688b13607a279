import logging

from fastapi import Request

from pathwise.core.api_response import get_request_id


def _format_fields(fields: dict) -> str:
    return " ".join(f"{key}={value}" for key, value in fields.items())


def log_business_event(
    logger: logging.Logger,
    request: Request,
    *,
    event: str,
    level: int = logging.INFO,
    **fields,
) -> None:
    head = f"event={event} request_id={get_request_id(request)}"
    tail = _format_fields(fields)
    logger.log(level, "business_event %s", f"{head} {tail}" if tail else head)


def log_http_request(
    logger: logging.Logger,
    request: Request,
    *,
    status_code: int,
    duration_ms: float,
) -> None:
    logger.info(
        "http_request request_id=%s method=%s path=%s status=%s duration_ms=%.2f",
        get_request_id(request),
        request.method,
        request.url.path,
        status_code,
        duration_ms,
    )
