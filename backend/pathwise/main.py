import logging
import time
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from pathwise.api.challenges import router as challenges_router
from pathwise.api.onboarding import router as onboarding_router
from pathwise.api.profile import router as profile_router
from pathwise.api.submissions import router as submissions_router
from pathwise.api.verify import router as verify_router
from pathwise.core.admin_sync import sync_admin_users
from pathwise.core.api_response import error_response_payload, get_request_id, success_response_payload
from pathwise.core.metrics import increment_counter, prometheus_text, snapshot_metrics
from pathwise.core.observability import log_http_request
from pathwise.core.security import require_permission
from pathwise.core.settings import get_settings
from pathwise.db.models.user import User
from pathwise.db.session import SessionLocal
from pathwise.services.seed import seed_onboarding

logger = logging.getLogger(__name__)
if not logging.getLogger().handlers:
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type", "x-request-id"]


@asynccontextmanager
async def lifespan(_: FastAPI):
    settings = get_settings()
    if settings.admin_emails or settings.seed_onboarding_on_startup:
        with SessionLocal() as db:
            if settings.admin_emails:
                result = sync_admin_users(db, settings.admin_emails)
                logger.info("admin_sync promoted=%s demoted=%s missing=%s", result.promoted, result.demoted, result.missing)
            if settings.seed_onboarding_on_startup:
                logger.info("onboarding_seed %s", seed_onboarding(db))
    yield


app = FastAPI(title="Pathwise API", lifespan=lifespan)
app.include_router(verify_router)
app.include_router(onboarding_router)
app.include_router(challenges_router)
app.include_router(submissions_router)
app.include_router(profile_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_allow_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=CORS_ALLOW_HEADERS,
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid4().hex
    request.state.request_id = request_id
    started_at = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - started_at) * 1000
    response.headers["X-Request-ID"] = request_id
    if request.url.path != "/metrics/prometheus":
        increment_counter(
            "http_requests_total",
            method=request.method.upper(),
            path=request.url.path,
            status=str(response.status_code),
        )
    log_http_request(logger, request, status_code=response.status_code, duration_ms=duration_ms)
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    message = detail if isinstance(detail, str) else "Request failed"
    increment_counter(
        "http_errors_total",
        code=str(exc.status_code),
        path=request.url.path,
        method=request.method.upper(),
    )
    if exc.status_code >= 500:
        logger.error("http_error request_id=%s status=%s detail=%s", get_request_id(request), exc.status_code, message)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response_payload(
            request,
            code=f"http_{exc.status_code}",
            message=message,
            details=detail,
        ),
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    increment_counter(
        "http_errors_total",
        code="422",
        path=request.url.path,
        method=request.method.upper(),
    )
    logger.info("validation_error request_id=%s path=%s", get_request_id(request), request.url.path)
    return JSONResponse(
        status_code=422,
        content=error_response_payload(
            request,
            code="validation_error",
            message="Validation error",
            details=_jsonable_errors(exc),
        ),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    increment_counter(
        "http_errors_total",
        code="500",
        path=request.url.path,
        method=request.method.upper(),
    )
    logger.exception("Unhandled error request_id=%s", get_request_id(request), exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=error_response_payload(
            request,
            code="internal_error",
            message="Internal server error",
            details=str(exc) or exc.__class__.__name__,
        ),
    )


def _jsonable_errors(exc: RequestValidationError) -> list[dict]:
    # ctx may hold exception instances that JSONResponse cannot encode.
    return [
        {key: value for key, value in error.items() if key in {"type", "loc", "msg", "input"}}
        for error in exc.errors()
    ]


@app.options("/{path:path}")
def preflight(path: str):
    return PlainTextResponse("ok")


@app.get("/health")
def health(request: Request):
    return {"success": True, "status": "ok", "request_id": get_request_id(request)}


@app.get("/metrics")
def metrics(request: Request, _: User = Depends(require_permission("audit.view"))):
    return success_response_payload(request, data={"counters": snapshot_metrics()})


@app.get("/metrics/prometheus")
def metrics_prometheus():
    return PlainTextResponse(content=prometheus_text(), media_type="text/plain; version=0.0.4; charset=utf-8")
