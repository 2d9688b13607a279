import logging

from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from pathwise.core.api_response import success_response_payload
from pathwise.core.metrics import increment_counter
from pathwise.core.observability import log_business_event
from pathwise.core.security import get_current_user
from pathwise.core.settings import Settings, get_settings
from pathwise.core.verification import check_code
from pathwise.db.models.user import User
from pathwise.schemas.verify import VerifyIn

router = APIRouter(tags=["verify"])
logger = logging.getLogger(__name__)


async def read_verify_body(request: Request) -> VerifyIn:
    # Declared after get_current_user so a missing credential wins over a broken body.
    try:
        body = await request.json()
    except ValueError as exc:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body",), "msg": "JSON decode error", "input": {}}]
        ) from exc
    try:
        return VerifyIn.model_validate(body)
    except ValidationError as exc:
        raise RequestValidationError(
            [{**error, "loc": ("body", *error["loc"])} for error in exc.errors(include_url=False)]
        ) from exc


@router.post("/verify")
def verify_code(
    request: Request,
    current_user: User = Depends(get_current_user),
    payload: VerifyIn = Depends(read_verify_body),
    settings: Settings = Depends(get_settings),
):
    verified = check_code(
        payload.code,
        subject=settings.verify_subject_id,
        salt=settings.require_verify_salt(),
    )
    result = "success" if verified else "invalid_code"
    increment_counter("verify_total", result=result)
    log_business_event(logger, request, event="verify.check", result=result, user_id=current_user.id)
    # TODO: record challenge completion for current_user once the target table and idempotency rules are agreed.
    if verified:
        return success_response_payload(request, message="Verification successful")
    return success_response_payload(request, success=False, message="Invalid verification code")
