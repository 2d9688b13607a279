import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from pathwise.core.api_response import success_response_payload
from pathwise.core.metrics import increment_counter
from pathwise.core.observability import log_business_event
from pathwise.core.security import get_current_user
from pathwise.db.models.challenge import Challenge
from pathwise.db.models.onboarding_step import OnboardingStep
from pathwise.db.models.user import User
from pathwise.db.session import get_db
from pathwise.schemas.onboarding import CompleteOnboardingIn, OnboardingStepOut, ProgressUpdateIn, StepSubmissionIn
from pathwise.schemas.submission import SubmissionOut
from pathwise.services.onboarding import (
    complete_onboarding,
    find_onboarding_challenge,
    onboarding_progress,
    upsert_step_submission,
)

router = APIRouter(prefix="/onboarding", tags=["onboarding"])
logger = logging.getLogger(__name__)


def _get_challenge_or_404(db: Session, challenge_id: str) -> Challenge:
    challenge = db.get(Challenge, challenge_id)
    if not challenge:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Challenge not found")
    return challenge


@router.get("/steps")
def list_steps(request: Request, db: Session = Depends(get_db)):
    steps = db.query(OnboardingStep).order_by(OnboardingStep.step_number.asc()).all()
    logger.info("onboarding_steps_fetched count=%s", len(steps))
    return success_response_payload(
        request,
        data={
            "steps": [OnboardingStepOut.model_validate(s).model_dump(mode="json") for s in steps],
            "count": len(steps),
        },
    )


@router.get("/progress")
def get_progress(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    increment_counter("onboarding_progress_total", action="read")
    challenge = find_onboarding_challenge(db)
    if not challenge:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Onboarding challenge not found")
    return success_response_payload(request, data=onboarding_progress(db, user=current_user, challenge=challenge))


@router.post("/progress")
def update_progress(
    payload: ProgressUpdateIn,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    increment_counter("onboarding_progress_total", action="update")
    current_user.latest_completed_step = payload.completed_step
    db.commit()
    log_business_event(
        logger,
        request,
        event="onboarding.progress",
        user_id=current_user.id,
        completed_step=payload.completed_step,
    )
    return success_response_payload(
        request,
        data={"latest_completed_step": current_user.latest_completed_step},
        message="Onboarding progress updated successfully",
    )


@router.post("/submissions")
def submit_step(
    payload: StepSubmissionIn,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    challenge = _get_challenge_or_404(db, payload.challenge_id)
    step = db.get(OnboardingStep, payload.step_id)
    if not step:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Onboarding step not found")

    result = upsert_step_submission(
        db,
        user=current_user,
        challenge=challenge,
        step=step,
        submission_data=payload.submission_data,
    )
    outcome = "created" if result.created else "updated"
    increment_counter("onboarding_submission_total", result=outcome)
    log_business_event(
        logger,
        request,
        event="onboarding.submit_step",
        result=outcome,
        user_id=current_user.id,
        step_number=step.step_number,
    )
    body = success_response_payload(
        request,
        data={
            "submission": SubmissionOut.model_validate(result.submission).model_dump(mode="json"),
            "step_info": {"step_number": step.step_number, "step_title": step.title},
        },
        message=f"Submission {outcome} successfully",
    )
    if result.created:
        return JSONResponse(status_code=status.HTTP_201_CREATED, content=body)
    return body


@router.post("/complete")
def complete(
    payload: CompleteOnboardingIn,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    increment_counter("onboarding_complete_total")
    challenge = _get_challenge_or_404(db, payload.challenge_id)
    result = complete_onboarding(db, user=current_user, challenge=challenge)
    log_business_event(
        logger,
        request,
        event="onboarding.complete",
        user_id=current_user.id,
        master_submission_id=result.master.id,
        linked=result.linked_step_submissions,
    )
    return success_response_payload(
        request,
        data={
            "master_submission_id": result.master.id,
            "linked_step_submissions": result.linked_step_submissions,
            "challenge_title": challenge.title,
        },
        message="Onboarding completed successfully",
    )
