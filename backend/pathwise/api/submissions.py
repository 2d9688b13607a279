import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from pathwise.core.api_response import success_response_payload
from pathwise.core.metrics import increment_counter
from pathwise.core.observability import log_business_event
from pathwise.core.paging import DEFAULT_PAGE_SIZE, list_or_page
from pathwise.core.security import get_current_user, require_permission
from pathwise.db.models.challenge import Challenge
from pathwise.db.models.submission import Submission
from pathwise.db.models.user import User
from pathwise.db.session import get_db
from pathwise.schemas.submission import ReviewIn, SubmissionCreate, SubmissionOut
from pathwise.services.review import ReviewDecision, review_submission

router = APIRouter(prefix="/submissions", tags=["submissions"])
logger = logging.getLogger(__name__)


def _serialize_submission(submission: Submission) -> dict:
    return SubmissionOut.model_validate(submission).model_dump(mode="json")


def _serialize_pending(submission: Submission) -> dict:
    row = _serialize_submission(submission)
    row["user"] = {"id": submission.user.id, "username": submission.user.username} if submission.user else None
    return row


def _review(
    db: Session,
    request: Request,
    *,
    submission_id: str,
    decision: ReviewDecision,
    feedback: str | None,
    reviewer: User,
) -> dict:
    submission = db.get(Submission, submission_id)
    if not submission:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Submission not found")
    try:
        result = review_submission(db, submission=submission, reviewer=reviewer, decision=decision, feedback=feedback)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    increment_counter("submission_review_total", decision=decision)
    log_business_event(
        logger,
        request,
        event="submissions.review",
        result=decision,
        submission_id=submission_id,
        reviewer_id=reviewer.id,
        xp_awarded=result.xp_awarded,
    )
    return success_response_payload(
        request,
        data={"submission": _serialize_submission(result.submission), "xp_awarded": result.xp_awarded},
    )


@router.post("")
def create_submission(
    payload: SubmissionCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not db.get(Challenge, payload.challenge_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Challenge not found")

    submission = Submission(
        user_id=current_user.id,
        challenge_id=payload.challenge_id,
        solution_url=payload.solution_url,
        submission_type="solution",
        submission_data={"notes": payload.notes} if payload.notes else None,
        status="pending",
    )
    db.add(submission)
    db.commit()
    db.refresh(submission)
    log_business_event(
        logger,
        request,
        event="submissions.create",
        submission_id=submission.id,
        challenge_id=payload.challenge_id,
        user_id=current_user.id,
    )
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=success_response_payload(request, data=_serialize_submission(submission)),
    )


@router.get("/mine")
def list_my_submissions(
    request: Request,
    page: int | None = None,
    page_size: int = DEFAULT_PAGE_SIZE,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = (
        db.query(Submission)
        .filter(Submission.user_id == current_user.id)
        .order_by(Submission.created_at.desc(), Submission.id.asc())
    )
    items, meta = list_or_page(query, page=page, page_size=page_size, serializer=_serialize_submission)
    return success_response_payload(request, data=items, meta=meta)


@router.get("/pending")
def list_pending_submissions(
    request: Request,
    page: int | None = None,
    page_size: int = DEFAULT_PAGE_SIZE,
    db: Session = Depends(get_db),
    _: User = Depends(require_permission("submissions.review")),
):
    query = (
        db.query(Submission)
        .filter(Submission.status == "pending")
        .order_by(Submission.created_at.asc(), Submission.id.asc())
    )
    items, meta = list_or_page(query, page=page, page_size=page_size, serializer=_serialize_pending)
    return success_response_payload(request, data=items, meta=meta)


@router.post("/{submission_id}/approve")
def approve_submission(
    submission_id: str,
    request: Request,
    payload: ReviewIn | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("submissions.review")),
):
    feedback = payload.feedback if payload else None
    return _review(db, request, submission_id=submission_id, decision="approve", feedback=feedback, reviewer=current_user)


@router.post("/{submission_id}/deny")
def deny_submission(
    submission_id: str,
    request: Request,
    payload: ReviewIn | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("submissions.review")),
):
    feedback = payload.feedback if payload else None
    return _review(db, request, submission_id=submission_id, decision="deny", feedback=feedback, reviewer=current_user)
