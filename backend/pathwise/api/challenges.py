import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from pathwise.core.api_response import success_response_payload
from pathwise.core.metrics import increment_counter
from pathwise.core.observability import log_business_event
from pathwise.core.paging import DEFAULT_PAGE_SIZE, list_or_page
from pathwise.core.security import get_current_user, require_permission
from pathwise.db.models.challenge import USER_REQUESTED_CHALLENGE_TYPE, Challenge
from pathwise.db.models.user import User
from pathwise.db.session import get_db
from pathwise.schemas.challenge import ChallengeCreate, ChallengeOut, ChallengeRequestIn, ChallengeUpdate

router = APIRouter(prefix="/challenges", tags=["challenges"])
logger = logging.getLogger(__name__)


def _serialize_challenge(challenge: Challenge) -> dict:
    return ChallengeOut.model_validate(challenge).model_dump(mode="json")


def _get_challenge_or_404(db: Session, challenge_id: str) -> Challenge:
    challenge = db.get(Challenge, challenge_id)
    if not challenge:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Challenge not found")
    return challenge


def _set_request_status(
    db: Session,
    request: Request,
    *,
    challenge_id: str,
    new_status: str,
    actor: User,
) -> dict:
    challenge = _get_challenge_or_404(db, challenge_id)
    if challenge.challenge_type != USER_REQUESTED_CHALLENGE_TYPE:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Only challenge requests can be approved or rejected")
    challenge.status = new_status
    db.commit()
    db.refresh(challenge)
    increment_counter("challenge_action_total", action=new_status)
    log_business_event(
        logger,
        request,
        event="challenges.review",
        result=new_status,
        challenge_id=challenge.id,
        actor_id=actor.id,
    )
    return success_response_payload(request, data=_serialize_challenge(challenge))


@router.get("")
def list_challenges(
    request: Request,
    status_filter: str | None = Query(default=None, alias="status"),
    difficulty: str | None = None,
    page: int | None = None,
    page_size: int = DEFAULT_PAGE_SIZE,
    db: Session = Depends(get_db),
):
    query = db.query(Challenge).filter(Challenge.challenge_type != USER_REQUESTED_CHALLENGE_TYPE)
    if status_filter:
        query = query.filter(Challenge.status == status_filter)
    if difficulty:
        query = query.filter(Challenge.difficulty == difficulty.lower())
    query = query.order_by(Challenge.created_at.desc(), Challenge.id.asc())
    items, meta = list_or_page(query, page=page, page_size=page_size, serializer=_serialize_challenge)
    return success_response_payload(request, data=items, meta=meta)


@router.get("/requests")
def list_challenge_requests(
    request: Request,
    db: Session = Depends(get_db),
    _: User = Depends(require_permission("challenges.manage")),
):
    requests = (
        db.query(Challenge)
        .filter(
            Challenge.challenge_type == USER_REQUESTED_CHALLENGE_TYPE,
            Challenge.status == "pending",
        )
        .order_by(Challenge.created_at.asc())
        .all()
    )
    return success_response_payload(request, data=[_serialize_challenge(c) for c in requests])


@router.post("/requests")
def request_challenge(
    payload: ChallengeRequestIn,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    challenge = Challenge(
        **payload.model_dump(),
        challenge_type=USER_REQUESTED_CHALLENGE_TYPE,
        status="pending",
        created_by=current_user.id,
    )
    db.add(challenge)
    db.commit()
    db.refresh(challenge)
    increment_counter("challenge_action_total", action="request")
    log_business_event(logger, request, event="challenges.request", challenge_id=challenge.id, user_id=current_user.id)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=success_response_payload(request, data=_serialize_challenge(challenge)),
    )


@router.get("/{challenge_id}")
def get_challenge(challenge_id: str, request: Request, db: Session = Depends(get_db)):
    return success_response_payload(request, data=_serialize_challenge(_get_challenge_or_404(db, challenge_id)))


@router.post("")
def create_challenge(
    payload: ChallengeCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("challenges.manage")),
):
    # Challenges created by staff are published straight away.
    challenge = Challenge(**payload.model_dump(), status="approved", created_by=current_user.id)
    db.add(challenge)
    db.commit()
    db.refresh(challenge)
    increment_counter("challenge_action_total", action="create")
    log_business_event(logger, request, event="challenges.create", challenge_id=challenge.id, actor_id=current_user.id)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=success_response_payload(request, data=_serialize_challenge(challenge)),
    )


@router.patch("/{challenge_id}")
def update_challenge(
    challenge_id: str,
    payload: ChallengeUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("challenges.manage")),
):
    challenge = _get_challenge_or_404(db, challenge_id)
    changes = payload.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(challenge, field, value)
    db.commit()
    db.refresh(challenge)
    increment_counter("challenge_action_total", action="update")
    log_business_event(
        logger,
        request,
        event="challenges.update",
        challenge_id=challenge.id,
        actor_id=current_user.id,
        fields=",".join(sorted(changes)) or "-",
    )
    return success_response_payload(request, data=_serialize_challenge(challenge))


@router.delete("/{challenge_id}")
def delete_challenge(
    challenge_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("challenges.manage")),
):
    challenge = _get_challenge_or_404(db, challenge_id)
    db.delete(challenge)
    db.commit()
    increment_counter("challenge_action_total", action="delete")
    log_business_event(logger, request, event="challenges.delete", challenge_id=challenge_id, actor_id=current_user.id)
    return success_response_payload(request, data={"id": challenge_id})


@router.post("/{challenge_id}/approve")
def approve_challenge(
    challenge_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("challenges.manage")),
):
    return _set_request_status(db, request, challenge_id=challenge_id, new_status="approved", actor=current_user)


@router.post("/{challenge_id}/reject")
def reject_challenge(
    challenge_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("challenges.manage")),
):
    return _set_request_status(db, request, challenge_id=challenge_id, new_status="rejected", actor=current_user)
