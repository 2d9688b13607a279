from dataclasses import dataclass

from sqlalchemy.orm import Session

from pathwise.db.base import utc_now_naive
from pathwise.db.models.challenge import ONBOARDING_CHALLENGE_TYPE, USER_REQUESTED_CHALLENGE_TYPE, Challenge
from pathwise.db.models.onboarding_step import OnboardingStep
from pathwise.db.models.submission import Submission
from pathwise.db.models.user import User

STEP_COMPLETED_STATUS = "completed_step"
MASTER_PENDING_STATUS = "pending_review"


@dataclass
class StepSubmissionResult:
    submission: Submission
    created: bool


@dataclass
class CompletionResult:
    master: Submission
    linked_step_submissions: int


def find_onboarding_challenge(db: Session) -> Challenge | None:
    challenge = (
        db.query(Challenge)
        .filter(Challenge.challenge_type == ONBOARDING_CHALLENGE_TYPE)
        .order_by(Challenge.created_at.asc(), Challenge.id.asc())
        .first()
    )
    if challenge is not None:
        return challenge
    # Older deployments never tagged the onboarding challenge; use the first non-request one.
    return (
        db.query(Challenge)
        .filter(Challenge.challenge_type != USER_REQUESTED_CHALLENGE_TYPE)
        .order_by(Challenge.created_at.asc(), Challenge.id.asc())
        .first()
    )


def onboarding_progress(db: Session, *, user: User, challenge: Challenge) -> dict:
    submissions = (
        db.query(Submission)
        .filter(
            Submission.user_id == user.id,
            Submission.challenge_id == challenge.id,
            Submission.status == STEP_COMPLETED_STATUS,
            Submission.onboarding_step_id.is_not(None),
        )
        .order_by(Submission.created_at.desc())
        .all()
    )

    completed_steps = [
        {
            "step_id": sub.onboarding_step_id,
            "step_number": sub.onboarding_step.step_number,
            "step_title": sub.onboarding_step.title,
            "completed_at": sub.created_at.isoformat(),
        }
        for sub in submissions
        if sub.onboarding_step is not None
    ]
    highest = max((step["step_number"] for step in completed_steps), default=0)
    return {
        "challenge_id": challenge.id,
        "completed_steps": completed_steps,
        "completed_step_ids": [step["step_id"] for step in completed_steps],
        "highest_completed_step": highest,
        "current_step_number": highest + 1,
        "total_completed_steps": len(completed_steps),
    }


def upsert_step_submission(
    db: Session,
    *,
    user: User,
    challenge: Challenge,
    step: OnboardingStep,
    submission_data: dict,
) -> StepSubmissionResult:
    existing = (
        db.query(Submission)
        .filter(
            Submission.user_id == user.id,
            Submission.challenge_id == challenge.id,
            Submission.onboarding_step_id == step.id,
        )
        .order_by(Submission.created_at.desc())
        .first()
    )
    if existing is not None:
        existing.submission_data = submission_data
        existing.status = STEP_COMPLETED_STATUS
        existing.updated_at = utc_now_naive()
        db.commit()
        db.refresh(existing)
        return StepSubmissionResult(submission=existing, created=False)

    submission = Submission(
        user_id=user.id,
        challenge_id=challenge.id,
        onboarding_step_id=step.id,
        submission_data=submission_data,
        status=STEP_COMPLETED_STATUS,
        submission_type="onboarding_step",
    )
    db.add(submission)
    db.commit()
    db.refresh(submission)
    return StepSubmissionResult(submission=submission, created=True)


def complete_onboarding(db: Session, *, user: User, challenge: Challenge) -> CompletionResult:
    """Create or refresh the master submission and attach step submissions to it.

    The master row has neither a step nor a parent. Step rows that already
    belong to a master are left alone.
    """
    master = (
        db.query(Submission)
        .filter(
            Submission.user_id == user.id,
            Submission.challenge_id == challenge.id,
            Submission.onboarding_step_id.is_(None),
            Submission.parent_submission_id.is_(None),
        )
        .order_by(Submission.created_at.asc())
        .first()
    )
    if master is not None:
        master.status = MASTER_PENDING_STATUS
    else:
        master = Submission(
            user_id=user.id,
            challenge_id=challenge.id,
            status=MASTER_PENDING_STATUS,
            submission_type="onboarding_complete",
            submission_data={
                "type": "onboarding_completion",
                "completed_at": utc_now_naive().isoformat(),
                "challenge_title": challenge.title,
            },
        )
        db.add(master)
    db.flush()

    step_submissions = (
        db.query(Submission)
        .filter(
            Submission.user_id == user.id,
            Submission.challenge_id == challenge.id,
            Submission.onboarding_step_id.is_not(None),
            Submission.parent_submission_id.is_(None),
        )
        .all()
    )
    for sub in step_submissions:
        sub.parent_submission_id = master.id

    db.commit()
    db.refresh(master)
    return CompletionResult(master=master, linked_step_submissions=len(step_submissions))
