from dataclasses import dataclass
from typing import Literal

from sqlalchemy.orm import Session

from pathwise.db.base import utc_now_naive
from pathwise.db.models.challenge import Challenge
from pathwise.db.models.submission import Submission
from pathwise.db.models.user import User

ReviewDecision = Literal["approve", "deny"]

REVIEWABLE_STATUS = "pending"
STATUS_BY_DECISION: dict[str, str] = {
    "approve": "approved",
    "deny": "denied",
}


@dataclass
class ReviewResult:
    submission: Submission
    xp_awarded: int


def review_submission(
    db: Session,
    *,
    submission: Submission,
    reviewer: User,
    decision: ReviewDecision,
    feedback: str | None = None,
) -> ReviewResult:
    if submission.status != REVIEWABLE_STATUS:
        raise ValueError(f"Submission is already {submission.status}")

    now = utc_now_naive()
    submission.status = STATUS_BY_DECISION[decision]
    submission.reviewed_by = reviewer.id
    submission.reviewed_at = now
    submission.updated_at = now
    if feedback is not None:
        submission.feedback = feedback

    xp_awarded = 0
    if decision == "approve":
        challenge = db.get(Challenge, submission.challenge_id)
        xp_awarded = int(challenge.xp_reward or 0) if challenge else 0
        submitter = db.get(User, submission.user_id)
        if submitter is not None:
            submitter.total_xp = int(submitter.total_xp or 0) + xp_awarded

    db.commit()
    db.refresh(submission)
    return ReviewResult(submission=submission, xp_awarded=xp_awarded)
