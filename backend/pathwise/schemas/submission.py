from datetime import datetime

from pydantic import BaseModel, Field


class SubmissionCreate(BaseModel):
    challenge_id: str = Field(min_length=1)
    solution_url: str = Field(min_length=1, max_length=2000)
    notes: str | None = Field(default=None, max_length=5000)


class ReviewIn(BaseModel):
    feedback: str | None = Field(default=None, max_length=5000)


class SubmissionOut(BaseModel):
    id: str
    user_id: str
    challenge_id: str
    onboarding_step_id: str | None = None
    parent_submission_id: str | None = None
    submission_type: str
    submission_data: dict | None = None
    solution_url: str | None = None
    status: str
    feedback: str | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
