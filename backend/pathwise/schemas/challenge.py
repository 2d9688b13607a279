from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

Difficulty = Literal["beginner", "intermediate", "advanced", "expert"]
ChallengeStatus = Literal["pending", "approved", "rejected"]


class ChallengeCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = ""
    difficulty: Difficulty = "beginner"
    challenge_type: str = Field(default="build", max_length=30)
    requirements: list[str] = Field(default_factory=list)
    xp_reward: int | None = Field(default=None, ge=0)


class ChallengeUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    difficulty: Difficulty | None = None
    challenge_type: str | None = Field(default=None, max_length=30)
    requirements: list[str] | None = None
    xp_reward: int | None = Field(default=None, ge=0)
    status: ChallengeStatus | None = None

    # Omit a field to leave it alone; only xp_reward may be cleared with null.
    @field_validator("title", "description", "difficulty", "challenge_type", "requirements", "status")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class ChallengeRequestIn(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = ""
    difficulty: Difficulty = "beginner"
    requirements: list[str] = Field(default_factory=list)


class ChallengeOut(BaseModel):
    id: str
    title: str
    description: str
    difficulty: str
    challenge_type: str
    requirements: list[str]
    xp_reward: int | None = None
    status: str
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
