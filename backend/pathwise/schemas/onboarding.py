from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field


def _alias(snake: str, camel: str) -> AliasChoices:
    # The web client still sends camelCase keys.
    return AliasChoices(snake, camel)


class OnboardingStepOut(BaseModel):
    id: str
    step_number: int
    title: str
    description: str | None = None
    prompt_instructions: str | None = None
    video_url: str | None = None
    submission_type: str
    submission_label: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class StepSubmissionIn(BaseModel):
    challenge_id: str = Field(min_length=1, validation_alias=_alias("challenge_id", "challengeId"))
    step_id: str = Field(min_length=1, validation_alias=_alias("step_id", "stepId"))
    submission_data: dict = Field(validation_alias=_alias("submission_data", "submissionData"))


class CompleteOnboardingIn(BaseModel):
    challenge_id: str = Field(min_length=1, validation_alias=_alias("challenge_id", "challengeId"))


class ProgressUpdateIn(BaseModel):
    completed_step: int = Field(ge=0, strict=True)
