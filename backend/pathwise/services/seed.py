import logging

from sqlalchemy.orm import Session

from pathwise.db.models.challenge import ONBOARDING_CHALLENGE_TYPE, Challenge
from pathwise.db.models.onboarding_step import OnboardingStep
from pathwise.db.session import SessionLocal

logger = logging.getLogger(__name__)

ONBOARDING_CHALLENGE = {
    "title": "Platform Onboarding",
    "description": "Complete the onboarding steps to unlock the challenge catalogue.",
    "difficulty": "beginner",
    "challenge_type": ONBOARDING_CHALLENGE_TYPE,
    "requirements": ["Complete every onboarding step"],
    "xp_reward": 100,
    "status": "approved",
}

DEFAULT_ONBOARDING_STEPS: list[dict] = [
    {
        "step_number": 1,
        "title": "Introduction to AI Prompts",
        "description": "Learn the basics of writing effective AI prompts",
        "prompt_instructions": (
            "Watch the video and learn about creating effective prompts for AI tools. "
            "Then write a brief summary of what you learned."
        ),
        "submission_type": "text",
        "submission_label": "Write your summary of AI prompt basics",
    },
    {
        "step_number": 2,
        "title": "Building a Landing Page",
        "description": "Use a no-code tool to build a simple landing page",
        "prompt_instructions": (
            "Follow the tutorial to create a landing page using a no-code tool like Webflow, "
            "Framer, or similar. Submit the URL to your completed page."
        ),
        "submission_type": "url",
        "submission_label": "Submit your landing page URL",
    },
    {
        "step_number": 3,
        "title": "Final Review",
        "description": "Record a short video explaining your creation",
        "prompt_instructions": (
            "Create a short video (2-3 minutes) explaining your landing page and what you learned "
            "during this onboarding process. Upload to YouTube or similar platform."
        ),
        "submission_type": "url",
        "submission_label": "Submit your video URL",
    },
]


def seed_onboarding(db: Session, steps: list[dict] | None = None) -> dict:
    """Insert or refresh onboarding steps (keyed by step_number) and the onboarding challenge."""
    steps = DEFAULT_ONBOARDING_STEPS if steps is None else steps
    existing = {s.step_number: s for s in db.query(OnboardingStep).all()}
    created = updated = 0
    for data in steps:
        step = existing.get(data["step_number"])
        if step is None:
            db.add(OnboardingStep(**data))
            created += 1
            continue
        for field, value in data.items():
            setattr(step, field, value)
        updated += 1

    challenge_created = False
    if not db.query(Challenge).filter(Challenge.challenge_type == ONBOARDING_CHALLENGE_TYPE).first():
        db.add(Challenge(**ONBOARDING_CHALLENGE))
        challenge_created = True

    db.commit()
    return {"steps_created": created, "steps_updated": updated, "challenge_created": challenge_created}


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    with SessionLocal() as session:
        logger.info("onboarding_seed %s", seed_onboarding(session))
