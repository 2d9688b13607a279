from pathwise.db.models.challenge import Challenge
from pathwise.db.models.onboarding_step import OnboardingStep
from pathwise.db.models.submission import Submission
from pathwise.db.models.user import User

__all__ = ["Challenge", "OnboardingStep", "Submission", "User"]
