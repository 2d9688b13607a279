import os
from dataclasses import dataclass
from functools import lru_cache

from pathwise.core.admin_sync import parse_admin_emails


def _parse_flag(raw: str) -> bool:
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _parse_origins(raw: str) -> list[str]:
    origins = [x.strip() for x in raw.split(",") if x.strip()]
    return origins or ["*"]


@dataclass(frozen=True)
class Settings:
    database_url: str
    secret_key: str | None
    access_token_expire_minutes: int
    verify_subject_id: str
    verify_salt: str | None
    log_level: str
    cors_allow_origins: list[str]
    admin_emails: list[str]
    seed_onboarding_on_startup: bool

    def require_secret_key(self) -> str:
        if not self.secret_key:
            raise RuntimeError("SECRET_KEY is not set")
        return self.secret_key

    def require_verify_salt(self) -> str:
        if not self.verify_salt:
            raise RuntimeError("VERIFY_SALT is not set")
        return self.verify_salt


def load_settings() -> Settings:
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///./pathwise.db"),
        secret_key=os.getenv("SECRET_KEY"),
        access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")),
        verify_subject_id=os.getenv("VERIFY_SUBJECT_ID", "pathwise-verify"),
        verify_salt=os.getenv("VERIFY_SALT"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_allow_origins=_parse_origins(os.getenv("CORS_ALLOW_ORIGINS", "*")),
        admin_emails=parse_admin_emails(os.getenv("ADMIN_EMAILS", "")),
        seed_onboarding_on_startup=_parse_flag(os.getenv("SEED_ONBOARDING_ON_STARTUP", "false")),
    )


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, read from the environment once."""
    return load_settings()
