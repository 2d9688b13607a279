from dataclasses import dataclass

from sqlalchemy.orm import Session

from pathwise.db.models.user import User


def normalize_email(value: str) -> str:
    return value.strip().lower()


def parse_admin_emails(raw: str) -> list[str]:
    emails = [normalize_email(x) for x in raw.split(",") if x.strip()]
    return sorted(set(emails))


@dataclass
class AdminSyncResult:
    promoted: int = 0
    demoted: int = 0
    missing: int = 0


def sync_admin_users(db: Session, admin_emails: list[str]) -> AdminSyncResult:
    """Make the admin role match ``admin_emails``.

    Accounts are provisioned by the identity provider, so unknown emails are
    only counted. Demoted admins fall back to ``learner``; reviewers are kept.
    """
    result = AdminSyncResult()
    target = set(admin_emails)
    by_email = {u.email.lower(): u for u in db.query(User).all()}

    for email, user in by_email.items():
        if user.role == "admin" and email not in target:
            user.role = "learner"
            result.demoted += 1

    for email in admin_emails:
        user = by_email.get(email)
        if user is None:
            result.missing += 1
            continue
        if user.role != "admin" or user.is_blocked:
            user.role = "admin"
            user.is_blocked = False
            result.promoted += 1

    db.commit()
    return result
