from typing import Literal

Permission = Literal[
    "submissions.review",
    "challenges.manage",
    "audit.view",
]

ROLE_ORDER = ["learner", "reviewer", "admin"]

PERMISSIONS_BY_ROLE: dict[str, set[Permission]] = {
    "learner": set(),
    "reviewer": {"submissions.review"},
    "admin": {"submissions.review", "challenges.manage", "audit.view"},
}

PERMISSION_LABELS: dict[Permission, str] = {
    "submissions.review": "Review learner submissions",
    "challenges.manage": "Create, edit and approve challenges",
    "audit.view": "View service metrics",
}


def normalize_role(role: str | None) -> str:
    value = (role or "").strip().lower()
    # Legacy accounts were stored with role "user".
    if value == "user":
        return "learner"
    if value in PERMISSIONS_BY_ROLE:
        return value
    return "learner"


def has_permission(role: str | None, permission: Permission) -> bool:
    return permission in PERMISSIONS_BY_ROLE.get(normalize_role(role), set())


def permissions_matrix_payload() -> dict:
    return {
        "roles": [
            {"role": role, "permissions": sorted(PERMISSIONS_BY_ROLE[role])}
            for role in ROLE_ORDER
        ],
        "permission_labels": PERMISSION_LABELS,
    }
