from fastapi import APIRouter, Depends, Request

from pathwise.core.api_response import success_response_payload
from pathwise.core.permissions import PERMISSIONS_BY_ROLE, permissions_matrix_payload
from pathwise.core.security import get_current_user, get_user_role
from pathwise.db.models.user import User

router = APIRouter(prefix="/me", tags=["profile"])


@router.get("")
def me(request: Request, current_user: User = Depends(get_current_user)):
    role = get_user_role(current_user)
    return success_response_payload(
        request,
        data={
            "id": current_user.id,
            "email": current_user.email,
            "username": current_user.username,
            "role": role,
            "permissions": sorted(PERMISSIONS_BY_ROLE[role]),
            "total_xp": current_user.total_xp,
            "latest_completed_step": current_user.latest_completed_step,
        },
    )


@router.get("/permissions-matrix")
def permissions_matrix(request: Request, _: User = Depends(get_current_user)):
    return success_response_payload(request, data=permissions_matrix_payload())
