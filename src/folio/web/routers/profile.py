from fastapi import APIRouter

from folio.core.modules.user.models import VerifiedUser
from folio.web.deps import AppDep, AuthTokenDep
from folio.web.openapi import ErrorResponse

router = APIRouter(tags=["profile"])


@router.get(
    "/profile",
    summary="Get current user profile",
    description="Get the profile and role of the user the bearer token belongs to.",
    operation_id="getCurrentUserProfile",
    responses={
        200: {"description": "Current user profile"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def get_profile(app: AppDep, auth_token: AuthTokenDep) -> VerifiedUser:
    return await app.get_current_user(auth_token)


@router.get(
    "/profile/admin",
    summary="Check admin access",
    description="Get the current user profile if the user has the admin role.",
    operation_id="getAdminProfile",
    responses={
        200: {"description": "Current user is an admin"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Admin privileges required"},
    },
)
async def get_admin_profile(app: AppDep, auth_token: AuthTokenDep) -> VerifiedUser:
    return await app.get_admin_user(auth_token)
