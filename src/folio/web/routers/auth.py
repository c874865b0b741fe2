from typing import Annotated

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict, Field

from folio.core.modules.auth.models import AuthResult
from folio.core.modules.session.models import AuthToken
from folio.core.modules.user.models import VerifiedUser
from folio.web.deps import AppDep
from folio.web.openapi import ErrorResponse

router = APIRouter(tags=["auth"])


# Missing fields default to "" so the service reports them as a 400 validation error


class SignUpRequest(BaseModel):
    """Registration request."""

    email: str = Field("", description="Email address, used as the login")
    password: str = Field("", description="Password")
    full_name: str = Field("", alias="fullName", description="Display name")

    model_config = ConfigDict(populate_by_name=True)


class SignInRequest(BaseModel):
    """Authentication request."""

    email: str = Field("", description="Email address")
    password: str = Field("", description="Password")


class VerifyRequest(BaseModel):
    """Token verification request."""

    token: str = Field("", description="Session token to verify")


async def read_verify_token(request: Request) -> str:
    """Token from the JSON body.

    A body that is not JSON, or a token that is missing or not a string, gives
    an empty token, which verification rejects with 401.
    """
    try:
        body = await request.json()
    except ValueError:
        return ""
    token = body.get("token") if isinstance(body, dict) else None
    return token if isinstance(token, str) else ""


@router.post(
    "/auth/signup",
    summary="Register",
    description="Create an account with the reader role and receive a session token.",
    operation_id="signUp",
    responses={
        200: {"description": "Account created"},
        400: {"model": ErrorResponse, "description": "Missing fields or email already registered"},
    },
)
async def sign_up(request: SignUpRequest, app: AppDep) -> AuthResult:
    return await app.sign_up(request.email, request.password, request.full_name)


@router.post(
    "/auth/signin",
    summary="Authenticate user",
    description="Authenticate with email and password to receive a session token.",
    operation_id="signIn",
    responses={
        200: {"description": "Successfully authenticated"},
        400: {"model": ErrorResponse, "description": "Missing fields"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
)
async def sign_in(request: SignInRequest, app: AppDep) -> AuthResult:
    return await app.sign_in(request.email, request.password)


@router.post(
    "/auth/verify",
    summary="Verify session token",
    description="Check a session token and return the user it belongs to with their current role.",
    operation_id="verifyToken",
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"schema": VerifyRequest.model_json_schema()}},
        }
    },
    responses={
        200: {"description": "Token is valid"},
        401: {"model": ErrorResponse, "description": "Missing, invalid or expired token"},
    },
)
async def verify(app: AppDep, token: Annotated[str, Depends(read_verify_token)]) -> VerifiedUser:
    return await app.verify_token(AuthToken(token))
