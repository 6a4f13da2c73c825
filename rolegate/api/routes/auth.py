"""
Authentication routes.
"""

from fastapi import APIRouter, Depends, Request, Response

from rolegate.core.exceptions import InvalidSession
from rolegate.core.gate import RoleGate
from rolegate.schemas.auth import (
    LoginRequest,
    TokenResponse,
    UserResponse,
    MessageResponse,
)
from rolegate.services.session import AuthStrategy, extract_token
from rolegate.api.dependencies import get_gate, TokenUser

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    gate: RoleGate = Depends(get_gate),
):
    """Sign in and receive a bearer token."""
    _, token = await gate.sign_in(data.identifier, data.password)
    return TokenResponse(
        access_token=token,
        token_type="bearer",
        expires_in=gate.session_expire_seconds,
    )


@router.post("/login/cookie", response_model=UserResponse)
async def login_cookie(
    data: LoginRequest,
    response: Response,
    gate: RoleGate = Depends(get_gate),
):
    """Sign in and receive the session as a cookie."""
    user, token = await gate.sign_in(data.identifier, data.password)
    response.set_cookie(
        key=gate.session_name,
        value=token,
        max_age=gate.session_expire_seconds,
        path="/",
        httponly=True,
        secure=gate.settings.auth.cookie_secure,
        samesite="lax",
    )
    return UserResponse.model_validate(user)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    user: TokenUser,
    gate: RoleGate = Depends(get_gate),
):
    """End the bearer token's session."""
    token = extract_token(request, AuthStrategy.TOKEN, gate.session_name)
    await gate.sign_out(token)
    return MessageResponse(message="Logged out successfully")


@router.post("/logout/cookie", response_model=MessageResponse)
async def logout_cookie(
    request: Request,
    response: Response,
    gate: RoleGate = Depends(get_gate),
):
    """End the cookie session and expire the cookie."""
    token = extract_token(request, AuthStrategy.COOKIE, gate.session_name)
    if not token:
        raise InvalidSession(clear_cookie=gate.session_name)
    await gate.sign_out(token)
    response.delete_cookie(gate.session_name, path="/")
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserResponse)
async def me(user: TokenUser):
    """Get the user behind the bearer token."""
    return UserResponse.model_validate(user)
