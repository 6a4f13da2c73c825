"""
Authentication and RBAC dependencies.

Usage:
    from rolegate.api.dependencies import TokenUser, rbac_protected

    @router.get("/me")
    async def me(user: TokenUser):
        ...

    @router.get("/dashboard")
    async def dashboard(user: User = Depends(rbac_protected(AuthStrategy.COOKIE))):
        ...
"""

from typing import Annotated, Any, Callable, Coroutine

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.core.exceptions import AuthenticationError, InvalidSession
from rolegate.core.gate import RoleGate
from rolegate.models import User
from rolegate.services.session import AuthStrategy, extract_token
from .database import get_db, get_gate

UserDependency = Callable[..., Coroutine[Any, Any, User]]


def authenticated(strategy: AuthStrategy = AuthStrategy.TOKEN) -> UserDependency:
    """
    Dependency factory: resolve the session user or respond 401.

    In cookie mode a rejected session also clears the cookie.
    """
    async def dependency(
        request: Request,
        gate: RoleGate = Depends(get_gate),
        db: AsyncSession = Depends(get_db),
    ) -> User:
        token = extract_token(request, strategy, gate.session_name)
        try:
            user = await gate.get_user_by_token(db, token)
        except AuthenticationError as exc:
            if strategy == AuthStrategy.COOKIE:
                raise InvalidSession(clear_cookie=gate.session_name) from exc
            raise

        request.state.user = user
        return user

    return dependency


def rbac_protected(strategy: AuthStrategy = AuthStrategy.TOKEN) -> UserDependency:
    """
    Dependency factory: authenticate, then run RBAC for the request's
    method and path. Responds 401 or 403.

    Rule executors receive the request, its query parameters and path
    parameters in their context.
    """
    async def dependency(
        request: Request,
        user: User = Depends(authenticated(strategy)),
        gate: RoleGate = Depends(get_gate),
        db: AsyncSession = Depends(get_db),
    ) -> User:
        context = {
            "request": request,
            "query": dict(request.query_params),
            "path_params": dict(request.path_params),
        }
        await gate.authorize(db, user, request.method, request.url.path, context)
        return user

    return dependency


# Type aliases for cleaner route signatures
TokenUser = Annotated[User, Depends(authenticated(AuthStrategy.TOKEN))]
CookieUser = Annotated[User, Depends(authenticated(AuthStrategy.COOKIE))]
