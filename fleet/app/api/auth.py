"""Session authentication and franchise context dependencies.

Every tenant-scoped route depends on `get_franchise_context`, which runs the
FranchiseContextResolver and turns a ContextError into an HTTP error with a
safe body. Manager routes add `require_manager` on top.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from fleet.app.config import get_settings
from fleet.app.db.context import ResolvedContext
from fleet.app.db.engine import get_session
from fleet.app.db.sql_repositories import SqlIdentityDirectory, SqlSessionAuthenticator
from fleet.app.errors import ContextError
from fleet.app.tenancy.resolver import FranchiseContextResolver
from fleet.app.tenancy.roles import is_manager_role


def extract_session_token(request: Request) -> str | None:
    """Extract the session token from the bearer header or session cookie.

    Args:
        request: Incoming request

    Returns:
        Token string, or None when neither source carries one
    """
    authorization = request.headers.get("authorization")
    if authorization and authorization.startswith("Bearer "):
        token = authorization[7:].strip()
        if token:
            return token

    return request.cookies.get(get_settings().session_cookie_name)


def context_http_exception(error: ContextError) -> HTTPException:
    """Map a ContextError to an HTTPException for the boundary layer."""
    headers = {"WWW-Authenticate": "Bearer"} if error.status_code == 401 else None
    return HTTPException(status_code=error.status_code, detail=error.message, headers=headers)


async def get_context_resolver(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> FranchiseContextResolver:
    """Build a resolver backed by the request's database session."""
    return FranchiseContextResolver.for_session(
        session,
        authenticator=SqlSessionAuthenticator(session),
        directory=SqlIdentityDirectory(session),
    )


async def get_franchise_context(
    request: Request,
    resolver: Annotated[FranchiseContextResolver, Depends(get_context_resolver)],
) -> ResolvedContext:
    """Resolve the calling user's active franchise context.

    Raises:
        HTTPException: 401, 403, 404 or 502 depending on the ContextError kind
    """
    result = await resolver.resolve(extract_session_token(request))

    if isinstance(result, ContextError):
        raise context_http_exception(result)

    return result


async def require_manager(
    ctx: Annotated[ResolvedContext, Depends(get_franchise_context)],
) -> ResolvedContext:
    """Require an owner or manager role.

    Raises:
        HTTPException: 403 if the acting membership is a driver
    """
    if not is_manager_role(ctx.role):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Manager role required",
        )

    return ctx
