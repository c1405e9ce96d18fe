"""Route dependencies for authentication and role gates.

Both gates raise before the route handler runs:
- require_auth: 401 unless the session cookie maps to a live session
- require_role(*roles): 403 unless the principal's role is allowed
"""

from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from ratings_api.services.auth import AdminUser, Principal, Role, load_principal
from ratings_api.settings import get_settings


async def get_optional_principal(request: Request) -> Principal | None:
    """Principal for the request's session cookie, or None."""
    session_id = request.cookies.get(get_settings().session_cookie_name)
    if not session_id:
        return None
    return await load_principal(session_id)


async def require_auth(
    principal: Annotated[Principal | None, Depends(get_optional_principal)],
) -> Principal:
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return principal


def require_role(*roles: Role) -> Callable[..., Awaitable[Principal]]:
    """Build a dependency admitting only principals with one of the given roles."""
    allowed = frozenset(roles)

    async def dependency(principal: Annotated[Principal, Depends(require_auth)]) -> Principal:
        if principal.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied: insufficient permissions",
            )
        return principal

    return dependency


def ensure_self_or_admin(principal: Principal, user_id: str) -> None:
    """403 unless the principal is an admin or the user the resource belongs to."""
    if isinstance(principal, AdminUser):
        return
    if principal.role is Role.USER and principal.id == user_id:
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Access denied: insufficient permissions",
    )


OptionalPrincipal = Annotated[Principal | None, Depends(get_optional_principal)]
CurrentPrincipal = Annotated[Principal, Depends(require_auth)]
AdminPrincipal = Annotated[Principal, Depends(require_role(Role.ADMIN))]
RaterPrincipal = Annotated[Principal, Depends(require_role(Role.ADMIN, Role.USER))]
