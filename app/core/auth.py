# app/core/auth.py
from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.config import Settings, get_settings
from app.core.session import (
    Identity,
    RoleLookup,
    apply_cookies,
    lookup_role,
    resolve_session,
)
from app.core.supabase_client import SupabaseSession

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so we can fall back to the session cookies set by the login page.
bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_session(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> SupabaseSession:
    """
    Build a per-request Supabase session.

    Token source, in order:
      1. Authorization: Bearer <access token>
      2. session cookies (access + refresh)

    Raises:
        HTTPException(503): if Supabase is not configured.
    """
    if not settings.supabase_configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service is not configured",
        )

    if credentials is not None:
        return SupabaseSession.from_tokens(credentials.credentials, None, settings)

    return SupabaseSession.from_tokens(
        request.cookies.get(settings.ACCESS_TOKEN_COOKIE),
        request.cookies.get(settings.REFRESH_TOKEN_COOKIE),
        settings,
    )


def get_current_user(
    response: Response,
    session: SupabaseSession = Depends(get_auth_session),
) -> Identity | None:
    """
    Resolve the current user from the session tokens.

    Tokens refreshed along the way are written back as cookies on the
    API response.

    Returns:
        Identity if authenticated, else None for anonymous callers.
    """
    user = resolve_session(session)
    apply_cookies(response, session.cookies_to_set)
    return user


def require_auth(user: Identity | None = Depends(get_current_user)) -> Identity:
    """
    Enforce authentication.

    Raises:
        HTTPException(401): if user is None.
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user


def get_current_role(
    user: Identity = Depends(require_auth),
    session: SupabaseSession = Depends(get_auth_session),
) -> RoleLookup:
    """
    Look up the authenticated user's role record.

    Raises:
        HTTPException(403): if there is no usable role record.
    """
    role = lookup_role(session, user)
    if not role.found:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User profile not found",
        )
    return role


def require_super_admin(role: RoleLookup = Depends(get_current_role)) -> RoleLookup:
    """
    Enforce platform-wide admin.

    Raises:
        HTTPException(403): if role is not super_admin.
    """
    if not role.is_super_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Super admin access required",
        )
    return role


def require_company_admin(role: RoleLookup = Depends(get_current_role)) -> RoleLookup:
    """
    Enforce company-scoped access (items, orders, POS, reports).

    Super admins manage the platform, not a company's menu, so they are
    rejected with 403.
    """
    if role.is_super_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Company admin access required",
        )
    return role
