# app/core/access.py
"""
Route classification and the redirect decision table.

Everything here is pure: no I/O, no FastAPI. The middleware resolves the
session and (when `requires_role_lookup` says so) the role, then asks
`decide_access` what to do with the request.
"""
from enum import Enum

from sqlmodel import SQLModel

from app.core.session import Identity, RoleLookup

LOGIN_PATH = "/login"
UNAUTHORIZED_PATH = "/unauthorized"
ADMIN_PATH = "/admin"
DASHBOARD_PATH = "/dashboard"

PUBLIC_PATHS = (LOGIN_PATH, UNAUTHORIZED_PATH)

ADMIN_PREFIX = "/admin"

# Company admin only routes - super admins are sent back to /admin
COMPANY_ADMIN_PREFIXES = ("/pos", "/dashboard", "/items", "/orders", "/reports")


class RouteCategory(str, Enum):
    PUBLIC = "public"
    ROOT = "root"
    ADMIN = "admin"
    COMPANY_ADMIN = "company_admin"
    PROTECTED = "protected"


class AccessAction(str, Enum):
    ALLOW = "allow"
    REDIRECT_LOGIN = "redirect_login"
    REDIRECT_ADMIN = "redirect_admin"
    REDIRECT_DASHBOARD = "redirect_dashboard"
    REDIRECT_UNAUTHORIZED = "redirect_unauthorized"


REDIRECT_TARGETS: dict[AccessAction, str] = {
    AccessAction.REDIRECT_LOGIN: LOGIN_PATH,
    AccessAction.REDIRECT_ADMIN: ADMIN_PATH,
    AccessAction.REDIRECT_DASHBOARD: DASHBOARD_PATH,
    AccessAction.REDIRECT_UNAUTHORIZED: UNAUTHORIZED_PATH,
}


class AccessDecision(SQLModel):
    action: AccessAction
    reason: str

    @property
    def is_redirect(self) -> bool:
        return self.action != AccessAction.ALLOW

    @property
    def location(self) -> str | None:
        return REDIRECT_TARGETS.get(self.action)


def _allow(reason: str) -> AccessDecision:
    return AccessDecision(action=AccessAction.ALLOW, reason=reason)


def _redirect(action: AccessAction, reason: str) -> AccessDecision:
    return AccessDecision(action=action, reason=reason)


def classify_route(path: str) -> RouteCategory:
    """
    Categorize a request path.

    Public and root are exact matches; admin and company-admin are plain
    string-prefix matches.
    """
    if path in PUBLIC_PATHS:
        return RouteCategory.PUBLIC
    if path == "/":
        return RouteCategory.ROOT
    if path.startswith(ADMIN_PREFIX):
        return RouteCategory.ADMIN
    if path.startswith(COMPANY_ADMIN_PREFIXES):
        return RouteCategory.COMPANY_ADMIN
    return RouteCategory.PROTECTED


def requires_role_lookup(path: str, identity: Identity | None) -> bool:
    """
    Whether `decide_access` will consult the role for this request.

    Anonymous requests never need one; authenticated requests need one
    on /login (to bounce them to their home) and on every protected path.
    """
    if identity is None:
        return False
    category = classify_route(path)
    if category == RouteCategory.PUBLIC:
        return path == LOGIN_PATH
    return category != RouteCategory.ROOT


def decide_access(
    path: str,
    *,
    configured: bool,
    identity: Identity | None,
    role: RoleLookup | None = None,
) -> AccessDecision:
    """
    Evaluate the redirect policy for one request.

    Precedence:
      1. missing service config      -> login (fail closed)
      2. public path                 -> allow; authenticated /login is sent
                                        home when the role is known, and
                                        rendered when the lookup failed
      3. root                        -> login when anonymous, else allow
      4. anonymous                   -> login
      5. no role record / error      -> login
      6. /admin* and not super_admin -> unauthorized
      7. company path and super_admin -> admin
      8. otherwise                   -> allow

    `role` is only read when `requires_role_lookup` is true; a missing
    value there is treated as a failed lookup.
    """
    category = classify_route(path)

    if not configured:
        if path == LOGIN_PATH:
            return _allow("service not configured, login page rendered")
        return _redirect(AccessAction.REDIRECT_LOGIN, "service not configured")

    if category == RouteCategory.PUBLIC:
        if path == LOGIN_PATH and identity is not None:
            if role is None or not role.found:
                # Avoid locking out users whose profile is missing
                return _allow("role lookup failed on login page")
            if role.is_super_admin:
                return _redirect(AccessAction.REDIRECT_ADMIN, "already signed in")
            return _redirect(AccessAction.REDIRECT_DASHBOARD, "already signed in")
        return _allow("public route")

    if category == RouteCategory.ROOT:
        if identity is None:
            return _redirect(AccessAction.REDIRECT_LOGIN, "anonymous on root")
        return _allow("root page")

    if identity is None:
        return _redirect(AccessAction.REDIRECT_LOGIN, "anonymous")

    if role is None or not role.found:
        return _redirect(AccessAction.REDIRECT_LOGIN, "no role record")

    if category == RouteCategory.ADMIN and not role.is_super_admin:
        return _redirect(AccessAction.REDIRECT_UNAUTHORIZED, "super admin only")

    if category == RouteCategory.COMPANY_ADMIN and role.is_super_admin:
        return _redirect(AccessAction.REDIRECT_ADMIN, "company admin only")

    return _allow("authorized")
