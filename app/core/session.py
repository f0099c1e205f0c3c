# app/core/session.py
"""
Session resolution and role lookup.

The auth/data collaborator (Supabase in production, fakes in tests) is
anything implementing `AuthCollaborator`:

  - get_user()         -> Identity | None
  - get_role(user_id)  -> RoleLookup
  - cookies_to_set     -> cookies rewritten while talking to the service
                          (e.g. after a token refresh)
"""
import logging
from typing import Any, Protocol

from sqlmodel import SQLModel
from starlette.responses import Response

logger = logging.getLogger(__name__)

SUPER_ADMIN_ROLE = "super_admin"


class Identity(SQLModel):
    """Authenticated user as reported by Supabase Auth."""

    id: str
    email: str | None = None


class SessionCookie(SQLModel):
    """A cookie that must be written back to the browser."""

    name: str
    value: str
    options: dict[str, Any] = {}


class RoleLookup(SQLModel):
    """
    Result of reading the `role` column for an identity.

    - found: role is set, error is None
    - not found / failed: role is None, error describes why
    """

    role: str | None = None
    error: str | None = None

    @property
    def found(self) -> bool:
        return self.error is None and self.role is not None

    @property
    def is_super_admin(self) -> bool:
        return self.found and self.role == SUPER_ADMIN_ROLE


def apply_cookies(response: Response, cookies: list[SessionCookie]) -> Response:
    """
    Copy refreshed session cookies onto a response.

    Redirects and API responses must carry them too, otherwise the browser
    keeps the stale tokens and the user is silently logged out.
    """
    for cookie in cookies:
        response.set_cookie(cookie.name, cookie.value, **cookie.options)
    return response


class AuthCollaborator(Protocol):
    cookies_to_set: list[SessionCookie]

    def get_user(self) -> Identity | None: ...

    def get_role(self, user_id: str) -> RoleLookup: ...


def resolve_session(collaborator: AuthCollaborator) -> Identity | None:
    """
    Exchange the request's session for an identity.

    Any failure talking to the auth service is treated as anonymous.
    """
    try:
        return collaborator.get_user()
    except Exception as e:
        logger.warning(f"Session could not be resolved: {e}")
        return None


def lookup_role(collaborator: AuthCollaborator, identity: Identity) -> RoleLookup:
    """
    Fetch the stored role for an identity.

    Never raises: errors are folded into `RoleLookup.error` so the
    decision table can apply its policy.
    """
    try:
        result = collaborator.get_role(identity.id)
    except Exception as e:
        logger.error(f"Error checking user profile: {e}")
        return RoleLookup(error=str(e) or e.__class__.__name__)

    if result.error:
        logger.info(f"Role lookup failed for {identity.id}: {result.error}")
    return result
