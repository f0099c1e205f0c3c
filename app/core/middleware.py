# app/core/middleware.py
import logging
import re
from typing import Callable

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from app.core.access import AccessDecision, decide_access, requires_role_lookup
from app.core.config import Settings, get_settings
from app.core.session import (
    AuthCollaborator,
    Identity,
    RoleLookup,
    SessionCookie,
    apply_cookies,
    lookup_role,
    resolve_session,
)
from app.core.supabase_client import SupabaseSession

logger = logging.getLogger(__name__)

# Static files, the service worker and images never go through auth
STATIC_PATH_RE = re.compile(
    r"^/(static/|favicon\.ico$|sw\.js$)|\.(svg|png|jpg|jpeg|gif|webp)$"
)

UNGUARDED_PATHS = ("/docs", "/redoc", "/openapi.json", "/health")

SessionFactory = Callable[[Request, Settings], AuthCollaborator]


def cookie_session(request: Request, settings: Settings) -> AuthCollaborator:
    """Build a Supabase session from the request's auth cookies."""
    return SupabaseSession.from_tokens(
        request.cookies.get(settings.ACCESS_TOKEN_COOKIE),
        request.cookies.get(settings.REFRESH_TOKEN_COOKIE),
        settings,
    )


def _under(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def is_excluded_path(path: str, settings: Settings) -> bool:
    """
    Paths the redirect middleware skips.

    The JSON API is guarded by dependencies (401/403) instead of redirects.
    """
    if STATIC_PATH_RE.search(path):
        return True
    if any(_under(path, prefix) for prefix in UNGUARDED_PATHS):
        return True
    return _under(path, settings.API_V1_STR)


class AuthRedirectMiddleware(BaseHTTPMiddleware):
    """
    Authentication / authorization gate for page navigation.

    Every matched request:
      1. resolves the session from cookies,
      2. looks up the role when the decision table needs it,
      3. either passes through or redirects (307) to
         /login, /admin, /dashboard or /unauthorized.
    """

    def __init__(
        self,
        app,
        session_factory: SessionFactory = cookie_session,
        settings_provider: Callable[[], Settings] = get_settings,
    ):
        super().__init__(app)
        self.session_factory = session_factory
        self.settings_provider = settings_provider

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        settings = self.settings_provider()
        path = request.url.path

        if is_excluded_path(path, settings):
            return await call_next(request)

        if not settings.supabase_configured:
            logger.error("Missing Supabase environment variables in middleware")
            decision = decide_access(path, configured=False, identity=None)
            return await self._respond(request, call_next, decision, [])

        collaborator = self.session_factory(request, settings)
        identity: Identity | None = await run_in_threadpool(resolve_session, collaborator)

        role: RoleLookup | None = None
        if requires_role_lookup(path, identity):
            role = await run_in_threadpool(lookup_role, collaborator, identity)

        decision = decide_access(path, configured=True, identity=identity, role=role)
        request.state.identity = identity
        request.state.role = role
        return await self._respond(
            request, call_next, decision, collaborator.cookies_to_set
        )

    async def _respond(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
        decision: AccessDecision,
        cookies: list[SessionCookie],
    ) -> Response:
        if decision.is_redirect:
            logger.debug(
                f"{request.url.path} -> {decision.location} ({decision.reason})"
            )
            target = str(request.base_url).rstrip("/") + decision.location
            response: Response = RedirectResponse(target)
        else:
            response = await call_next(request)
        return apply_cookies(response, cookies)
