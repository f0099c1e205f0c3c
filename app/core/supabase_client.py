# app/core/supabase_client.py
import time

from jose import jwt, JWTError
from postgrest.exceptions import APIError
from supabase import create_client, Client
from supabase.client import ClientOptions

from app.core.config import Settings, get_settings
from app.core.session import Identity, RoleLookup, SessionCookie
from app.models.user import UserProfile

# Seconds before `exp` at which a token is already treated as expired
EXPIRY_MARGIN = 10


def supabase_public(settings: Settings | None = None) -> Client:
    """
    Create a Supabase client with the anon/public key.

    Not cached: each client carries exactly one caller's session.
    This client still respects RLS.

    Raises:
        RuntimeError: if SUPABASE_URL / SUPABASE_KEY are not set.
    """
    settings = settings or get_settings()
    if not settings.supabase_configured:
        raise RuntimeError("Missing SUPABASE_URL / SUPABASE_KEY in .env")
    return create_client(
        settings.SUPABASE_URL,
        settings.SUPABASE_KEY,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )


def token_expired(token: str, now: float | None = None) -> bool:
    """
    Check the `exp` claim of a Supabase access token without verifying it.

    Signature verification is the auth server's job (`auth.get_user`);
    here we only decide whether a refresh is needed first. Undecodable
    tokens count as expired.
    """
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return True
    exp = claims.get("exp")
    if exp is None:
        return False
    now = time.time() if now is None else now
    return float(exp) - EXPIRY_MARGIN <= now


class SupabaseSession:
    """
    Supabase client bound to one request's session tokens.

    Flow for `get_user()`:
      1. No tokens => anonymous.
      2. Access token expired => refresh with the refresh token and queue
         the new tokens in `cookies_to_set`.
      3. Otherwise install the tokens on the client.
      4. Ask the auth server who the token belongs to.
    """

    def __init__(
        self,
        client: Client,
        access_token: str | None,
        refresh_token: str | None,
        settings: Settings | None = None,
    ):
        self.client = client
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.settings = settings or get_settings()
        self.cookies_to_set: list[SessionCookie] = []
        self._user: Identity | None = None
        self._resolved = False

    @classmethod
    def from_tokens(
        cls,
        access_token: str | None,
        refresh_token: str | None,
        settings: Settings | None = None,
    ) -> "SupabaseSession":
        settings = settings or get_settings()
        return cls(supabase_public(settings), access_token, refresh_token, settings)

    # ----- Auth -----

    def _remember_tokens(self, access_token: str, refresh_token: str) -> None:
        options = {
            "httponly": True,
            "secure": self.settings.COOKIE_SECURE,
            "samesite": "lax",
            "path": "/",
        }
        if access_token != self.access_token:
            self.cookies_to_set.append(
                SessionCookie(
                    name=self.settings.ACCESS_TOKEN_COOKIE,
                    value=access_token,
                    options=options,
                )
            )
        if refresh_token and refresh_token != self.refresh_token:
            self.cookies_to_set.append(
                SessionCookie(
                    name=self.settings.REFRESH_TOKEN_COOKIE,
                    value=refresh_token,
                    options=options,
                )
            )
        self.access_token = access_token
        self.refresh_token = refresh_token or self.refresh_token

    def _establish_session(self) -> bool:
        if not self.access_token and not self.refresh_token:
            return False

        if not self.access_token or token_expired(self.access_token):
            if not self.refresh_token:
                return False
            response = self.client.auth.refresh_session(self.refresh_token)
        else:
            response = self.client.auth.set_session(
                self.access_token, self.refresh_token or ""
            )

        session = response.session
        if session is None:
            return False
        self._remember_tokens(session.access_token, session.refresh_token)
        return True

    def get_user(self) -> Identity | None:
        if self._resolved:
            return self._user
        self._resolved = True

        if not self._establish_session():
            return None

        response = self.client.auth.get_user(self.access_token)
        if response is None or response.user is None:
            return None

        self._user = Identity(id=str(response.user.id), email=response.user.email)
        return self._user

    # ----- Data -----

    def get_role(self, user_id: str) -> RoleLookup:
        try:
            response = (
                self.client.table(self.settings.USERS_TABLE)
                .select("id, role")
                .eq("id", user_id)
                .single()
                .execute()
            )
        except APIError as e:
            # PGRST116 = no (or more than one) row for .single()
            return RoleLookup(error=f"{e.code}: {e.message}")

        data = response.data or {}
        if not data.get("role"):
            return RoleLookup(error="profile has no role")
        profile = UserProfile.model_validate(data)
        return RoleLookup(role=profile.role)

    def table(self, name: str):
        return self.client.table(name)
