"""Pydantic models shared across disauth.

The models fall into three groups:

**Configuration** -- :class:`OAuthConfig` (immutable, validated once at
construction) and the per-call :class:`AuthorizeOptions`.

**OAuth payloads** -- :class:`TokenResponse`, :class:`OAuthErrorPayload`
and :class:`PKCEPair`.

**REST resources** -- :class:`User`, :class:`PartialGuild` and
:class:`Connection`, typed views of the ``/users/@me`` family of endpoints.

Payload and resource models use ``extra="allow"`` so that fields the
provider adds later survive a round trip through :meth:`model_dump`.
"""

from __future__ import annotations

import enum
from typing import Literal, Optional, Union
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator

from disauth.constants import (
    DEFAULT_SCOPES,
    DEFAULT_USER_AGENT,
    DISCORD_API,
    DISCORD_OAUTH_AUTHORIZE,
    DISCORD_TOKEN_REVOKE_URL,
    DISCORD_TOKEN_URL,
)
from disauth.scopes import normalize_scopes


class Prompt(str, enum.Enum):
    """Whether the authorization screen is shown again for an existing grant."""

    CONSENT = "consent"
    NONE = "none"


class ResponseType(str, enum.Enum):
    CODE = "code"
    TOKEN = "token"


class CodeChallengeMethod(str, enum.Enum):
    S256 = "S256"
    PLAIN = "plain"


class TokenTypeHint(str, enum.Enum):
    """Hint passed to the revocation endpoint about the kind of token revoked."""

    ACCESS_TOKEN = "access_token"
    REFRESH_TOKEN = "refresh_token"


# --- Configuration ---


def _origin(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


class OAuthConfig(BaseModel):
    """Application credentials and endpoint settings for a :class:`~disauth.client.Client`.

    Instances are frozen: a client built from a config never observes a
    change to it, which is what makes a single client safe to share across
    threads or tasks.

    Scopes are validated against
    :data:`~disauth.constants.DISCORD_OAUTH_SCOPES` and deduplicated on
    construction; an unknown scope raises
    :class:`~disauth.exceptions.InvalidScopeError` immediately.

    Example::

        OAuthConfig(
            client_id="1234",
            client_secret="s3cret",
            redirect_uri="http://localhost:3000/callback",
            scopes=["identify", "guilds"],
        )
    """

    model_config = ConfigDict(frozen=True)

    client_id: str = Field(min_length=1, description="OAuth2 application id")
    client_secret: Optional[str] = Field(
        default=None,
        description="Application secret; required for client credentials and revocation",
    )
    redirect_uri: str = Field(description="Registered redirect URI")
    scopes: tuple[str, ...] = Field(default=DEFAULT_SCOPES)
    api_base_url: str = Field(default=DISCORD_API)
    oauth_base_url: Optional[str] = Field(
        default=None,
        description="Origin serving /oauth2/authorize; defaults to the provider's",
    )
    default_prompt: Prompt = Prompt.CONSENT
    user_agent: str = DEFAULT_USER_AGENT
    request_timeout: Optional[float] = Field(
        default=None, gt=0, description="Read timeout in seconds; unset means no timeout"
    )

    @field_validator("scopes", mode="before")
    @classmethod
    def _normalize_scopes(cls, value: object) -> tuple[str, ...]:
        return normalize_scopes(value)  # type: ignore[arg-type]

    @property
    def api_base(self) -> str:
        """The REST base URL without a trailing slash."""
        return self.api_base_url.rstrip("/")

    @property
    def oauth_base(self) -> str:
        return (self.oauth_base_url or _origin(DISCORD_OAUTH_AUTHORIZE)).rstrip("/")

    @property
    def authorize_url(self) -> str:
        return f"{self.oauth_base}/oauth2/authorize"

    @property
    def token_url(self) -> str:
        """Token endpoint; follows ``api_base_url`` when it is overridden."""
        if self.api_base == DISCORD_API:
            return DISCORD_TOKEN_URL
        return f"{self.api_base}/oauth2/token"

    @property
    def revoke_url(self) -> str:
        """Revocation endpoint; follows ``api_base_url`` when it is overridden."""
        if self.api_base == DISCORD_API:
            return DISCORD_TOKEN_REVOKE_URL
        return f"{self.api_base}/oauth2/token/revoke"


class AuthorizeOptions(BaseModel):
    """Per-call options for :meth:`~disauth.client.Client.authorization_url`.

    Every field is optional. ``redirect_uri`` and ``scopes`` override the
    client configuration for this URL only; ``scopes`` goes through the same
    validation as :attr:`OAuthConfig.scopes`.
    """

    state: Optional[str] = None
    prompt: Optional[Prompt] = None
    response_type: ResponseType = ResponseType.CODE
    code_challenge: Optional[str] = None
    code_challenge_method: Optional[CodeChallengeMethod] = None
    permissions: Optional[Union[int, str]] = None
    disable_guild_select: Optional[bool] = None
    guild_id: Optional[str] = None
    login_hint: Optional[str] = None
    redirect_uri: Optional[str] = None
    scopes: Optional[tuple[str, ...]] = None

    @field_validator("scopes", mode="before")
    @classmethod
    def _normalize_scopes(cls, value: object) -> Optional[tuple[str, ...]]:
        if value is None:
            return None
        return normalize_scopes(value)  # type: ignore[arg-type]


# --- OAuth payloads ---


class TokenResponse(BaseModel):
    """Body of a successful response from the token endpoint.

    Ownership passes to the caller; the library keeps no copy.
    """

    model_config = ConfigDict(extra="allow")

    access_token: str
    token_type: str
    expires_in: int
    refresh_token: Optional[str] = None
    scope: Optional[str] = None

    @property
    def scopes(self) -> tuple[str, ...]:
        """The granted scopes, split from the space-separated ``scope`` field."""
        return tuple(self.scope.split()) if self.scope else ()


class OAuthErrorPayload(BaseModel):
    """Error body returned by the token and revocation endpoints (:rfc:`6749#section-5.2`)."""

    model_config = ConfigDict(extra="allow")

    error: str
    error_description: Optional[str] = None


class PKCEPair(BaseModel):
    """A PKCE verifier and its S256 challenge.

    The verifier must be kept by the caller (typically in the user's
    session) between building the authorize URL and exchanging the code.
    """

    model_config = ConfigDict(frozen=True)

    verifier: str
    challenge: str
    method: Literal["S256"] = "S256"


# --- REST resources ---


class User(BaseModel):
    """The authenticated user, as returned by ``GET /users/@me``."""

    model_config = ConfigDict(extra="allow")

    id: str
    username: str
    global_name: Optional[str] = None
    discriminator: str = "0"
    avatar: Optional[str] = None
    bot: Optional[bool] = None
    system: Optional[bool] = None
    mfa_enabled: Optional[bool] = None
    banner: Optional[str] = None
    accent_color: Optional[int] = None
    locale: Optional[str] = None
    verified: Optional[bool] = None
    email: Optional[str] = None
    flags: Optional[int] = None
    premium_type: Optional[int] = None
    public_flags: Optional[int] = None


class PartialGuild(BaseModel):
    """One entry of ``GET /users/@me/guilds``."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    icon: Optional[str] = None
    owner: Optional[bool] = None
    permissions: str = "0"
    features: list[str] = Field(default_factory=list)


class Connection(BaseModel):
    """A linked third-party account from ``GET /users/@me/connections``."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    type: str
    verified: bool = False
    friend_sync: bool = False
    show_activity: bool = False
    visibility: Literal[0, 1] = 0
    revoked: Optional[bool] = None
