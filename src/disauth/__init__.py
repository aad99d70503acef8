"""disauth -- Discord OAuth2 client: authorization code (with PKCE), client credentials, and REST helpers.

The library formats the provider's OAuth requests, exchanges and refreshes
tokens, and wraps a few ``/users/@me`` endpoints. It stores nothing: tokens,
PKCE verifiers and ``state`` values belong to the caller.

Typical flow::

    from disauth import Client, generate_pkce_pair

    client = Client(client_id="1234", client_secret="s3cret",
                    redirect_uri="http://localhost:3000/callback",
                    scopes=["identify", "guilds"])
    pair = generate_pkce_pair()
    url = client.authorization_url(state="xyz123", code_challenge=pair.challenge)
    # ... redirect the browser to url, receive ?code=... on the callback
    tokens = client.exchange_code(code, code_verifier=pair.verifier)
    user = client.get_user(tokens.access_token)

Modules:
    client: blocking and async OAuth/REST clients.
    models: Pydantic models for configuration and payloads.
    pkce: PKCE verifier/challenge generation.
    exceptions: Error hierarchy with exit-code mapping.
    config: Environment-driven configuration loading.
    app: the ``disauth`` command-line tool.
"""

__version__ = "1.0.0"

from disauth.client import AsyncClient, Client
from disauth.constants import (
    DISCORD_API,
    DISCORD_OAUTH_AUTHORIZE,
    DISCORD_OAUTH_SCOPES,
    DISCORD_TOKEN_REVOKE_URL,
    DISCORD_TOKEN_URL,
)
from disauth.exceptions import (
    ConfigError,
    DisauthError,
    HTTPError,
    InvalidScopeError,
    MissingClientSecretError,
    OAuthError,
    PKCELengthError,
    TransportError,
    UnexpectedResponseError,
)
from disauth.models import (
    AuthorizeOptions,
    Connection,
    OAuthConfig,
    OAuthErrorPayload,
    PartialGuild,
    PKCEPair,
    Prompt,
    TokenResponse,
    TokenTypeHint,
    User,
)
from disauth.pkce import generate_pkce_pair

__all__ = [
    "AsyncClient",
    "AuthorizeOptions",
    "Client",
    "ConfigError",
    "Connection",
    "DISCORD_API",
    "DISCORD_OAUTH_AUTHORIZE",
    "DISCORD_OAUTH_SCOPES",
    "DISCORD_TOKEN_REVOKE_URL",
    "DISCORD_TOKEN_URL",
    "DisauthError",
    "HTTPError",
    "InvalidScopeError",
    "MissingClientSecretError",
    "OAuthConfig",
    "OAuthError",
    "OAuthErrorPayload",
    "PKCELengthError",
    "PKCEPair",
    "PartialGuild",
    "Prompt",
    "TokenResponse",
    "TokenTypeHint",
    "TransportError",
    "UnexpectedResponseError",
    "User",
    "generate_pkce_pair",
]
