"""Fixed provider endpoints, the scope allow-list, and PKCE parameters.

Every URL the client talks to by default is derived from the values in this
module. Overriding ``api_base_url`` or ``oauth_base_url`` on
:class:`~disauth.models.OAuthConfig` recomputes the derived endpoints; see
:attr:`~disauth.models.OAuthConfig.token_url`.
"""

DISCORD_API = "https://discord.com/api/v10"
"""Base REST API endpoint."""

DISCORD_OAUTH_AUTHORIZE = "https://discord.com/oauth2/authorize"
"""Default OAuth2 authorization endpoint (opened in the user's browser)."""

DISCORD_TOKEN_URL = f"{DISCORD_API}/oauth2/token"
"""Default token exchange endpoint."""

DISCORD_TOKEN_REVOKE_URL = f"{DISCORD_API}/oauth2/token/revoke"
"""Default token revocation endpoint."""

DEFAULT_USER_AGENT = "disauth (https://pypi.org/project/disauth/)"
"""``User-Agent`` sent on every request unless configured otherwise."""

DISCORD_OAUTH_SCOPES: tuple[str, ...] = (
    "identify",
    "guilds",
    "guilds.channels.read",
    "rpc",
    "rpc.voice.write",
    "rpc.screenshare.read",
    "webhook.incoming",
    "applications.builds.read",
    "applications.entitlements",
    "activities.invites.write",
    "voice",
    "presences.read",
    "dm_channels.messages.read",
    "account.global_name.update",
    "sdk.social_layer",
    "applications.commands.permissions.update",
    "applications.commands.update",
    "email",
    "guilds.join",
    "gdm.join",
    "rpc.notifications.read",
    "rpc.video.read",
    "rpc.screenshare.write",
    "messages.read",
    "applications.commands",
    "activities.read",
    "relationships.read",
    "dm_channels.read",
    "presences.write",
    "dm_channels.messages.write",
    "payment_sources.country_code",
    "lobbies.write",
    "connections",
    "guilds.members.read",
    "bot",
    "rpc.voice.read",
    "rpc.video.write",
    "rpc.activities.write",
    "applications.builds.upload",
    "applications.store.update",
    "activities.write",
    "relationships.write",
    "role_connections.write",
    "openid",
    "gateway.connect",
    "sdk.social_layer_presence",
    "application_identities.write",
)
"""Every scope token the provider accepts.

See https://discord.com/developers/docs/topics/oauth2#shared-resources-oauth2-scopes
"""

DEFAULT_SCOPES: tuple[str, ...] = ("identify",)
"""Scopes requested when none (or an empty list) are configured."""

# RFC 7636 section 4.1: unreserved characters
PKCE_CHARSET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-._~"

PKCE_MIN_LENGTH = 43
PKCE_MAX_LENGTH = 128
PKCE_DEFAULT_LENGTH = 96
