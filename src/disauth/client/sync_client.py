"""Blocking OAuth/REST client.

:class:`Client` wraps :class:`httpx.Client` and exposes the token
lifecycle (code exchange, client credentials, refresh, revocation), the
generic authenticated :meth:`Client.api` call, and three typed helpers for
the ``/users/@me`` family of endpoints.

Every network method sends exactly one request. There is no retry and no
redirect following; a configured ``request_timeout`` bounds the read phase.

See Also:
    :class:`~disauth.client.async_client.AsyncClient` for the
    equivalent non-blocking implementation.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

import httpx

from disauth.client.base import BaseClient, logger
from disauth.exceptions import TransportError
from disauth.models import (
    Connection,
    OAuthConfig,
    PartialGuild,
    TokenResponse,
    TokenTypeHint,
    User,
)


class Client(BaseClient):
    """Synchronous client for one OAuth2 application.

    The client holds no per-call state, so one instance can serve many
    threads. Use it as a context manager (or call :meth:`close`) to release
    pooled connections.

    Args:
        config: Application configuration; alternatively pass its fields
            as keyword arguments.
        transport: Optional :mod:`httpx` transport, e.g.
            :class:`httpx.MockTransport` in tests.
        http_client: Optional pre-built :class:`httpx.Client`. The caller
            keeps ownership and :meth:`close` leaves it open.

    Example::

        with Client(client_id="1234", client_secret="s3cret",
                    redirect_uri="http://localhost:3000/callback",
                    scopes=["identify", "guilds"]) as client:
            url = client.authorization_url("xyz123")
            ...
            tokens = client.exchange_code(code)
            user = client.get_user(tokens.access_token)
    """

    def __init__(
        self,
        config: Optional[OAuthConfig] = None,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        http_client: Optional[httpx.Client] = None,
        **config_fields: Any,
    ) -> None:
        super().__init__(config, **config_fields)
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(transport=transport, follow_redirects=False)

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying :class:`httpx.Client` if this client created it."""
        if self._owns_http:
            self._http.close()

    # ------------------------------------------------------------------ #
    # Token lifecycle
    # ------------------------------------------------------------------ #

    def exchange_code(
        self, code: str, code_verifier: Optional[str] = None
    ) -> Optional[TokenResponse]:
        """Exchange an authorization code for tokens.

        Args:
            code: The ``code`` query parameter received on the redirect URI.
            code_verifier: The PKCE verifier, when the authorize URL carried
                a ``code_challenge``.

        Raises:
            OAuthError: If the token endpoint rejects the exchange.
        """
        return self._fetch_token(self._code_exchange_form(code, code_verifier))

    def exchange_client_credentials(
        self, scopes: Optional[list[str]] = None
    ) -> Optional[TokenResponse]:
        """Obtain an application token with the client credentials grant.

        Raises:
            MissingClientSecretError: Before any request, if no client
                secret is configured.
            InvalidScopeError: If *scopes* contains an unknown scope.
            OAuthError: If the token endpoint rejects the request.
        """
        return self._fetch_token(self._client_credentials_form(scopes))

    def refresh_token(self, refresh_token: str) -> Optional[TokenResponse]:
        """Trade a refresh token for a new access token."""
        return self._fetch_token(self._refresh_form(refresh_token))

    def revoke_token(
        self,
        token: str,
        token_type_hint: Union[TokenTypeHint, str, None] = None,
    ) -> None:
        """Revoke an access or refresh token.

        Success is decided by the status code alone; the body is ignored.

        Raises:
            MissingClientSecretError: Before any request, if no client
                secret is configured.
            OAuthError: If the revocation endpoint returns a non-2xx status.
        """
        form = self._revoke_form(token, token_type_hint)
        self._execute(
            "POST", self._config.revoke_url, data=form, expect_json=False, oauth=True
        )

    # ------------------------------------------------------------------ #
    # REST
    # ------------------------------------------------------------------ #

    def api(
        self,
        path: str,
        access_token: str,
        *,
        method: str = "GET",
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        json: Any = None,
        data: Optional[Mapping[str, Any]] = None,
        content: Union[str, bytes, None] = None,
    ) -> Any:
        """Call an arbitrary REST endpoint with a bearer token.

        Args:
            path: Absolute URL, or a path relative to ``api_base_url``
                (with or without a leading slash).
            access_token: Sent as ``Authorization: Bearer <token>``; it
                replaces any ``Authorization`` header in *headers*.
            method: HTTP method.
            params: Query parameters.
            headers: Extra request headers.
            json: JSON-serialisable body.
            data: Form-encoded body.
            content: Raw body.

        Returns:
            The parsed JSON body, or ``None`` for an empty or non-JSON
            body.

        Raises:
            HTTPError: On a non-2xx status.
            TransportError: On network failure or timeout.
            TypeError: If more than one of *json*, *data* and *content* is given.
        """
        return self._execute(
            method,
            self._resolve_api_url(path),
            headers=self._bearer_headers(access_token, headers),
            params=params,
            json=json,
            data=data,
            content=content,
        )

    def get_user(self, access_token: str) -> Optional[User]:
        """Fetch the authenticated user (``identify`` scope)."""
        url = self._resolve_api_url("/users/@me")
        return self._to_model(User, self.api(url, access_token), url, "GET")

    def get_guilds(self, access_token: str) -> Optional[list[PartialGuild]]:
        """Fetch the user's guild memberships (``guilds`` scope)."""
        url = self._resolve_api_url("/users/@me/guilds")
        return self._to_model_list(PartialGuild, self.api(url, access_token), url, "GET")

    def get_connections(self, access_token: str) -> Optional[list[Connection]]:
        """Fetch the user's linked accounts (``connections`` scope)."""
        url = self._resolve_api_url("/users/@me/connections")
        return self._to_model_list(Connection, self.api(url, access_token), url, "GET")

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _fetch_token(self, form: dict[str, str]) -> Optional[TokenResponse]:
        url = self._config.token_url
        data = self._execute("POST", url, data=form, oauth=True)
        return self._to_model(TokenResponse, data, url, "POST")

    def _execute(
        self,
        method: str,
        url: str,
        expect_json: bool = True,
        oauth: bool = False,
        **options: Any,
    ) -> Any:
        kwargs = self._request_kwargs(method, url, **options)
        method = kwargs["method"]
        logger.debug("%s %s", method, url)
        try:
            response = self._http.request(**kwargs)
        except httpx.TransportError as exc:
            logger.debug("%s %s failed: %s", method, url, exc)
            raise TransportError(url, method, str(exc) or type(exc).__name__) from exc
        return self._handle_response(
            response, url, method, expect_json=expect_json, oauth=oauth
        )
