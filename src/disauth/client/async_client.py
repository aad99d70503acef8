"""Asynchronous OAuth/REST client -- mirrors :class:`~disauth.client.sync_client.Client`.

:class:`AsyncClient` wraps :class:`httpx.AsyncClient` and offers the same
operations as the blocking client, with every network method a coroutine.
:meth:`~disauth.client.base.BaseClient.authorization_url` stays synchronous
since it builds a string and sends nothing.
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


class AsyncClient(BaseClient):
    """Asynchronous client for one OAuth2 application.

    Safe to share between tasks. Use as an async context manager, or call
    :meth:`aclose`, to release pooled connections.

    Args:
        config: Application configuration; alternatively pass its fields
            as keyword arguments.
        transport: Optional async :mod:`httpx` transport.
        http_client: Optional pre-built :class:`httpx.AsyncClient`, left
            open by :meth:`aclose`.

    Example::

        async with AsyncClient(config) as client:
            tokens = await client.exchange_code(code, code_verifier=verifier)
            guilds = await client.get_guilds(tokens.access_token)
    """

    def __init__(
        self,
        config: Optional[OAuthConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        **config_fields: Any,
    ) -> None:
        super().__init__(config, **config_fields)
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(
            transport=transport, follow_redirects=False
        )

    async def __aenter__(self) -> AsyncClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    # ------------------------------------------------------------------ #
    # Token lifecycle
    # ------------------------------------------------------------------ #

    async def exchange_code(
        self, code: str, code_verifier: Optional[str] = None
    ) -> Optional[TokenResponse]:
        """Exchange an authorization code for tokens.

        See :meth:`~disauth.client.sync_client.Client.exchange_code`.
        """
        return await self._fetch_token(self._code_exchange_form(code, code_verifier))

    async def exchange_client_credentials(
        self, scopes: Optional[list[str]] = None
    ) -> Optional[TokenResponse]:
        """Obtain an application token; requires a client secret."""
        return await self._fetch_token(self._client_credentials_form(scopes))

    async def refresh_token(self, refresh_token: str) -> Optional[TokenResponse]:
        return await self._fetch_token(self._refresh_form(refresh_token))

    async def revoke_token(
        self,
        token: str,
        token_type_hint: Union[TokenTypeHint, str, None] = None,
    ) -> None:
        """Revoke an access or refresh token; requires a client secret."""
        form = self._revoke_form(token, token_type_hint)
        await self._execute(
            "POST", self._config.revoke_url, data=form, expect_json=False, oauth=True
        )

    # ------------------------------------------------------------------ #
    # REST
    # ------------------------------------------------------------------ #

    async def api(
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

        See :meth:`~disauth.client.sync_client.Client.api`.
        """
        return await self._execute(
            method,
            self._resolve_api_url(path),
            headers=self._bearer_headers(access_token, headers),
            params=params,
            json=json,
            data=data,
            content=content,
        )

    async def get_user(self, access_token: str) -> Optional[User]:
        url = self._resolve_api_url("/users/@me")
        return self._to_model(User, await self.api(url, access_token), url, "GET")

    async def get_guilds(self, access_token: str) -> Optional[list[PartialGuild]]:
        url = self._resolve_api_url("/users/@me/guilds")
        return self._to_model_list(
            PartialGuild, await self.api(url, access_token), url, "GET"
        )

    async def get_connections(self, access_token: str) -> Optional[list[Connection]]:
        url = self._resolve_api_url("/users/@me/connections")
        return self._to_model_list(
            Connection, await self.api(url, access_token), url, "GET"
        )

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _fetch_token(self, form: dict[str, str]) -> Optional[TokenResponse]:
        url = self._config.token_url
        data = await self._execute("POST", url, data=form, oauth=True)
        return self._to_model(TokenResponse, data, url, "POST")

    async def _execute(
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
            response = await self._http.request(**kwargs)
        except httpx.TransportError as exc:
            logger.debug("%s %s failed: %s", method, url, exc)
            raise TransportError(url, method, str(exc) or type(exc).__name__) from exc
        return self._handle_response(
            response, url, method, expect_json=expect_json, oauth=oauth
        )
