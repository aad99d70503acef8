"""Request construction and response classification shared by both clients.

:class:`BaseClient` holds the immutable :class:`~disauth.models.OAuthConfig`
and everything that does not touch the network: authorize-URL building,
form bodies for the token endpoints, URL and header normalisation, and the
mapping of an :class:`httpx.Response` to a return value or an exception.
:class:`~disauth.client.sync_client.Client` and
:class:`~disauth.client.async_client.AsyncClient` only add the I/O.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Mapping, Optional, TypeVar, Union
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel, ValidationError

from disauth.exceptions import (
    HTTPError,
    MissingClientSecretError,
    OAuthError,
    UnexpectedResponseError,
)
from disauth.models import (
    AuthorizeOptions,
    CodeChallengeMethod,
    OAuthConfig,
    OAuthErrorPayload,
    Prompt,
    TokenTypeHint,
)
from disauth.scopes import normalize_scopes

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_ABSOLUTE_URL = re.compile(r"^https?://", re.IGNORECASE)


class BaseClient:
    """Configuration holder and I/O-free half of the OAuth/REST client.

    Args:
        config: A ready :class:`~disauth.models.OAuthConfig`. When omitted,
            one is built from ``**config_fields`` (``client_id``,
            ``redirect_uri``, ...), which raises on invalid scopes exactly
            like constructing the config directly.
    """

    def __init__(self, config: Optional[OAuthConfig] = None, **config_fields: Any) -> None:
        if config is None:
            config = OAuthConfig(**config_fields)
        elif config_fields:
            raise TypeError("Pass either an OAuthConfig or config fields, not both")
        self._config = config

    @property
    def config(self) -> OAuthConfig:
        return self._config

    # ------------------------------------------------------------------ #
    # Authorization URL
    # ------------------------------------------------------------------ #

    def authorization_url(
        self,
        state_or_options: Union[str, AuthorizeOptions, None] = None,
        prompt: Union[Prompt, str, None] = None,
        **options: Any,
    ) -> str:
        """Build the URL the user's browser is sent to for consent.

        Accepts a bare ``state`` string (plus an optional *prompt*), a full
        :class:`~disauth.models.AuthorizeOptions`, or the options' fields as
        keyword arguments. No request is made.

        Examples::

            client.authorization_url("xyz123")
            client.authorization_url("xyz123", prompt="none")
            client.authorization_url(state="xyz123", code_challenge=pair.challenge)
            client.authorization_url(AuthorizeOptions(guild_id="42", permissions=8))

        Args:
            state_or_options: Opaque ``state`` value or an options object.
            prompt: Prompt override; the options' own ``prompt`` wins over it
                and the configured ``default_prompt`` is the fallback.
            **options: :class:`~disauth.models.AuthorizeOptions` fields, only
                when *state_or_options* is not an options object.

        Returns:
            The fully-qualified authorize URL.

        Raises:
            InvalidScopeError: If a per-call ``scopes`` override is invalid.
        """
        if isinstance(state_or_options, AuthorizeOptions):
            if options:
                raise TypeError("Pass either AuthorizeOptions or keyword options, not both")
            opts = state_or_options
        else:
            state = options.pop("state", None)
            if state is not None and state_or_options is not None:
                raise TypeError("state given both positionally and as a keyword")
            opts = AuthorizeOptions(state=state_or_options or state, **options)

        config = self._config
        resolved_prompt = opts.prompt or (Prompt(prompt) if prompt else config.default_prompt)
        scopes = opts.scopes if opts.scopes is not None else config.scopes

        params: dict[str, str] = {
            "response_type": opts.response_type.value,
            "client_id": config.client_id,
            "scope": " ".join(scopes),
            "redirect_uri": opts.redirect_uri or config.redirect_uri,
            "prompt": resolved_prompt.value,
        }

        if opts.state:
            params["state"] = opts.state

        if opts.code_challenge:
            params["code_challenge"] = opts.code_challenge
            method = opts.code_challenge_method or CodeChallengeMethod.S256
            params["code_challenge_method"] = method.value

        if opts.permissions is not None:
            params["permissions"] = str(opts.permissions)
        if opts.disable_guild_select is not None:
            params["disable_guild_select"] = "true" if opts.disable_guild_select else "false"
        if opts.guild_id:
            params["guild_id"] = opts.guild_id
        if opts.login_hint:
            params["login_hint"] = opts.login_hint

        return f"{config.authorize_url}?{urlencode(params)}"

    # ------------------------------------------------------------------ #
    # Form bodies
    # ------------------------------------------------------------------ #

    def _code_exchange_form(self, code: str, code_verifier: Optional[str]) -> dict[str, str]:
        data = {
            "client_id": self._config.client_id,
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self._config.redirect_uri,
        }
        if self._config.client_secret:
            data["client_secret"] = self._config.client_secret
        if code_verifier:
            data["code_verifier"] = code_verifier
        return data

    def _client_credentials_form(self, scopes: Optional[list[str]]) -> dict[str, str]:
        client_secret = self._require_client_secret("Client credentials flow")
        resolved = normalize_scopes(scopes) if scopes is not None else self._config.scopes
        return {
            "client_id": self._config.client_id,
            "client_secret": client_secret,
            "grant_type": "client_credentials",
            "scope": " ".join(resolved),
        }

    def _refresh_form(self, refresh_token: str) -> dict[str, str]:
        data = {
            "client_id": self._config.client_id,
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        }
        if self._config.client_secret:
            data["client_secret"] = self._config.client_secret
        return data

    def _revoke_form(
        self, token: str, token_type_hint: Union[TokenTypeHint, str, None]
    ) -> dict[str, str]:
        client_secret = self._require_client_secret("Token revocation")
        data = {
            "client_id": self._config.client_id,
            "client_secret": client_secret,
            "token": token,
        }
        if token_type_hint:
            data["token_type_hint"] = TokenTypeHint(token_type_hint).value
        return data

    def _require_client_secret(self, operation: str) -> str:
        if not self._config.client_secret:
            raise MissingClientSecretError(operation)
        return self._config.client_secret

    # ------------------------------------------------------------------ #
    # Request construction
    # ------------------------------------------------------------------ #

    def _resolve_api_url(self, path: str) -> str:
        """Absolute URLs pass through; relative paths are joined to the API base."""
        if _ABSOLUTE_URL.match(path):
            return path
        normalized = "/" + path.lstrip("/")
        return f"{self._config.api_base}{normalized}"

    def _bearer_headers(
        self, access_token: str, headers: Optional[Mapping[str, str]]
    ) -> dict[str, str]:
        merged = {
            key: value
            for key, value in (headers or {}).items()
            if key.lower() != "authorization"
        }
        merged["Authorization"] = f"Bearer {access_token}"
        return merged

    def _timeout(self) -> httpx.Timeout:
        return httpx.Timeout(None, read=self._config.request_timeout)

    def _request_kwargs(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        data: Optional[Mapping[str, Any]] = None,
        content: Union[str, bytes, None] = None,
    ) -> dict[str, Any]:
        """Assemble keyword arguments for ``httpx.Client.request``.

        ``User-Agent`` and ``Accept`` are defaults; caller headers replace
        them (case-insensitively).
        """
        caller = dict(headers or {})
        caller_keys = {key.lower() for key in caller}
        merged: dict[str, str] = {
            key: value
            for key, value in (
                ("User-Agent", self._config.user_agent),
                ("Accept", "application/json"),
            )
            if key.lower() not in caller_keys
        }
        merged.update(caller)

        kwargs: dict[str, Any] = {
            "method": method.upper(),
            "url": url,
            "headers": merged,
            "timeout": self._timeout(),
        }
        if params:
            kwargs["params"] = params
        bodies = {
            name: value
            for name, value in (("data", data), ("json", json), ("content", content))
            if value is not None
        }
        if len(bodies) > 1:
            raise TypeError(f"Pass only one request body, got: {', '.join(bodies)}")
        kwargs.update(bodies)
        return kwargs

    # ------------------------------------------------------------------ #
    # Response classification
    # ------------------------------------------------------------------ #

    def _handle_response(
        self,
        response: httpx.Response,
        url: str,
        method: str,
        expect_json: bool = True,
        oauth: bool = False,
    ) -> Any:
        """Turn *response* into a return value, or raise the matching error.

        Args:
            response: The fully-read response.
            url: The request URL, reported on errors.
            method: The request method, reported on errors.
            expect_json: When ``False`` the body is never parsed: a
                successful call returns ``None`` and an OAuth failure
                carries the raw text as ``error_description``.
            oauth: Classify failures as :class:`OAuthError` rather than
                :class:`HTTPError`.

        Returns:
            The parsed JSON body, or ``None`` when the body is empty, is not
            valid JSON, or is not expected.
        """
        raw = response.text
        parsed = _safe_parse(raw) if raw and expect_json else None

        if not response.is_success:
            logger.debug("%s %s -> %d", method, url, response.status_code)
            if oauth:
                raise OAuthError(
                    response.status_code, url, method, _oauth_payload(parsed, raw)
                )
            details = parsed if parsed is not None else ({"message": raw} if raw else None)
            raise HTTPError(response.status_code, url, method, details)

        return parsed

    def _to_model(
        self, model: type[ModelT], data: Any, url: str, method: str
    ) -> Optional[ModelT]:
        if data is None:
            return None
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise UnexpectedResponseError(url, method, model.__name__, data) from exc

    def _to_model_list(
        self, model: type[ModelT], data: Any, url: str, method: str
    ) -> Optional[list[ModelT]]:
        if data is None:
            return None
        if not isinstance(data, list):
            raise UnexpectedResponseError(url, method, f"list[{model.__name__}]", data)
        try:
            return [model.model_validate(item) for item in data]
        except ValidationError as exc:
            raise UnexpectedResponseError(
                url, method, f"list[{model.__name__}]", data
            ) from exc


def _safe_parse(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        return None


def _oauth_payload(parsed: Any, raw: str) -> OAuthErrorPayload:
    """Coerce an error body into an OAuth payload, synthesising one if needed."""
    if isinstance(parsed, dict):
        try:
            return OAuthErrorPayload.model_validate(parsed)
        except ValidationError:
            pass
    return OAuthErrorPayload(error="unknown_error", error_description=raw or None)
