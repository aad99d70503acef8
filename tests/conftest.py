"""Shared test fixtures for disauth.

Provides a baseline :class:`~disauth.models.OAuthConfig`, a recording
``httpx.MockTransport`` factory, and isolation of ``DISAUTH_*`` environment
variables and the global output manager.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Optional
from urllib.parse import parse_qs

import httpx
import pytest

from disauth.config import ENV_VARS
from disauth.models import OAuthConfig
from disauth.output import reset_output


# ---------------------------------------------------------------------------
# Isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear DISAUTH_* variables and reset the global OutputManager."""
    for var in [*ENV_VARS.values(), "DISAUTH_ACCESS_TOKEN", "NO_COLOR"]:
        monkeypatch.delenv(var, raising=False)
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def config() -> OAuthConfig:
    """A confidential application with two scopes."""
    return OAuthConfig(
        client_id="1234",
        client_secret="s3cret",
        redirect_uri="http://localhost:3000/callback",
        scopes=["identify", "guilds"],
    )


@pytest.fixture
def public_config() -> OAuthConfig:
    """A public (PKCE-only) application without a client secret."""
    return OAuthConfig(client_id="1234", redirect_uri="http://localhost:3000/callback")


# ---------------------------------------------------------------------------
# HTTP recording
# ---------------------------------------------------------------------------


class Recorder:
    """Collects requests seen by a MockTransport and replies with a canned response."""

    def __init__(
        self,
        status_code: int = 200,
        body: Any = None,
        text: Optional[str] = None,
        handler: Optional[Callable[[httpx.Request], httpx.Response]] = None,
    ) -> None:
        self.requests: list[httpx.Request] = []
        self._status_code = status_code
        self._body = body
        self._text = text
        self._handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._handler is not None:
            return self._handler(request)
        if self._text is not None:
            return httpx.Response(self._status_code, text=self._text)
        if self._body is None:
            return httpx.Response(self._status_code)
        return httpx.Response(self._status_code, json=self._body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def last(self) -> httpx.Request:
        assert self.requests, "no request was sent"
        return self.requests[-1]

    def form(self, index: int = -1) -> dict[str, str]:
        """Decode the form body of a recorded request into a flat dict."""
        parsed = parse_qs(self.requests[index].content.decode(), keep_blank_values=True)
        return {key: values[0] for key, values in parsed.items()}

    def json(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)


@pytest.fixture
def recorder_factory() -> Callable[..., Recorder]:
    """Build a :class:`Recorder`; keyword arguments set the canned response."""
    return Recorder
