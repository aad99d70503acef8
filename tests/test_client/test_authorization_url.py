"""Tests for authorization URL construction (no network)."""

from __future__ import annotations

from urllib.parse import parse_qs, urlsplit

import pytest

from disauth.client import Client
from disauth.exceptions import InvalidScopeError
from disauth.models import AuthorizeOptions, CodeChallengeMethod, OAuthConfig, Prompt
from disauth.pkce import generate_pkce_pair

ALWAYS = {"client_id", "scope", "redirect_uri", "response_type", "prompt"}
CONDITIONAL = {
    "state",
    "code_challenge",
    "code_challenge_method",
    "permissions",
    "disable_guild_select",
    "guild_id",
    "login_hint",
}


def _query(url: str) -> dict[str, str]:
    parsed = parse_qs(urlsplit(url).query, keep_blank_values=True)
    return {key: values[0] for key, values in parsed.items()}


@pytest.fixture
def client(config: OAuthConfig) -> Client:
    with Client(config) as c:
        yield c


class TestBareState:
    def test_base_url_and_always_present_params(self, client: Client) -> None:
        url = client.authorization_url()
        assert url.startswith("https://discord.com/oauth2/authorize?")

        query = _query(url)
        assert set(query) == ALWAYS
        assert query == {
            "response_type": "code",
            "client_id": "1234",
            "scope": "identify guilds",
            "redirect_uri": "http://localhost:3000/callback",
            "prompt": "consent",
        }

    def test_parameter_order(self, client: Client) -> None:
        query = urlsplit(client.authorization_url("xyz123")).query
        keys = [pair.split("=")[0] for pair in query.split("&")]
        assert keys == ["response_type", "client_id", "scope", "redirect_uri", "prompt", "state"]

    def test_scope_space_encoded_as_plus(self, client: Client) -> None:
        assert "scope=identify+guilds" in client.authorization_url()

    def test_state(self, client: Client) -> None:
        assert _query(client.authorization_url("xyz123"))["state"] == "xyz123"

    def test_empty_state_omitted(self, client: Client) -> None:
        assert "state" not in _query(client.authorization_url(""))

    def test_prompt_override(self, client: Client) -> None:
        assert _query(client.authorization_url("s", "none"))["prompt"] == "none"
        assert _query(client.authorization_url("s", Prompt.NONE))["prompt"] == "none"

    def test_default_prompt_from_config(self) -> None:
        with Client(
            client_id="1", redirect_uri="http://x/cb", default_prompt="none"
        ) as client:
            assert _query(client.authorization_url("s"))["prompt"] == "none"

    def test_deterministic(self, client: Client) -> None:
        assert client.authorization_url("abc") == client.authorization_url("abc")


class TestOptions:
    def test_every_conditional_param(self, client: Client) -> None:
        pair = generate_pkce_pair()
        url = client.authorization_url(
            AuthorizeOptions(
                state="st",
                prompt=Prompt.NONE,
                code_challenge=pair.challenge,
                permissions=8,
                disable_guild_select=True,
                guild_id="42",
                login_hint="nelly@example.com",
            )
        )
        query = _query(url)
        assert set(query) == ALWAYS | CONDITIONAL
        assert query["prompt"] == "none"
        assert query["code_challenge"] == pair.challenge
        assert query["code_challenge_method"] == "S256"
        assert query["permissions"] == "8"
        assert query["disable_guild_select"] == "true"
        assert query["guild_id"] == "42"
        assert query["login_hint"] == "nelly@example.com"

    @pytest.mark.parametrize("absent", sorted(CONDITIONAL - {"code_challenge_method"}))
    def test_conditional_params_only_when_supplied(self, client: Client, absent: str) -> None:
        values = {
            "state": "st",
            "code_challenge": "challenge",
            "permissions": "0",
            "disable_guild_select": False,
            "guild_id": "42",
            "login_hint": "hint",
        }
        values.pop(absent)
        query = _query(client.authorization_url(AuthorizeOptions(**values)))
        assert absent not in query
        if absent == "code_challenge":
            assert "code_challenge_method" not in query
        assert set(query) == ALWAYS | (CONDITIONAL - {absent}) - (
            {"code_challenge_method"} if absent == "code_challenge" else set()
        )

    def test_disable_guild_select_false_is_sent(self, client: Client) -> None:
        query = _query(client.authorization_url(disable_guild_select=False))
        assert query["disable_guild_select"] == "false"

    def test_permissions_zero_is_sent(self, client: Client) -> None:
        assert _query(client.authorization_url(permissions=0))["permissions"] == "0"

    def test_plain_challenge_method(self, client: Client) -> None:
        query = _query(
            client.authorization_url(
                code_challenge="abc", code_challenge_method=CodeChallengeMethod.PLAIN
            )
        )
        assert query["code_challenge_method"] == "plain"

    def test_keyword_options(self, client: Client) -> None:
        query = _query(client.authorization_url(state="st", guild_id="7"))
        assert query["state"] == "st"
        assert query["guild_id"] == "7"

    def test_state_keyword_with_challenge(self, client: Client) -> None:
        query = _query(client.authorization_url(state="xyz123", code_challenge="abc"))
        assert query["state"] == "xyz123"
        assert query["code_challenge"] == "abc"
        assert query["code_challenge_method"] == "S256"

    def test_state_keyword_with_prompt_argument(self, client: Client) -> None:
        query = _query(client.authorization_url(prompt="none", state="st"))
        assert query["state"] == "st"
        assert query["prompt"] == "none"

    def test_state_positional_and_keyword_conflict(self, client: Client) -> None:
        with pytest.raises(TypeError):
            client.authorization_url("a", state="b")

    def test_options_prompt_beats_argument(self, client: Client) -> None:
        url = client.authorization_url(AuthorizeOptions(prompt=Prompt.NONE), "consent")
        assert _query(url)["prompt"] == "none"

    def test_options_without_prompt_use_default(self, client: Client) -> None:
        assert _query(client.authorization_url(AuthorizeOptions(state="s")))["prompt"] == "consent"

    def test_response_type_token(self, client: Client) -> None:
        assert _query(client.authorization_url(response_type="token"))["response_type"] == "token"

    def test_options_object_and_keywords_conflict(self, client: Client) -> None:
        with pytest.raises(TypeError):
            client.authorization_url(AuthorizeOptions(), state="x")


class TestPerCallOverrides:
    def test_redirect_uri_override(self, client: Client) -> None:
        query = _query(client.authorization_url(redirect_uri="https://app.example.com/cb"))
        assert query["redirect_uri"] == "https://app.example.com/cb"

    def test_scopes_override(self, client: Client) -> None:
        query = _query(client.authorization_url(scopes=["email", "connections", "email"]))
        assert query["scope"] == "email connections"

    def test_invalid_scope_override(self, client: Client) -> None:
        with pytest.raises(InvalidScopeError):
            client.authorization_url(scopes=["identify", "nope"])

    def test_oauth_base_override(self) -> None:
        with Client(
            client_id="1",
            redirect_uri="http://x/cb",
            oauth_base_url="https://canary.discord.com",
        ) as client:
            assert client.authorization_url().startswith(
                "https://canary.discord.com/oauth2/authorize?"
            )
