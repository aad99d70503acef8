"""Typer application and entry point for the ``disauth`` command.

A developer tool over the library: build authorize URLs, generate PKCE
pairs, run the token lifecycle by hand, and poke the REST API with a
bearer token. Application credentials come from ``DISAUTH_*`` environment
variables (see :mod:`disauth.config`) or the global options.

Typical session::

    export DISAUTH_CLIENT_ID=1234 DISAUTH_CLIENT_SECRET=env:MY_SECRET
    export DISAUTH_REDIRECT_URI=http://localhost:3000/callback
    disauth url --state xyz123 --pkce   # open the URL, copy ?code=...
    disauth exchange <code> --verifier <verifier>
    disauth me --token <access_token>

Library errors are reported on stderr and mapped to the exit codes in
:mod:`disauth.exit_codes`.
"""

from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Iterator, Optional

import typer

from disauth import __version__
from disauth.exceptions import DisauthError, OAuthError
from disauth.exit_codes import EXIT_INVALID_USAGE
from disauth.models import Prompt, ResponseType, TokenResponse, TokenTypeHint
from disauth.output import (
    OutputFormat,
    OutputManager,
    configure_logging,
    debug,
    error,
    get_output,
    info,
    set_output,
    success,
    suggest,
    warning,
)

if TYPE_CHECKING:
    from disauth.client import Client

app = typer.Typer(
    name="disauth",
    help="Discord OAuth2 helper: authorize URLs, PKCE, token lifecycle and REST calls.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"disauth {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True,
        help="Show version and exit.",
    ),
    client_id: Optional[str] = typer.Option(
        None, "--client-id", help="Application id [env: DISAUTH_CLIENT_ID]."
    ),
    client_secret: Optional[str] = typer.Option(
        None, "--client-secret",
        help="Secret, or env:VAR / file:PATH / prompt [env: DISAUTH_CLIENT_SECRET].",
    ),
    redirect_uri: Optional[str] = typer.Option(
        None, "--redirect-uri", help="Redirect URI [env: DISAUTH_REDIRECT_URI]."
    ),
    scope: Optional[list[str]] = typer.Option(
        None, "--scope", "-s", help="Scope to request; repeatable [env: DISAUTH_SCOPES]."
    ),
    api_base_url: Optional[str] = typer.Option(
        None, "--api-base-url", help="REST base URL override."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Read timeout in seconds."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log HTTP requests to stderr."),
) -> None:
    """Install the output manager and stash configuration overrides in ``ctx.obj``."""
    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["config"] = {
        "client_id": client_id,
        "client_secret": client_secret,
        "redirect_uri": redirect_uri,
        "scopes": scope or None,
        "api_base_url": api_base_url,
        "request_timeout": timeout,
    }


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


@contextmanager
def _handle_errors() -> Iterator[None]:
    """Report library errors on stderr and exit with their code."""
    try:
        yield
    except OAuthError as exc:
        error(str(exc))
        if exc.error in ("invalid_grant", "invalid_client"):
            suggest("Codes are single-use and expire quickly; start again with: disauth url")
        raise typer.Exit(code=exc.exit_code) from None
    except DisauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _make_client(ctx: typer.Context) -> Client:
    from disauth.client import Client
    from disauth.config import load_config

    config = load_config(**ctx.obj["config"])
    debug(f"client_id={config.client_id} scopes={' '.join(config.scopes)}")
    debug(f"token endpoint: {config.token_url}")
    return Client(config)


def _print_tokens(tokens: Optional[TokenResponse]) -> None:
    if tokens is None:
        info("Token endpoint returned an empty body.")
        return
    get_output().format_response(tokens.model_dump(exclude_none=True))


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("url")
def url_command(
    ctx: typer.Context,
    state: Optional[str] = typer.Option(None, "--state", help="Opaque state value."),
    prompt: Optional[Prompt] = typer.Option(None, "--prompt", help="consent or none."),
    pkce: bool = typer.Option(False, "--pkce", help="Generate a PKCE pair and add its challenge."),
    pkce_length: int = typer.Option(96, "--pkce-length", help="PKCE verifier length (43-128)."),
    response_type: ResponseType = typer.Option(ResponseType.CODE, "--response-type"),
    permissions: Optional[str] = typer.Option(None, "--permissions", help="Bot permission bitfield."),
    guild_id: Optional[str] = typer.Option(None, "--guild-id", help="Preselect a guild."),
    disable_guild_select: bool = typer.Option(
        False, "--disable-guild-select", help="Lock the guild picker to --guild-id."
    ),
    login_hint: Optional[str] = typer.Option(None, "--login-hint"),
    redirect_uri: Optional[str] = typer.Option(
        None, "--redirect", help="Redirect URI for this URL only."
    ),
) -> None:
    """Print an authorization URL (no request is sent)."""
    from disauth.models import AuthorizeOptions
    from disauth.pkce import generate_pkce_pair

    if disable_guild_select and not guild_id:
        warning("--disable-guild-select has no effect without --guild-id.")

    with _handle_errors(), _make_client(ctx) as client:
        pair = generate_pkce_pair(pkce_length) if pkce else None
        options = AuthorizeOptions(
            state=state,
            prompt=prompt,
            response_type=response_type,
            code_challenge=pair.challenge if pair else None,
            permissions=permissions,
            guild_id=guild_id,
            disable_guild_select=disable_guild_select or None,
            login_hint=login_hint,
            redirect_uri=redirect_uri,
        )
        url = client.authorization_url(options)

    output = get_output()
    if output.format == OutputFormat.JSON:
        payload: dict[str, Any] = {"url": url}
        if pair:
            payload["code_verifier"] = pair.verifier
        output.format_response(payload)
        return

    output.print_data(url)
    if pair:
        info(f"PKCE verifier: {pair.verifier}")
        suggest(f"After consent: disauth exchange <code> --verifier {pair.verifier}")


@app.command("pkce")
def pkce_command(
    length: int = typer.Option(96, "--length", "-l", help="Verifier length (43-128)."),
) -> None:
    """Generate a PKCE verifier/challenge pair."""
    from disauth.pkce import generate_pkce_pair

    with _handle_errors():
        pair = generate_pkce_pair(length)
    get_output().format_response(pair.model_dump())


@app.command("exchange")
def exchange_command(
    ctx: typer.Context,
    code: str = typer.Argument(help="Authorization code from the redirect."),
    verifier: Optional[str] = typer.Option(None, "--verifier", help="PKCE code verifier."),
) -> None:
    """Exchange an authorization code for tokens."""
    with _handle_errors():
        with _make_client(ctx) as client:
            tokens = client.exchange_code(code, code_verifier=verifier)
    _print_tokens(tokens)


@app.command("refresh")
def refresh_command(
    ctx: typer.Context,
    refresh_token: str = typer.Argument(help="Refresh token."),
) -> None:
    """Trade a refresh token for a new access token."""
    with _handle_errors():
        with _make_client(ctx) as client:
            tokens = client.refresh_token(refresh_token)
    _print_tokens(tokens)


@app.command("credentials")
def credentials_command(
    ctx: typer.Context,
    scope: Optional[list[str]] = typer.Option(
        None, "--scope", "-s", help="Scope override; repeatable."
    ),
) -> None:
    """Obtain an application token with the client credentials grant."""
    with _handle_errors():
        with _make_client(ctx) as client:
            tokens = client.exchange_client_credentials(scope or None)
    _print_tokens(tokens)


@app.command("revoke")
def revoke_command(
    ctx: typer.Context,
    token: str = typer.Argument(help="Access or refresh token to revoke."),
    hint: Optional[TokenTypeHint] = typer.Option(None, "--hint", help="Token type hint."),
) -> None:
    """Revoke an access or refresh token."""
    with _handle_errors():
        with _make_client(ctx) as client:
            client.revoke_token(token, token_type_hint=hint)
    success("Token revoked.")


def _token_option() -> Any:
    return typer.Option(
        ..., "--token", "-t", envvar="DISAUTH_ACCESS_TOKEN", help="Bearer access token."
    )


@app.command("me")
def me_command(ctx: typer.Context, token: str = _token_option()) -> None:
    """Show the authenticated user."""
    with _handle_errors():
        with _make_client(ctx) as client:
            user = client.get_user(token)
    if user is not None:
        get_output().format_response(user.model_dump(exclude_none=True))


@app.command("guilds")
def guilds_command(ctx: typer.Context, token: str = _token_option()) -> None:
    """List the user's guilds."""
    with _handle_errors():
        with _make_client(ctx) as client:
            guilds = client.get_guilds(token) or []

    output = get_output()
    if output.format == OutputFormat.JSON:
        output.format_response([guild.model_dump(exclude_none=True) for guild in guilds])
        return
    output.print_table(
        ["id", "name", "owner", "permissions"],
        [[g.id, g.name, "yes" if g.owner else "", g.permissions] for g in guilds],
        title="Guilds",
    )


@app.command("connections")
def connections_command(ctx: typer.Context, token: str = _token_option()) -> None:
    """List the user's linked connections."""
    with _handle_errors():
        with _make_client(ctx) as client:
            connections = client.get_connections(token) or []

    output = get_output()
    if output.format == OutputFormat.JSON:
        output.format_response([c.model_dump(exclude_none=True) for c in connections])
        return
    output.print_table(
        ["type", "name", "id", "verified"],
        [[c.type, c.name, c.id, "yes" if c.verified else "no"] for c in connections],
        title="Connections",
    )


@app.command("api")
def api_command(
    ctx: typer.Context,
    path: str = typer.Argument(help="API path (e.g. /users/@me) or absolute URL."),
    token: str = _token_option(),
    method: str = typer.Option("GET", "--method", "-X", help="HTTP method."),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="JSON request body."),
) -> None:
    """Call any REST endpoint with a bearer token."""
    body: Any = None
    if data is not None:
        try:
            body = json.loads(data)
        except json.JSONDecodeError as exc:
            error(f"--data is not valid JSON: {exc}")
            raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    with _handle_errors():
        with _make_client(ctx) as client:
            result = client.api(path, token, method=method, json=body)
    if result is not None:
        get_output().format_response(result)


def main() -> None:
    """Console-script entry point."""
    try:
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
