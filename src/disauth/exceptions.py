"""Exception hierarchy for disauth.

All exceptions inherit from :class:`DisauthError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`disauth.exit_codes`.
Library callers catch the specific classes; the ``disauth`` command catches
``DisauthError`` and exits with the appropriate code.

Subclass hierarchy::

    DisauthError (exit 1)
    +-- ConfigError               (exit 1)
    |   +-- InvalidScopeError
    |   +-- MissingClientSecretError
    |   +-- PKCELengthError
    +-- HTTPError                 (exit 5)
    |   +-- OAuthError            (exit 3)
    +-- TransportError            (exit 6)
    +-- UnexpectedResponseError   (exit 1)

Configuration errors are always raised before any network activity.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Optional

from disauth.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_HTTP_ERROR,
)

if TYPE_CHECKING:
    from disauth.models import OAuthErrorPayload


class DisauthError(Exception):
    """Base exception for all disauth errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(DisauthError):
    """Raised for configuration problems detected before any request is sent."""

    exit_code = EXIT_GENERIC_FAILURE


class InvalidScopeError(ConfigError):
    """Raised when one or more scopes are not in the provider's allow-list.

    Attributes:
        scopes: The offending scope tokens, in input order.
    """

    def __init__(self, scopes: Iterable[str]):
        self.scopes: tuple[str, ...] = tuple(scopes)
        super().__init__(f"Invalid Discord OAuth scope(s): {', '.join(self.scopes)}")


class MissingClientSecretError(ConfigError):
    """Raised when a secret-bearing operation is invoked without a client secret."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"{operation} requires a client secret.")


class PKCELengthError(ConfigError):
    """Raised when a PKCE verifier length falls outside 43..128."""

    def __init__(self, length: int):
        self.length = length
        super().__init__(
            f"PKCE verifier length must be between 43 and 128 (got {length})."
        )


class HTTPError(DisauthError):
    """Raised when the provider responds to a REST call with a non-2xx status.

    Attributes:
        status_code: The HTTP status code.
        url: The fully-qualified request URL.
        method: The HTTP method, upper-cased.
        details: The parsed JSON body, ``{"message": <raw text>}`` when the
            body was not JSON, or ``None`` when the body was empty.
    """

    exit_code = EXIT_HTTP_ERROR

    def __init__(
        self,
        status_code: int,
        url: str,
        method: str,
        details: Any = None,
        message: Optional[str] = None,
    ):
        self.status_code = status_code
        self.url = url
        self.method = method
        self.details = details
        super().__init__(message or f"{method} {url} failed with status {status_code}")


class OAuthError(HTTPError):
    """Raised when a token or revocation endpoint returns an error payload.

    ``details`` is always an :class:`~disauth.models.OAuthErrorPayload`.
    When the response body could not be parsed, the payload is synthesised
    as ``error="unknown_error"`` with the raw body as the description.
    """

    exit_code = EXIT_AUTH_FAILURE

    details: OAuthErrorPayload

    def __init__(
        self,
        status_code: int,
        url: str,
        method: str,
        details: OAuthErrorPayload,
    ):
        message = f"{method} {url} failed with status {status_code} ({details.error})"
        if details.error_description:
            message += f": {details.error_description}"
        super().__init__(status_code, url, method, details, message=message)

    @property
    def error(self) -> str:
        """Raw OAuth error code, e.g. ``invalid_grant``."""
        return self.details.error

    @property
    def description(self) -> Optional[str]:
        """Human-readable error description, when the provider sent one."""
        return self.details.error_description


class TransportError(DisauthError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    The originating :mod:`httpx` exception is available as ``__cause__``.
    """

    exit_code = EXIT_CONNECTION_ERROR

    def __init__(self, url: str, method: str, reason: str):
        self.url = url
        self.method = method
        super().__init__(f"{method} {url} failed: {reason}")


class UnexpectedResponseError(DisauthError):
    """Raised when a 2xx body does not have the shape of the expected resource.

    Only the typed helpers (token calls, ``get_user`` and friends) validate
    bodies; :meth:`~disauth.client.Client.api` returns whatever was sent.

    Attributes:
        details: The parsed body as received.
    """

    def __init__(self, url: str, method: str, expected: str, details: Any):
        self.url = url
        self.method = method
        self.details = details
        super().__init__(f"{method} {url} returned a body that is not a valid {expected}")
