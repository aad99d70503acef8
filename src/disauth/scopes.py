"""Scope validation against the provider's allow-list."""

from __future__ import annotations

from typing import Iterable, Optional

from disauth.constants import DEFAULT_SCOPES, DISCORD_OAUTH_SCOPES
from disauth.exceptions import InvalidScopeError

_ALLOWED = frozenset(DISCORD_OAUTH_SCOPES)


def normalize_scopes(scopes: Optional[Iterable[str]] = None) -> tuple[str, ...]:
    """Validate *scopes* and collapse duplicates.

    ``None`` and an empty iterable both fall back to
    :data:`~disauth.constants.DEFAULT_SCOPES`. The first occurrence of each
    scope fixes its position, so the result is stable across calls and
    ``normalize_scopes(normalize_scopes(x)) == normalize_scopes(x)``.

    Args:
        scopes: Scope tokens as given by the caller, or a single
            whitespace-separated string.

    Returns:
        A non-empty tuple of distinct, valid scope tokens.

    Raises:
        InvalidScopeError: If any token is not in the allow-list. Every
            offending token is reported, not just the first.
    """
    if isinstance(scopes, str):
        scopes = scopes.split()
    candidate = list(scopes) if scopes is not None else []
    if not candidate:
        candidate = list(DEFAULT_SCOPES)

    invalid = [scope for scope in candidate if scope not in _ALLOWED]
    if invalid:
        raise InvalidScopeError(dict.fromkeys(invalid))

    return tuple(dict.fromkeys(candidate))
