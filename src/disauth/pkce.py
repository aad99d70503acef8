"""PKCE (:rfc:`7636`) verifier and challenge generation.

Independent of :class:`~disauth.client.Client`: generate a pair, put the
challenge into the authorize URL, keep the verifier for the code exchange.

Example::

    pair = generate_pkce_pair()
    url = client.authorization_url(
        AuthorizeOptions(state=state, code_challenge=pair.challenge)
    )
    # ... store pair.verifier in the user's session, then on callback:
    tokens = client.exchange_code(code, code_verifier=pair.verifier)
"""

from __future__ import annotations

import base64
import hashlib
import secrets

from disauth.constants import (
    PKCE_CHARSET,
    PKCE_DEFAULT_LENGTH,
    PKCE_MAX_LENGTH,
    PKCE_MIN_LENGTH,
)
from disauth.exceptions import PKCELengthError
from disauth.models import PKCEPair


def compute_challenge(verifier: str) -> str:
    """Return the S256 challenge for *verifier*: unpadded base64url of its SHA-256 digest."""
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def generate_pkce_pair(length: int = PKCE_DEFAULT_LENGTH) -> PKCEPair:
    """Generate a fresh PKCE verifier and its S256 challenge.

    Args:
        length: Verifier length, 43 to 128 inclusive.

    Returns:
        A new :class:`~disauth.models.PKCEPair`. Two calls never share a
        verifier in practice.

    Raises:
        PKCELengthError: If *length* is outside 43..128.
    """
    if not PKCE_MIN_LENGTH <= length <= PKCE_MAX_LENGTH:
        raise PKCELengthError(length)

    verifier = "".join(secrets.choice(PKCE_CHARSET) for _ in range(length))
    return PKCEPair(verifier=verifier, challenge=compute_challenge(verifier))
