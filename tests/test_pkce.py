"""Tests for PKCE verifier/challenge generation."""

from __future__ import annotations

import base64
import hashlib

import pytest

from disauth.constants import PKCE_CHARSET
from disauth.exceptions import ConfigError, PKCELengthError
from disauth.pkce import compute_challenge, generate_pkce_pair


class TestGeneratePkcePair:
    def test_default_length_is_96(self) -> None:
        pair = generate_pkce_pair()
        assert len(pair.verifier) == 96

    @pytest.mark.parametrize("length", [43, 64, 128])
    def test_requested_length_is_honoured(self, length: int) -> None:
        assert len(generate_pkce_pair(length).verifier) == length

    def test_verifier_uses_unreserved_alphabet(self) -> None:
        assert len(PKCE_CHARSET) == 66
        for _ in range(20):
            pair = generate_pkce_pair(128)
            assert set(pair.verifier) <= set(PKCE_CHARSET)

    def test_challenge_is_unpadded_base64url_sha256(self) -> None:
        for _ in range(20):
            pair = generate_pkce_pair()
            digest = hashlib.sha256(pair.verifier.encode("ascii")).digest()
            expected = base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")
            assert pair.challenge == expected
            assert "=" not in pair.challenge
            assert "+" not in pair.challenge
            assert "/" not in pair.challenge
            assert len(pair.challenge) == 43

    def test_method_is_s256(self) -> None:
        assert generate_pkce_pair().method == "S256"

    def test_consecutive_calls_differ(self) -> None:
        assert generate_pkce_pair().verifier != generate_pkce_pair().verifier

    @pytest.mark.parametrize("length", [0, 42, 129, 256])
    def test_out_of_range_length_rejected(self, length: int) -> None:
        with pytest.raises(PKCELengthError) as exc_info:
            generate_pkce_pair(length)
        assert exc_info.value.length == length
        assert "between 43 and 128" in str(exc_info.value)

    def test_length_error_is_a_config_error(self) -> None:
        with pytest.raises(ConfigError):
            generate_pkce_pair(42)


class TestComputeChallenge:
    def test_rfc7636_appendix_b_vector(self) -> None:
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
        assert compute_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"
