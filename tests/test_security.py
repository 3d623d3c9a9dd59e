"""Tests for gametracker.core.security (PasswordHasher, TokenService)."""

import base64
import json
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from hypothesis import given, settings, strategies as st
from jose import jwt

from gametracker.core.errors import AuthError, ErrorCode, HashingError, InvalidTokenError, TokenFailure
from gametracker.core.security import Identity, PasswordHasher, TokenService


SECRET = "unit-secret"
passwords = st.text(alphabet=st.characters(min_codepoint=32, max_codepoint=126), max_size=50)


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def _b64(data: dict) -> str:
    raw = json.dumps(data).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


class TestPasswordHasher:
    hasher = PasswordHasher(rounds=4)

    def test_hash_is_not_plaintext(self):
        hashed = self.hasher.hash("password123")
        assert hashed
        assert hashed != "password123"
        assert hashed.startswith("$2")

    def test_empty_password_is_hashed(self):
        hashed = self.hasher.hash("")
        assert hashed
        assert self.hasher.verify("", hashed)
        assert not self.hasher.verify("password123", hashed)

    def test_wrong_and_empty_password_rejected(self):
        hashed = self.hasher.hash("password123")
        assert not self.hasher.verify("wrongpassword", hashed)
        assert not self.hasher.verify("", hashed)

    def test_same_password_gets_different_salts(self):
        assert self.hasher.hash("password123") != self.hasher.hash("password123")

    def test_malformed_hash_verifies_false(self):
        assert self.hasher.verify("password123", "not-a-bcrypt-hash") is False

    def test_default_cost_factor(self):
        assert PasswordHasher().rounds == 12

    def test_hashing_failure_is_raised(self):
        with patch("gametracker.core.security.bcrypt.hashpw", side_effect=RuntimeError("no entropy")):
            with pytest.raises(HashingError) as exc_info:
                self.hasher.hash("password123")
        assert exc_info.value.code is ErrorCode.HASHING_FAILED
        assert "entropy" not in exc_info.value.message

    @settings(max_examples=20, deadline=None)
    @given(password=passwords)
    def test_verify_accepts_own_hash(self, password):
        assert self.hasher.verify(password, self.hasher.hash(password))

    @settings(max_examples=20, deadline=None)
    @given(p1=passwords, p2=passwords)
    def test_verify_rejects_other_password(self, p1, p2):
        if p1 == p2:
            return
        assert not self.hasher.verify(p1, self.hasher.hash(p2))


class TestTokenService:
    def test_issue_then_validate(self):
        service = TokenService(SECRET)
        claims = service.validate(service.issue(42, "testuser"))
        assert claims["user_id"] == 42
        assert claims["username"] == "testuser"
        assert claims["exp"] - claims["iat"] == 7 * 24 * 3600

    def test_identity_round_trip(self):
        service = TokenService(SECRET)
        identity = service.extract_identity(service.validate(service.issue(7, "alice")))
        assert identity == Identity(user_id=7, username="alice")

    def test_valid_just_before_expiry(self):
        clock = FakeClock(datetime(2024, 1, 1, tzinfo=timezone.utc))
        service = TokenService(SECRET, clock=clock)
        token = service.issue(1, "alice")
        clock.now += timedelta(days=7) - timedelta(seconds=1)
        assert service.validate(token)["user_id"] == 1

    def test_expired_token_rejected(self):
        clock = FakeClock(datetime(2024, 1, 1, tzinfo=timezone.utc))
        service = TokenService(SECRET, clock=clock)
        token = service.issue(1, "alice")
        clock.now += timedelta(days=7)
        with pytest.raises(InvalidTokenError) as exc_info:
            service.validate(token)
        assert exc_info.value.reason is TokenFailure.EXPIRED
        assert exc_info.value.code is ErrorCode.INVALID_TOKEN

    def test_token_issued_eight_days_ago_rejected_by_real_clock(self):
        past = TokenService(SECRET, clock=lambda: datetime.now(timezone.utc) - timedelta(days=8))
        with pytest.raises(InvalidTokenError):
            TokenService(SECRET).validate(past.issue(1, "alice"))

    def test_wrong_secret_rejected(self):
        token = TokenService("other-secret").issue(1, "alice")
        with pytest.raises(InvalidTokenError) as exc_info:
            TokenService(SECRET).validate(token)
        assert exc_info.value.reason is TokenFailure.SIGNATURE

    def test_other_hmac_algorithm_rejected(self):
        now = int(datetime.now(timezone.utc).timestamp())
        token = jwt.encode(
            {"user_id": 1, "username": "alice", "iat": now, "exp": now + 3600},
            SECRET,
            algorithm="HS512",
        )
        with pytest.raises(InvalidTokenError) as exc_info:
            TokenService(SECRET).validate(token)
        assert exc_info.value.reason is TokenFailure.ALGORITHM

    def test_none_algorithm_rejected(self):
        now = int(datetime.now(timezone.utc).timestamp())
        header = _b64({"alg": "none", "typ": "JWT"})
        payload = _b64({"user_id": 1, "username": "alice", "iat": now, "exp": now + 3600})
        with pytest.raises(InvalidTokenError) as exc_info:
            TokenService(SECRET).validate(f"{header}.{payload}.")
        assert exc_info.value.reason is TokenFailure.ALGORITHM

    def test_garbage_rejected(self):
        with pytest.raises(InvalidTokenError) as exc_info:
            TokenService(SECRET).validate("not-a-token")
        assert exc_info.value.reason is TokenFailure.MALFORMED

    def test_missing_exp_rejected(self):
        token = jwt.encode({"user_id": 1, "username": "alice"}, SECRET, algorithm="HS256")
        with pytest.raises(InvalidTokenError) as exc_info:
            TokenService(SECRET).validate(token)
        assert exc_info.value.reason is TokenFailure.MALFORMED

    def test_non_hmac_algorithm_refused_at_construction(self):
        with pytest.raises(ValueError):
            TokenService(SECRET, algorithm="RS256")

    @pytest.mark.parametrize(
        "claims",
        [
            {"username": "alice"},
            {"user_id": 1},
            {"user_id": "1", "username": "alice"},
            {"user_id": True, "username": "alice"},
            {"user_id": 1, "username": 5},
        ],
    )
    def test_extract_identity_requires_typed_fields(self, claims):
        with pytest.raises(AuthError) as exc_info:
            TokenService.extract_identity(claims)
        assert exc_info.value.code is ErrorCode.MALFORMED_CLAIMS

    def test_tampered_payload_rejected(self):
        service = TokenService(SECRET)
        header, _, signature = service.issue(1, "alice").split(".")
        now = int(datetime.now(timezone.utc).timestamp())
        forged = _b64({"user_id": 99, "username": "mallory", "iat": now, "exp": now + 3600})
        with pytest.raises(InvalidTokenError) as exc_info:
            service.validate(f"{header}.{forged}.{signature}")
        assert exc_info.value.reason is TokenFailure.SIGNATURE

    def test_bad_claims_with_valid_signature_rejected(self):
        now = int(datetime.now(timezone.utc).timestamp())
        token = jwt.encode(
            {"user_id": 1, "username": "alice", "iat": "yesterday", "exp": now + 3600},
            SECRET,
            algorithm="HS256",
        )
        with pytest.raises(InvalidTokenError) as exc_info:
            TokenService(SECRET).validate(token)
        assert exc_info.value.reason is TokenFailure.MALFORMED

    def test_undecodable_signature_rejected(self):
        header, payload, _ = TokenService(SECRET).issue(1, "alice").split(".")
        with pytest.raises(InvalidTokenError) as exc_info:
            TokenService(SECRET).validate(f"{header}.{payload}.a")
        assert exc_info.value.reason is TokenFailure.MALFORMED
