import uuid
from datetime import datetime, timedelta, timezone

import jwt  # PyJWT
import pytest

from daydev_utils.auth.jwt_service import (
    ALGORITHM,
    InvalidTokenError,
    JWTService,
    RegisteredClaims,
    TokenExpiredError,
    generate_token,
)

SECRET = "test-secret-key-at-least-256-bits-long-for-security"


@pytest.fixture
def jwt_service():
    return JWTService(secret_key=SECRET)


class TestGenerateToken:

    def test_signs_mapping_with_hs256(self):
        token = generate_token(SECRET, {"sub": "user123", "role": "admin"})

        header = jwt.get_unverified_header(token)
        assert header["alg"] == "HS256"
        assert ALGORITHM == "HS256"

        decoded = jwt.decode(token, SECRET, algorithms=["HS256"])
        assert decoded == {"sub": "user123", "role": "admin"}

    def test_signs_registered_claims(self):
        exp = datetime.now(timezone.utc) + timedelta(minutes=5)
        claims = RegisteredClaims(iss="daydev", sub="user123", exp=exp, scope="read")

        token = generate_token(SECRET.encode("utf-8"), claims)
        decoded = jwt.decode(token, SECRET, algorithms=["HS256"])

        assert decoded["iss"] == "daydev"
        assert decoded["sub"] == "user123"
        assert decoded["scope"] == "read"
        assert decoded["exp"] == int(exp.timestamp())
        # unset claims are omitted
        assert "aud" not in decoded
        assert "jti" not in decoded

    def test_no_claim_validation_on_sign(self):
        """Already expired claims are still signed."""
        past = datetime.now(timezone.utc) - timedelta(hours=1)
        token = generate_token(SECRET, {"exp": past})
        assert token.count(".") == 2

    @pytest.mark.parametrize("secret", ["", b""])
    def test_empty_secret(self, secret):
        with pytest.raises(InvalidTokenError):
            generate_token(secret, {"sub": "user123"})

    def test_unencodable_claims(self):
        with pytest.raises(InvalidTokenError):
            generate_token(SECRET, {"sub": "user123", "blob": object()})


class TestJWTService:

    def test_create_token(self, jwt_service):
        start_time = datetime.now(timezone.utc)
        token, token_id = jwt_service.create_token(
            "user123", expires_delta=timedelta(minutes=15), issuer="daydev", role="admin"
        )

        decoded = jwt.decode(token, SECRET, algorithms=["HS256"])
        assert decoded["sub"] == "user123"
        assert decoded["iss"] == "daydev"
        assert decoded["role"] == "admin"
        assert decoded["jti"] == token_id
        uuid.UUID(token_id)

        exp_dt = datetime.fromtimestamp(decoded["exp"], tz=timezone.utc)
        expected = start_time + timedelta(minutes=15)
        assert expected - timedelta(seconds=2) <= exp_dt <= expected + timedelta(seconds=2)

    def test_create_token_default_expiry(self, jwt_service, monkeypatch):
        monkeypatch.setenv("DAYDEV_JWT_EXPIRE_MINUTES", "5")
        token, _ = jwt_service.create_token("user123")
        decoded = jwt_service.decode_token(token)
        assert decoded["exp"] - decoded["iat"] in (300, 301)

    def test_secret_from_settings(self, monkeypatch):
        monkeypatch.setenv("DAYDEV_JWT_SECRET", "settings-secret-that-is-long-enough-for-hs256")
        service = JWTService()

        token = service.sign({"sub": "user123"})
        decoded = jwt.decode(
            token, "settings-secret-that-is-long-enough-for-hs256", algorithms=["HS256"]
        )
        assert decoded["sub"] == "user123"

    def test_decode_token_valid(self, jwt_service):
        token, _ = jwt_service.create_token("user123")
        payload = jwt_service.decode_token(token)
        assert payload["sub"] == "user123"

    def test_decode_token_invalid(self, jwt_service):
        with pytest.raises(InvalidTokenError):
            jwt_service.decode_token("invalid_token")

    def test_decode_token_wrong_secret(self, jwt_service):
        token = generate_token("another-secret-that-is-long-enough-for-hs256", {"sub": "x"})
        with pytest.raises(InvalidTokenError):
            jwt_service.decode_token(token)

    def test_decode_token_expired(self, jwt_service):
        token, _ = jwt_service.create_token("user123", expires_delta=timedelta(seconds=-10))
        with pytest.raises(TokenExpiredError):
            jwt_service.decode_token(token)

    def test_decode_token_audience(self, jwt_service):
        token = jwt_service.sign(RegisteredClaims(sub="user123", aud="billing"))

        assert jwt_service.decode_token(token, audience="billing")["aud"] == "billing"
        with pytest.raises(InvalidTokenError):
            jwt_service.decode_token(token, audience="reports")
        with pytest.raises(InvalidTokenError):
            jwt_service.decode_token(token)
