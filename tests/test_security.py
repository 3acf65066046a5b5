from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import jwt

from app.core.errors import ExpiredTokenError, InvalidTokenError
from app.core.result import Err, Ok
from app.core.security import TokenService, hash_password, verify_password


def _principal(**kw):
    return SimpleNamespace(id=uuid.uuid4(), email="a@example.com", **kw)


def test_password_hash_roundtrip():
    hashed = hash_password("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("wrong", hashed)


def test_verify_password_rejects_garbage_hash():
    assert verify_password("anything", "not-a-bcrypt-hash") is False


def test_access_token_carries_identity_claims(settings):
    tokens = TokenService(settings)
    principal = _principal(phone_number="9800000000")

    result = tokens.verify_access(tokens.issue_access_token("user", principal), "user")

    assert isinstance(result, Ok)
    assert result.value["sub"] == str(principal.id)
    assert result.value["email"] == "a@example.com"
    assert result.value["phone"] == "9800000000"
    assert result.value["type"] == "access"


def test_default_expiries(settings):
    tokens = TokenService(settings)
    principal = _principal()

    access = jwt.decode(tokens.issue_access_token("admin", principal), options={"verify_signature": False})
    refresh = jwt.decode(tokens.issue_refresh_token("admin", principal), options={"verify_signature": False})

    assert access["exp"] - access["iat"] == 24 * 60 * 60
    assert refresh["exp"] - refresh["iat"] == 30 * 24 * 60 * 60
    assert "email" not in refresh


def test_tokens_are_not_valid_across_roles(settings):
    tokens = TokenService(settings)
    token = tokens.issue_access_token("venture", _principal())

    result = tokens.verify_access(token, "user")

    assert isinstance(result, Err)
    assert isinstance(result.error, InvalidTokenError)


def test_refresh_token_is_not_an_access_token(settings):
    tokens = TokenService(settings)
    token = tokens.issue_refresh_token("user", _principal())

    assert isinstance(tokens.verify_access(token, "user"), Err)
    assert isinstance(tokens.verify_refresh(token, "user"), Ok)


def test_expired_token(settings):
    tokens = TokenService(settings)
    past = datetime.now(timezone.utc) - timedelta(hours=2)
    token = jwt.encode(
        {
            "sub": str(uuid.uuid4()),
            "type": "access",
            "iat": int(past.timestamp()),
            "exp": int((past + timedelta(minutes=5)).timestamp()),
        },
        settings.USER_ACCESS_TOKEN_SECRET,
        algorithm="HS256",
    )

    result = tokens.verify_access(token, "user")

    assert isinstance(result, Err)
    assert isinstance(result.error, ExpiredTokenError)


def test_malformed_token(settings):
    result = TokenService(settings).verify_access("not.a.jwt", "admin")
    assert isinstance(result, Err)
    assert isinstance(result.error, InvalidTokenError)


def test_rotated_tokens_differ(settings):
    tokens = TokenService(settings)
    principal = _principal()
    assert tokens.issue_refresh_token("user", principal) != tokens.issue_refresh_token("user", principal)
