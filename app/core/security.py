from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from app.core.config import Settings
from app.core.errors import ExpiredTokenError, InvalidTokenError
from app.core.result import Err, Ok, Result


# -------------------------
# Password hashing (bcrypt)
# -------------------------
def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


# -------------------------
# JWT tokens
# -------------------------
class TokenService:
    """Issues and verifies access/refresh tokens, one secret pair per principal kind."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.access_ttl = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        self.refresh_ttl = timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)

    def _encode(self, claims: dict, secret: str, ttl: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "jti": uuid.uuid4().hex,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
        }
        return jwt.encode(payload, secret, algorithm=self.settings.JWT_ALG)

    def issue_access_token(self, kind: str, principal) -> str:
        claims = {"sub": str(principal.id), "kind": kind, "type": "access"}
        if getattr(principal, "email", None):
            claims["email"] = principal.email
        if getattr(principal, "phone_number", None):
            claims["phone"] = principal.phone_number
        return self._encode(claims, self.settings.access_secret(kind), self.access_ttl)

    def issue_refresh_token(self, kind: str, principal) -> str:
        claims = {"sub": str(principal.id), "kind": kind, "type": "refresh"}
        return self._encode(claims, self.settings.refresh_secret(kind), self.refresh_ttl)

    def verify(self, token: str, secret: str, token_type: str = "access") -> Result[dict]:
        try:
            payload = jwt.decode(token, secret, algorithms=[self.settings.JWT_ALG])
        except jwt.ExpiredSignatureError:
            return Err(ExpiredTokenError())
        except jwt.InvalidTokenError:
            return Err(InvalidTokenError(f"Invalid {token_type} token"))

        if payload.get("type") != token_type or not payload.get("sub"):
            return Err(InvalidTokenError(f"Invalid {token_type} token"))
        return Ok(payload)

    def verify_access(self, token: str, kind: str) -> Result[dict]:
        return self.verify(token, self.settings.access_secret(kind), "access")

    def verify_refresh(self, token: str, kind: str) -> Result[dict]:
        return self.verify(token, self.settings.refresh_secret(kind), "refresh")
