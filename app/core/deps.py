from __future__ import annotations

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import defer

from app.core.db import get_db
from app.core.errors import (
    InvalidTokenError,
    MissingTokenError,
    PrincipalNotFoundError,
    RefreshTokenMismatchError,
)
from app.core.ids import parse_id
from app.core.result import Err, unwrap
from app.core.security import TokenService
from app.models.admin import Admin
from app.models.user import User
from app.models.venture import Venture

PRINCIPAL_MODELS = {"user": User, "admin": Admin, "venture": Venture}
LOGIN_URLS = {"user": "/users/login", "admin": "/admin/login", "venture": "/ventures/login"}

_schemes = {
    kind: OAuth2PasswordBearer(tokenUrl=url, scheme_name=f"{kind}_bearer", auto_error=False)
    for kind, url in LOGIN_URLS.items()
}


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


async def _load_principal(db: AsyncSession, kind: str, claims: dict, *, with_refresh: bool = False):
    principal_id = parse_id(claims.get("sub"))
    if isinstance(principal_id, Err):
        raise InvalidTokenError("Token missing principal id")

    model = PRINCIPAL_MODELS[kind]
    stmt = select(model).where(model.id == principal_id.value)
    if not with_refresh:
        stmt = stmt.options(defer(model.refresh_token, raiseload=True))

    res = await db.execute(stmt)
    principal = res.scalar_one_or_none()
    if principal is None:
        raise PrincipalNotFoundError(f"{kind.capitalize()} not found")
    return principal


async def authenticate(request: Request, kind: str, token: str | None, db: AsyncSession):
    if not token:
        raise MissingTokenError()

    claims = unwrap(get_token_service(request).verify_access(token, kind))
    principal = await _load_principal(db, kind, claims)

    request.state.principal = principal
    request.state.principal_kind = kind
    return principal


def principal_dependency(kind: str):
    scheme = _schemes[kind]

    async def dependency(
        request: Request,
        token: str | None = Depends(scheme),
        db: AsyncSession = Depends(get_db),
    ):
        return await authenticate(request, kind, token, db)

    dependency.__name__ = f"require_{kind}"
    return dependency


def refresh_dependency(kind: str):
    async def dependency(request: Request, db: AsyncSession = Depends(get_db)):
        token = request.headers.get("x-refresh-token") or request.cookies.get("refreshToken")
        if not token:
            raise MissingTokenError("Refresh token missing")

        claims = unwrap(get_token_service(request).verify_refresh(token, kind))
        principal = await _load_principal(db, kind, claims, with_refresh=True)

        # Signature alone is not enough: the token must be the one currently stored.
        if principal.refresh_token != token:
            raise RefreshTokenMismatchError()

        request.state.principal = principal
        request.state.principal_kind = kind
        return principal

    dependency.__name__ = f"require_{kind}_refresh"
    return dependency


require_user = principal_dependency("user")
require_admin = principal_dependency("admin")
require_venture = principal_dependency("venture")

require_user_refresh = refresh_dependency("user")
require_admin_refresh = refresh_dependency("admin")
require_venture_refresh = refresh_dependency("venture")


async def coupon_reject_guard(
    request: Request,
    token: str | None = Depends(_schemes["admin"]),
    db: AsyncSession = Depends(get_db),
):
    if not request.app.state.settings.COUPON_REJECT_REQUIRES_ADMIN:
        return None
    return await authenticate(request, "admin", token, db)
