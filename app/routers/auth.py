from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core.deps import get_token_service, principal_dependency, refresh_dependency
from app.core.forms import read_payload
from app.core.responses import api_response
from app.core.result import unwrap
from app.core.security import TokenService
from app.schemas.auth import AdminOut, UserOut, VentureOut
from app.services import auth as auth_service

PRINCIPAL_OUT = {"user": UserOut, "admin": AdminOut, "venture": VentureOut}


def serialize_principal(kind: str, principal) -> dict:
    return PRINCIPAL_OUT[kind].model_validate(principal).to_json()


def _session_response(request: Request, kind: str, session, message: str) -> JSONResponse:
    response = api_response(
        {
            kind: serialize_principal(kind, session.principal),
            "accessToken": session.access_token,
            "refreshToken": session.refresh_token,
        },
        message,
    )
    secure = request.app.state.settings.COOKIE_SECURE
    response.set_cookie("accessToken", session.access_token, httponly=True, secure=secure, samesite="lax")
    response.set_cookie("refreshToken", session.refresh_token, httponly=True, secure=secure, samesite="lax")
    return response


def build_auth_router(kind: str, prefix: str, *, tag: str, allow_register: bool = True) -> APIRouter:
    """Register/login/refresh/logout/profile routes for one principal kind."""
    router = APIRouter(prefix=prefix, tags=[tag])
    require_principal = principal_dependency(kind)
    require_refresh = refresh_dependency(kind)
    label = kind.capitalize()

    if allow_register:

        @router.post("/register")
        async def register(request: Request, db: AsyncSession = Depends(get_db)):
            data = await read_payload(request)
            principal = unwrap(await auth_service.register(db, kind, data))
            return api_response(
                serialize_principal(kind, principal), f"{label} registered successfully", 201
            )

    @router.post("/login")
    async def login(
        request: Request,
        db: AsyncSession = Depends(get_db),
        tokens: TokenService = Depends(get_token_service),
    ):
        data = await read_payload(request)
        session = unwrap(await auth_service.login(db, tokens, kind, data))
        return _session_response(request, kind, session, f"{label} logged in successfully")

    @router.post("/refresh-token")
    async def refresh_token(
        request: Request,
        db: AsyncSession = Depends(get_db),
        tokens: TokenService = Depends(get_token_service),
        principal=Depends(require_refresh),
    ):
        session = unwrap(await auth_service.refresh(db, tokens, kind, principal))
        return _session_response(request, kind, session, "Access token refreshed")

    @router.post("/logout")
    async def logout(
        db: AsyncSession = Depends(get_db),
        principal=Depends(require_principal),
    ):
        unwrap(await auth_service.logout(db, kind, principal))
        response = api_response({}, f"{label} logged out successfully")
        response.delete_cookie("accessToken")
        response.delete_cookie("refreshToken")
        return response

    @router.get("/profile")
    async def profile(principal=Depends(require_principal)):
        return api_response(serialize_principal(kind, principal), f"{label} profile fetched")

    return router


users_router = build_auth_router("user", "/users", tag="Users")
ventures_router = build_auth_router("venture", "/ventures", tag="Ventures")
