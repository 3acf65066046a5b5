# app/services/auth.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import structlog
from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import PRINCIPAL_MODELS
from app.core.errors import ConflictError, InvalidCredentialsError
from app.core.result import Err, Ok, Result
from app.core.security import TokenService, hash_password, verify_password
from app.core.validation import validate_payload
from app.schemas.auth import (
    AdminCreateIn,
    EmailLoginIn,
    UserLoginIn,
    UserRegisterIn,
    VentureRegisterIn,
)

logger = structlog.get_logger()

REGISTER_SCHEMAS = {"user": UserRegisterIn, "venture": VentureRegisterIn, "admin": AdminCreateIn}
LOGIN_SCHEMAS = {"user": UserLoginIn, "venture": EmailLoginIn, "admin": EmailLoginIn}

# Users sign in with their phone number, everyone else with email.
LOGIN_FIELDS = {"user": "phone_number", "venture": "email", "admin": "email"}


@dataclass
class AuthSession:
    principal: Any
    access_token: str
    refresh_token: str


async def register(db: AsyncSession, kind: str, data: Mapping[str, Any]) -> Result[Any]:
    validated = validate_payload(REGISTER_SCHEMAS[kind], data)
    if isinstance(validated, Err):
        return validated
    fields = validated.value.model_dump()

    model = PRINCIPAL_MODELS[kind]
    unique = [model.email == fields["email"]]
    if kind == "user":
        unique.append(model.phone_number == fields["phone_number"])

    res = await db.execute(select(model.id).where(or_(*unique)))
    if res.first() is not None:
        return Err(ConflictError(f"{kind.capitalize()} already exists"))

    password = fields.pop("password")
    principal = model(**fields, password_hash=hash_password(password))

    try:
        db.add(principal)
        await db.commit()
        await db.refresh(principal)
    except IntegrityError:
        await db.rollback()
        return Err(ConflictError(f"{kind.capitalize()} already exists"))

    logger.info("principal_registered", kind=kind, principal_id=str(principal.id))
    return Ok(principal)


async def _store_refresh_token(db: AsyncSession, kind: str, principal_id, token: str | None) -> None:
    model = PRINCIPAL_MODELS[kind]
    await db.execute(
        update(model)
        .where(model.id == principal_id)
        .values(refresh_token=token)
        .execution_options(synchronize_session=False)
    )
    await db.commit()


async def issue_session(db: AsyncSession, tokens: TokenService, kind: str, principal) -> AuthSession:
    """Issue a fresh token pair and make its refresh token the only valid one."""
    access = tokens.issue_access_token(kind, principal)
    refresh = tokens.issue_refresh_token(kind, principal)
    await _store_refresh_token(db, kind, principal.id, refresh)
    return AuthSession(principal=principal, access_token=access, refresh_token=refresh)


async def login(
    db: AsyncSession,
    tokens: TokenService,
    kind: str,
    data: Mapping[str, Any],
) -> Result[AuthSession]:
    validated = validate_payload(LOGIN_SCHEMAS[kind], data)
    if isinstance(validated, Err):
        return validated
    body = validated.value

    model = PRINCIPAL_MODELS[kind]
    field = LOGIN_FIELDS[kind]
    res = await db.execute(select(model).where(getattr(model, field) == getattr(body, field)))
    principal = res.scalar_one_or_none()

    if not principal or not verify_password(body.password, principal.password_hash):
        logger.info("login_failed", kind=kind)
        return Err(InvalidCredentialsError())

    session = await issue_session(db, tokens, kind, principal)
    logger.info("login", kind=kind, principal_id=str(principal.id))
    return Ok(session)


async def refresh(db: AsyncSession, tokens: TokenService, kind: str, principal) -> Result[AuthSession]:
    session = await issue_session(db, tokens, kind, principal)
    logger.info("token_refreshed", kind=kind, principal_id=str(principal.id))
    return Ok(session)


async def logout(db: AsyncSession, kind: str, principal) -> Result[None]:
    await _store_refresh_token(db, kind, principal.id, None)
    logger.info("logout", kind=kind, principal_id=str(principal.id))
    return Ok(None)
