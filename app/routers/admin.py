from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core.deps import require_admin
from app.core.forms import read_payload
from app.core.responses import api_response
from app.core.result import unwrap
from app.routers.auth import build_auth_router, serialize_principal
from app.services import auth as auth_service

# Admins cannot self-register; an existing admin creates them.
router = build_auth_router("admin", "/admin", tag="Admin", allow_register=False)


@router.post("/admins")
async def create_admin(
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin_user=Depends(require_admin),
):
    data = await read_payload(request)
    admin = unwrap(await auth_service.register(db, "admin", data))
    return api_response(serialize_principal("admin", admin), "Admin created successfully", 201)
