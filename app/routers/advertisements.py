# app/routers/advertisements.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core.deps import require_admin, require_user, require_venture
from app.core.forms import read_payload, settle_uploads
from app.core.responses import api_response
from app.core.result import unwrap
from app.models.user import User
from app.models.venture import Venture
from app.schemas.advertisements import AnalyticsDay, serialize_advertisement
from app.services import advertisements as ad_service

router = APIRouter(prefix="/advertisements", tags=["Advertisements"])


def _listing_payload(listing: dict) -> dict:
    return {
        "total": listing["total"],
        "advertisements": [serialize_advertisement(a) for a in listing["advertisements"]],
    }


@router.post("/create")
async def create_advertisement(
    request: Request,
    db: AsyncSession = Depends(get_db),
    venture: Venture = Depends(require_venture),
):
    data = await read_payload(request, file_field="img", folder="advertisements")
    result = await ad_service.create_advertisement(db, data=data, creator_id=venture.id)
    ad = unwrap(await settle_uploads(request, result))
    return api_response(serialize_advertisement(ad), "Advertisement created successfully.", 201)


@router.delete("/delete/{ad_id}")
async def delete_advertisement(
    ad_id: str,
    db: AsyncSession = Depends(get_db),
    venture: Venture = Depends(require_venture),
):
    ad = unwrap(await ad_service.soft_delete_advertisement(db, ad_id=ad_id, actor_id=venture.id))
    return api_response(serialize_advertisement(ad), "Advertisement marked as deleted.")


@router.get("/venture/{venture_id}")
async def venture_advertisements(
    venture_id: str,
    db: AsyncSession = Depends(get_db),
    venture: Venture = Depends(require_venture),
):
    listing = unwrap(await ad_service.list_venture_advertisements(db, creator_id=venture_id))
    return api_response(_listing_payload(listing), "Venture advertisements fetched successfully.")


@router.get("/display-all")
async def display_all(db: AsyncSession = Depends(get_db)):
    listing = unwrap(await ad_service.list_advertisements(db))
    return api_response(_listing_payload(listing), "Advertisements fetched successfully.")


@router.get("/active")
async def display_active(db: AsyncSession = Depends(get_db)):
    listing = unwrap(await ad_service.list_advertisements(db, status="active"))
    return api_response(_listing_payload(listing), "Active advertisements fetched successfully.")


@router.get("/expired")
async def display_expired(db: AsyncSession = Depends(get_db)):
    listing = unwrap(await ad_service.list_advertisements(db, status="expired"))
    return api_response(_listing_payload(listing), "Expired advertisements fetched successfully.")


@router.get("/deleted")
async def display_deleted(
    db: AsyncSession = Depends(get_db),
    admin_user=Depends(require_admin),
):
    listing = unwrap(await ad_service.list_advertisements(db, status="deleted"))
    return api_response(_listing_payload(listing), "Deleted advertisements fetched successfully.")


@router.post("/view/{ad_id}")
async def view_advertisement(
    ad_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_user),
):
    ad = unwrap(await ad_service.record_view(db, ad_id=ad_id, user_id=user.id))
    return api_response(serialize_advertisement(ad), "Advertisement view recorded.")


@router.get("/analytics")
async def analytics(
    db: AsyncSession = Depends(get_db),
    admin_user=Depends(require_admin),
):
    days = unwrap(await ad_service.advertisement_analytics(db))
    return api_response(
        [AnalyticsDay.model_validate(d).to_json() for d in days],
        "Day-wise analytics data",
    )
